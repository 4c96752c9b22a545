"""
Notification worker (arq) untuk AuthGate API.
Jalankan dengan: python -m authgate.workers.run
"""
