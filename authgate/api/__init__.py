"""
API module untuk AuthGate API.
Berisi endpoints dan dependencies untuk API.
"""

from authgate.api.v1 import auth, health

__all__ = ["auth", "health"]
