"""
Ephemeral storage untuk AuthGate API.
"""

from authgate.storage.session_store import SessionStore, RedisSessionStore

__all__ = [
    "SessionStore",
    "RedisSessionStore",
]
