"""
Core module untuk AuthGate API.
Berisi komponen inti aplikasi seperti konfigurasi, keamanan, exceptions, dan konstanta.
"""

from authgate.core.config import settings
from authgate.core.exceptions import (
    AuthGateException,
    AuthenticationError,
    AuthorizationError,
    ValidationError,
    NotFoundError,
    ConflictError,
    RateLimitError,
    TokenError,
    ServiceUnavailableException
)

__all__ = [
    "settings",
    "AuthGateException",
    "AuthenticationError",
    "AuthorizationError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "RateLimitError",
    "TokenError",
    "ServiceUnavailableException"
]
