"""
AuthGate API - Multi-credential authentication dan session lifecycle service.

This package provides:
- Email/password registration and login (with timing-safe failure path)
- Phone OTP login with per-phone issuance caps
- Google ID-token login with just-in-time provisioning
- JWT access/refresh tokens with single-use refresh rotation
- TOTP second factor (setup, enable, login challenge)
- Asynchronous fraud signals driven by login events
- Queue-backed email/SMS notifications

Built with FastAPI, SQLAlchemy, and Redis.
"""

__version__ = "1.0.0"
__author__ = "AuthGate Team"
__license__ = "MIT"

__all__ = [
    "__version__",
    "__author__",
    "__license__",
]
