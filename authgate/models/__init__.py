"""
Models module untuk AuthGate API.
Import semua models di sini agar SQLAlchemy mendaftarkan mappers.
"""

from authgate.models.account import Account, IdentityBinding

__all__ = [
    "Account",
    "IdentityBinding",
]
