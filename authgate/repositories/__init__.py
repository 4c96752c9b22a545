"""
Repository layer untuk AuthGate API.
"""

from authgate.repositories.credential import (
    CredentialRepository,
    SqlAlchemyCredentialRepository
)

__all__ = [
    "CredentialRepository",
    "SqlAlchemyCredentialRepository",
]
