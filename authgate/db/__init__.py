"""
Database module untuk AuthGate API.
Berisi base model, session management, dan konfigurasi database.
"""

from authgate.db.base import Base, BaseModel
from authgate.db.session import (
    engine,
    SessionLocal,
    create_engine,
    create_session_factory,
    init_db,
    close_db
)

__all__ = [
    "Base",
    "BaseModel",
    "engine",
    "SessionLocal",
    "create_engine",
    "create_session_factory",
    "init_db",
    "close_db"
]
