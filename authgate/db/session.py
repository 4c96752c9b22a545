"""
Database session management untuk AuthGate API.
Menggunakan SQLAlchemy dengan async support.
"""

from typing import Optional
import logging

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    AsyncEngine,
    create_async_engine,
    async_sessionmaker
)
from sqlalchemy.pool import NullPool
from sqlalchemy import text

from authgate.core.config import settings

logger = logging.getLogger(__name__)


def create_engine(database_url: Optional[str] = None) -> AsyncEngine:
    """
    Create async SQLAlchemy engine dengan konfigurasi sesuai environment.

    Args:
        database_url: Override URL (default: settings.DATABASE_URL)

    Returns:
        Configured AsyncEngine
    """
    url = database_url or settings.DATABASE_URL
    engine_args = {
        "echo": settings.DEBUG,
        "pool_pre_ping": settings.DB_POOL_PRE_PING,
    }

    if settings.ENVIRONMENT == "test" or url.startswith("sqlite"):
        engine_args["poolclass"] = NullPool
    else:
        engine_args["pool_size"] = settings.DB_POOL_SIZE
        engine_args["max_overflow"] = settings.DB_MAX_OVERFLOW
        engine_args["pool_timeout"] = 30
        engine_args["pool_recycle"] = 3600

    if url.startswith("postgresql+asyncpg"):
        engine_args["connect_args"] = {
            "server_settings": {
                "application_name": settings.APP_NAME,
                "jit": "off",
            },
            "command_timeout": 60,
        }

    return create_async_engine(url, **engine_args)


def create_session_factory(bind: AsyncEngine) -> async_sessionmaker:
    """Session factory standar: tanpa expire-on-commit dan autoflush manual."""
    return async_sessionmaker(
        bind=bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


# Global engine dan session factory
engine = create_engine()
SessionLocal = create_session_factory(engine)


async def init_db(create_tables: bool = False) -> None:
    """
    Initialize database.
    - Test connection
    - Create tables jika diminta

    Args:
        create_tables: Jalankan Base.metadata.create_all
    """
    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
            logger.info("Database connection successful")

            if create_tables:
                from authgate.db.base import Base
                import authgate.models  # noqa: F401  register mappers
                await conn.run_sync(Base.metadata.create_all)
                logger.info("Database tables created")

    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        raise


async def close_db() -> None:
    """
    Close database connections.
    Should be called on application shutdown.
    """
    await engine.dispose()
    logger.info("Database connections closed")

