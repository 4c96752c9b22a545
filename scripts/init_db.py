#!/usr/bin/env python
"""
Script untuk inisialisasi database AuthGate API.
Membuat tabel accounts dan identity_bindings.
Usage: python scripts/init_db.py
"""

import asyncio
import logging
import sys
from pathlib import Path

# Add parent directory to path
sys.path.append(str(Path(__file__).parent.parent))

from sqlalchemy import text

from authgate.core.config import settings
from authgate.db.session import SessionLocal, close_db, init_db

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

REQUIRED_TABLES = ("accounts", "identity_bindings")


async def create_extensions():
    """Create PostgreSQL extensions yang dipakai (skip untuk database lain)."""
    if not settings.DATABASE_URL.startswith("postgresql"):
        return
    async with SessionLocal() as session:
        await session.execute(text('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"'))
        await session.commit()
        logger.info("Created uuid-ossp extension")


async def verify_tables() -> bool:
    """Verify bahwa semua tabel yang dibutuhkan ada."""
    async with SessionLocal() as session:
        for table in REQUIRED_TABLES:
            try:
                await session.execute(text(f"SELECT 1 FROM {table} LIMIT 1"))
            except Exception as e:
                logger.warning(f"Missing table {table}: {e}")
                return False
    logger.info("All required tables exist")
    return True


async def main():
    logger.info("=== AuthGate API Database Initialization ===")

    try:
        await create_extensions()
        await init_db(create_tables=True)

        if not await verify_tables():
            raise RuntimeError("Table verification failed")

        logger.info("Database initialization completed successfully")
        logger.info("Start the API with 'uvicorn authgate.main:app --reload'")
        logger.info("Start the worker with 'python -m authgate.workers.run'")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        sys.exit(1)
    finally:
        await close_db()


if __name__ == "__main__":
    asyncio.run(main())
