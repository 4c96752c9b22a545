"""
Health check endpoint untuk API v1.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text

from authgate.api.dependencies.services import ServiceContainer, get_container
from authgate.core.config import settings
from authgate.schemas.response import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(container: ServiceContainer = Depends(get_container)) -> HealthResponse:
    """
    Health check dengan dependency validation (database dan Redis).
    """
    database_ok = False
    try:
        async with container.session_factory() as session:
            await session.execute(text("SELECT 1"))
        database_ok = True
    except Exception as e:
        logger.error(f"Database health check failed: {e}")

    redis_ok = await container.store.ping()

    return HealthResponse(
        status="healthy" if database_ok and redis_ok else "degraded",
        version=settings.APP_VERSION,
        database=database_ok,
        redis=redis_ok
    )
