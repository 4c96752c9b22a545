"""
Main application entry point untuk AuthGate API.
Mengkonfigurasi FastAPI application dengan middleware, routers, dan exception handlers.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
import redis.asyncio as redis

from authgate.api.dependencies.services import ServiceContainer, build_container
from authgate.api.v1 import auth, health
from authgate.core.config import settings
from authgate.core.exceptions import AuthGateException
from authgate.db.session import SessionLocal, close_db, init_db
from authgate.middleware.error_handler import (
    ErrorHandlerMiddleware,
    authgate_exception_handler,
    http_exception_handler,
    validation_exception_handler
)
from authgate.middleware.logging import LoggingMiddleware
from authgate.services.notifications import create_notification_pool

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format=settings.LOG_FORMAT
)
logger = logging.getLogger(__name__)


async def _create_container() -> ServiceContainer:
    redis_client = redis.from_url(
        str(settings.REDIS_URL),
        encoding="utf-8",
        decode_responses=True,
        max_connections=settings.REDIS_POOL_SIZE,
        socket_timeout=settings.REDIS_SOCKET_TIMEOUT
    )

    try:
        notification_pool = await create_notification_pool()
    except Exception as e:
        # Notifikasi boleh hilang; API tetap jalan tanpa antrian
        logger.error(f"Notification queue unavailable: {e}")
        notification_pool = None

    return build_container(redis_client, SessionLocal, notification_pool=notification_pool)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Startup: database, Redis, antrian notifikasi, consumer event bus.
    Shutdown: kebalikannya.
    """
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    owns_container = getattr(app.state, "container", None) is None
    if owns_container:
        await init_db()
        app.state.container = await _create_container()

    container: ServiceContainer = app.state.container
    container.events.start()
    logger.info("Application startup complete")

    yield

    logger.info("Shutting down application")
    await container.events.stop()

    if owns_container:
        if container.notifications.pool is not None:
            await container.notifications.pool.aclose()
        await container.store.close()
        await close_db()
        app.state.container = None

    logger.info("Application shutdown complete")


def create_application(container: Optional[ServiceContainer] = None) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        container: Service container yang sudah dirakit (test). Jika None,
            lifespan membuatnya dari settings.

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title=settings.APP_NAME,
        description="Multi-credential authentication and session lifecycle API",
        version=settings.APP_VERSION,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        openapi_url="/openapi.json" if settings.DEBUG else None,
        lifespan=lifespan
    )
    app.state.container = container

    # Middleware (dieksekusi dalam urutan terbalik)
    app.add_middleware(ErrorHandlerMiddleware, debug=settings.DEBUG)
    app.add_middleware(
        LoggingMiddleware,
        log_request_body=settings.DEBUG,
        exclude_paths=["/health"]
    )

    # Exception handlers
    app.add_exception_handler(AuthGateException, authgate_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # Routers
    app.include_router(health.router)
    app.include_router(auth.router, prefix=settings.API_PREFIX)

    return app


# Create application instance
app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "authgate.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
