"""
Service wiring untuk FastAPI.
Semua collaborator dibuat sekali di lifespan dan disimpan di app.state.container.
"""

from dataclasses import dataclass
from typing import Optional

from arq import ArqRedis
from fastapi import Request
import redis.asyncio as redis
from sqlalchemy.ext.asyncio import async_sessionmaker

from authgate.repositories.credential import CredentialRepository, SqlAlchemyCredentialRepository
from authgate.services.auth import AuthService
from authgate.services.events import EventBus
from authgate.services.fraud import FraudSignalProcessor
from authgate.services.google import GoogleIdentityVerifier
from authgate.services.notifications import NotificationDispatcher
from authgate.services.otp import OtpService
from authgate.services.rate_limit import RateLimitService
from authgate.services.totp import TotpService
from authgate.storage.session_store import RedisSessionStore


@dataclass
class ServiceContainer:
    """Kumpulan collaborator yang di-share antar request."""
    redis: redis.Redis
    session_factory: async_sessionmaker
    store: RedisSessionStore
    repository: CredentialRepository
    events: EventBus
    notifications: NotificationDispatcher
    rate_limiter: RateLimitService
    totp_service: TotpService
    auth_service: AuthService
    fraud_processor: FraudSignalProcessor


def build_container(
    redis_client: redis.Redis,
    session_factory: async_sessionmaker,
    notification_pool: Optional[ArqRedis] = None,
    google_verifier: Optional[GoogleIdentityVerifier] = None,
    events: Optional[EventBus] = None
) -> ServiceContainer:
    """
    Rakit semua service dari client infrastruktur.

    Args:
        redis_client: Redis client (decode_responses=True)
        session_factory: SQLAlchemy async session factory
        notification_pool: arq pool untuk job notifikasi
        google_verifier: Override verifikator Google (test)
        events: Override event bus

    Returns:
        ServiceContainer siap pakai (consumer event bus belum di-start)
    """
    store = RedisSessionStore(redis_client)
    repository = SqlAlchemyCredentialRepository(session_factory)
    events = events or EventBus()
    notifications = NotificationDispatcher(notification_pool)
    totp_service = TotpService(repository)

    fraud_processor = FraudSignalProcessor(store)
    fraud_processor.register(events)

    auth_service = AuthService(
        repository=repository,
        store=store,
        events=events,
        notifications=notifications,
        otp_service=OtpService(store),
        totp_service=totp_service,
        google_verifier=google_verifier or GoogleIdentityVerifier()
    )

    return ServiceContainer(
        redis=redis_client,
        session_factory=session_factory,
        store=store,
        repository=repository,
        events=events,
        notifications=notifications,
        rate_limiter=RateLimitService(redis_client),
        totp_service=totp_service,
        auth_service=auth_service,
        fraud_processor=fraud_processor
    )


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


def get_auth_service(request: Request) -> AuthService:
    """Dependency: session manager."""
    return get_container(request).auth_service


def get_totp_service(request: Request) -> TotpService:
    """Dependency: TOTP engine."""
    return get_container(request).totp_service
