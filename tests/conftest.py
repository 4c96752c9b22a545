"""
Pytest configuration and fixtures for AuthGate API tests.
"""

import os

# Settings dibaca saat import, jadi environment harus siap lebih dulu
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-authgate-0123456789abcdef")
os.environ.setdefault("ENCRYPTION_KEY", "test-encryption-key-for-authgate")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")
os.environ["ENVIRONMENT"] = "test"

from typing import AsyncGenerator, Dict
from unittest.mock import AsyncMock

import fakeredis.aioredis
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

import authgate.models  # noqa: F401  register mappers
from authgate.api.dependencies.services import ServiceContainer, build_container
from authgate.core.exceptions import AuthenticationError
from authgate.db.base import Base
from authgate.db.session import create_session_factory
from authgate.main import create_application
from authgate.services.events import EventBus
from authgate.services.google import GoogleIdentityVerifier, VerifiedIdentity
from authgate.storage.session_store import RedisSessionStore


TEST_PASSWORD = "Str0ng!Passw0rd"


class FakeGoogleVerifier(GoogleIdentityVerifier):
    """Verifier tanpa network: token dipetakan langsung ke identitas."""

    def __init__(self):
        super().__init__(client_id="test-client-id")
        self.identities: Dict[str, VerifiedIdentity] = {}

    def add(self, token: str, subject: str, email: str) -> None:
        self.identities[token] = VerifiedIdentity(subject=subject, email=email)

    async def verify(self, token: str) -> VerifiedIdentity:
        if token not in self.identities:
            raise AuthenticationError("Invalid Google ID token")
        return self.identities[token]


@pytest_asyncio.fixture
async def engine():
    """In-memory SQLite engine; satu koneksi di-share lewat StaticPool."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False}
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest_asyncio.fixture
async def redis_client():
    """Create a fake Redis client for testing."""
    client = fakeredis.aioredis.FakeRedis(decode_responses=True)
    yield client
    await client.aclose()


@pytest.fixture
def store(redis_client) -> RedisSessionStore:
    return RedisSessionStore(redis_client)


@pytest.fixture
def notification_pool() -> AsyncMock:
    """arq pool palsu; job yang di-enqueue bisa diperiksa lewat enqueue_job.call_args_list."""
    pool = AsyncMock()
    pool.enqueue_job = AsyncMock(return_value=None)
    return pool


@pytest.fixture
def google_verifier() -> FakeGoogleVerifier:
    return FakeGoogleVerifier()


@pytest_asyncio.fixture
async def container(
    redis_client,
    session_factory,
    notification_pool,
    google_verifier
) -> AsyncGenerator[ServiceContainer, None]:
    container = build_container(
        redis_client,
        session_factory,
        notification_pool=notification_pool,
        google_verifier=google_verifier,
        events=EventBus(maxsize=100)
    )
    container.events.start()

    yield container

    await container.events.stop(drain_timeout=1.0)


@pytest.fixture
def auth_service(container):
    return container.auth_service


@pytest.fixture
def app(container):
    return create_application(container)


@pytest_asyncio.fixture
async def async_client(app) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def registered_tokens(auth_service):
    """Akun email terdaftar beserta token pair pertamanya."""
    return await auth_service.register_with_email("user@example.com", TEST_PASSWORD)


@pytest.fixture
def enqueued_jobs(notification_pool):
    """Argumen job dengan nama tertentu yang di-enqueue ke pool palsu."""
    def _jobs(job_name: str) -> list:
        return [
            call.args[1:]
            for call in notification_pool.enqueue_job.call_args_list
            if call.args[0] == job_name
        ]
    return _jobs
