"""
Credential repository untuk AuthGate API.
Abstraksi akses Account dan IdentityBinding sehingga session manager
tidak bergantung langsung pada ORM.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from authgate.core.config import settings
from authgate.core.constants import IdentityProvider
from authgate.core.exceptions import (
    ConflictError,
    NotFoundError,
    ServiceUnavailableException
)
from authgate.models.account import Account, IdentityBinding

logger = logging.getLogger(__name__)


class CredentialRepository(ABC):
    """Kontrak credential store: lookup-by-binding, create-in-transaction, update."""

    @abstractmethod
    async def get_account_by_binding(
        self,
        provider: IdentityProvider,
        provider_key: str
    ) -> Optional[Account]:
        """Cari akun melalui identity binding. None jika binding belum ada."""

    @abstractmethod
    async def get_account(self, account_id: UUID) -> Optional[Account]:
        """Cari akun berdasarkan id."""

    @abstractmethod
    async def create_account_with_binding(
        self,
        provider: IdentityProvider,
        provider_key: str,
        *,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        password_hash: Optional[str] = None
    ) -> Account:
        """
        Buat Account beserta binding pertamanya dalam satu transaksi.

        Raises:
            ConflictError: Jika binding atau email/phone sudah dipakai
        """

    @abstractmethod
    async def update_account(self, account_id: UUID, **fields: Any) -> Account:
        """
        Update kolom akun.

        Raises:
            NotFoundError: Jika akun tidak ada
        """


class SqlAlchemyCredentialRepository(CredentialRepository):
    """Implementasi CredentialRepository di atas SQLAlchemy AsyncSession."""

    def __init__(self, session_factory: async_sessionmaker, timeout: Optional[float] = None):
        """
        Args:
            session_factory: Factory untuk AsyncSession
            timeout: Batas waktu per operasi (detik)
        """
        self.session_factory = session_factory
        self.timeout = timeout or settings.EXTERNAL_CALL_TIMEOUT_SECONDS

    async def _run(self, operation):
        try:
            return await asyncio.wait_for(operation, timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.error("Credential store operation timed out")
            raise ServiceUnavailableException("Credential store timed out")
        except IntegrityError:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Credential store error: {e}")
            raise ServiceUnavailableException("Credential store unavailable")

    async def get_account_by_binding(
        self,
        provider: IdentityProvider,
        provider_key: str
    ) -> Optional[Account]:
        async def _query():
            async with self.session_factory() as session:
                result = await session.execute(
                    select(Account)
                    .join(IdentityBinding, IdentityBinding.ib_account_id == Account.a_id)
                    .where(
                        IdentityBinding.ib_provider == provider,
                        IdentityBinding.ib_provider_key == provider_key
                    )
                )
                return result.scalars().first()

        return await self._run(_query())

    async def get_account(self, account_id: UUID) -> Optional[Account]:
        async def _query():
            async with self.session_factory() as session:
                return await session.get(Account, account_id)

        return await self._run(_query())

    async def create_account_with_binding(
        self,
        provider: IdentityProvider,
        provider_key: str,
        *,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        password_hash: Optional[str] = None
    ) -> Account:
        async def _create():
            async with self.session_factory() as session:
                async with session.begin():
                    account = Account(
                        a_email=email,
                        a_phone=phone,
                        a_password_hash=password_hash
                    )
                    account.bindings.append(
                        IdentityBinding(ib_provider=provider, ib_provider_key=provider_key)
                    )
                    session.add(account)
                return account

        try:
            account = await self._run(_create())
        except IntegrityError:
            logger.info(f"Identity binding conflict for provider {provider.value}")
            raise ConflictError(
                "Identity already registered",
                details={"provider": provider.value}
            )

        logger.info(f"Account created: {account.a_id} via {provider.value}")
        return account

    async def update_account(self, account_id: UUID, **fields: Any) -> Account:
        async def _update():
            async with self.session_factory() as session:
                async with session.begin():
                    account = await session.get(Account, account_id)
                    if account is None:
                        return None
                    account.update(**fields)
                return account

        try:
            account = await self._run(_update())
        except IntegrityError:
            raise ConflictError("Account update conflicts with existing data")

        if account is None:
            raise NotFoundError("Account not found")
        return account
