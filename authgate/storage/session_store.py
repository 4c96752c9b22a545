"""
Ephemeral key-value store untuk AuthGate API.
Menyimpan session record, kode OTP, dan counter dengan TTL di Redis.
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from authgate.core.config import settings
from authgate.core.exceptions import ServiceUnavailableException

logger = logging.getLogger(__name__)


class SessionStore(ABC):
    """Kontrak store TTL: get/set/delete/delete-by-prefix plus counter."""

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Ambil value (JSON-decoded), None jika tidak ada atau expired."""

    @abstractmethod
    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        """Simpan value dengan TTL."""

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Cek keberadaan key."""

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Hapus key. Return True jika key sebelumnya ada."""

    @abstractmethod
    async def delete_by_prefix(self, prefix: str) -> int:
        """Hapus semua key dengan prefix tertentu. Return jumlah key yang dihapus."""

    @abstractmethod
    async def increment(self, key: str, ttl_seconds: int) -> int:
        """
        Increment counter. TTL dipasang saat counter pertama kali dibuat
        sehingga window tidak bergeser oleh increment berikutnya.
        """


class RedisSessionStore(SessionStore):
    """SessionStore di atas redis.asyncio dengan timeout per operasi."""

    def __init__(self, client: redis.Redis, timeout: Optional[float] = None):
        """
        Args:
            client: Redis client (decode_responses=True)
            timeout: Batas waktu per operasi (detik)
        """
        self.client = client
        self.timeout = timeout or settings.REDIS_SOCKET_TIMEOUT

    async def _run(self, operation):
        try:
            return await asyncio.wait_for(operation, timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.error("Ephemeral store operation timed out")
            raise ServiceUnavailableException("Session store timed out")
        except RedisError as e:
            logger.error(f"Ephemeral store error: {e}")
            raise ServiceUnavailableException("Session store unavailable")

    async def get(self, key: str) -> Optional[Any]:
        raw = await self._run(self.client.get(key))
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError):
            return raw

    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        await self._run(self.client.set(key, json.dumps(value), ex=ttl_seconds))

    async def exists(self, key: str) -> bool:
        return bool(await self._run(self.client.exists(key)))

    async def delete(self, key: str) -> bool:
        return bool(await self._run(self.client.delete(key)))

    async def delete_by_prefix(self, prefix: str) -> int:
        async def _delete_matching() -> int:
            keys = [key async for key in self.client.scan_iter(match=f"{prefix}*", count=500)]
            if not keys:
                return 0
            return await self.client.delete(*keys)

        return await self._run(_delete_matching())

    async def increment(self, key: str, ttl_seconds: int) -> int:
        async def _incr() -> int:
            # INCR dan EXPIRE NX dalam satu MULTI: counter tidak pernah tertinggal tanpa TTL
            async with self.client.pipeline(transaction=True) as pipe:
                pipe.incr(key)
                pipe.expire(key, ttl_seconds, nx=True)
                count, _ = await pipe.execute()
            return int(count)

        return await self._run(_incr())

    async def ping(self) -> bool:
        """Health check."""
        try:
            return bool(await self._run(self.client.ping()))
        except ServiceUnavailableException:
            return False

    async def close(self) -> None:
        await self.client.aclose()
