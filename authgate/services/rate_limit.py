"""
Rate limiting service untuk AuthGate API.
Menangani burst-control per route dengan sliding window di Redis.
"""

import asyncio
import logging
from datetime import datetime
from typing import Optional, Dict, Tuple
import uuid

import redis.asyncio as redis
from redis.exceptions import RedisError

from authgate.core.config import settings
from authgate.core.constants import CacheKey
from authgate.core.exceptions import ServiceUnavailableException

logger = logging.getLogger(__name__)


class RateLimitService:
    """
    Service class untuk rate limiting operations.
    Menggunakan sliding window algorithm dengan Redis sorted set.
    """

    def __init__(self, client: redis.Redis, timeout: Optional[float] = None):
        """
        Initialize rate limit service.

        Args:
            client: Redis client
            timeout: Batas waktu operasi Redis (detik)
        """
        self.client = client
        self.timeout = timeout or settings.REDIS_SOCKET_TIMEOUT

    async def check_rate_limit(
        self,
        namespace: str,
        identifier: str,
        limit: int,
        window_seconds: int
    ) -> Tuple[bool, Dict[str, Optional[int]]]:
        """
        Check apakah rate limit terlampaui, dan catat request jika belum.

        Args:
            namespace: Nama route atau grup limit (misal: "login")
            identifier: Identitas caller (biasanya IP)
            limit: Maksimal request per window
            window_seconds: Panjang window dalam detik

        Returns:
            Tuple of (is_allowed, rate_limit_info)
        """
        try:
            return await asyncio.wait_for(
                self._check(namespace, identifier, limit, window_seconds),
                timeout=self.timeout
            )
        except asyncio.TimeoutError:
            raise ServiceUnavailableException("Rate limiter timed out")
        except RedisError as e:
            logger.error(f"Rate limiter error: {e}")
            raise ServiceUnavailableException("Rate limiter unavailable")

    async def _check(
        self,
        namespace: str,
        identifier: str,
        limit: int,
        window_seconds: int
    ) -> Tuple[bool, Dict[str, Optional[int]]]:
        now = datetime.now().timestamp()
        window_start = now - window_seconds
        key = CacheKey.RATE_LIMIT.format(namespace=namespace, identifier=identifier)

        async with self.client.pipeline() as pipe:
            pipe.zremrangebyscore(key, 0, window_start)
            pipe.zcard(key)
            results = await pipe.execute()
        current_count = results[1]

        if current_count >= limit:
            oldest = await self.client.zrange(key, 0, 0, withscores=True)
            if oldest:
                retry_after = max(1, int(oldest[0][1] + window_seconds - now))
            else:
                retry_after = window_seconds

            return False, {
                "limit": limit,
                "remaining": 0,
                "reset": int(now + retry_after),
                "retry_after": retry_after
            }

        # Member unik agar request pada timestamp yang sama tetap terhitung
        await self.client.zadd(key, {f"{now}:{uuid.uuid4().hex[:8]}": now})
        await self.client.expire(key, window_seconds)

        return True, {
            "limit": limit,
            "remaining": limit - current_count - 1,
            "reset": int(now + window_seconds),
            "retry_after": None
        }
