"""
Notification dispatcher untuk AuthGate API.
Menyerahkan job email/SMS ke antrian arq; kegagalan enqueue hanya di-log.
"""

import asyncio
import logging
from typing import Any, Optional

from arq import ArqRedis, create_pool
from arq.connections import RedisSettings

from authgate.core.config import settings
from authgate.core.constants import NotificationJob

logger = logging.getLogger("authgate.notifications")


async def create_notification_pool(redis_url: Optional[str] = None) -> ArqRedis:
    """Buat arq pool dari REDIS_URL."""
    return await create_pool(RedisSettings.from_dsn(redis_url or str(settings.REDIS_URL)))


class NotificationDispatcher:
    """
    Fire-and-forget dispatcher.
    Operasi utama (register, login, forgot password) tidak pernah gagal karena enqueue.
    """

    def __init__(self, pool: Optional[ArqRedis], timeout: Optional[float] = None):
        """
        Args:
            pool: arq Redis pool (None menonaktifkan notifikasi)
            timeout: Batas waktu enqueue (detik)
        """
        self.pool = pool
        self.timeout = timeout or settings.EXTERNAL_CALL_TIMEOUT_SECONDS

    async def _enqueue(self, job: NotificationJob, *args: Any) -> bool:
        if self.pool is None:
            logger.warning(f"Notification queue not configured, skipping {job.value}")
            return False
        try:
            await asyncio.wait_for(
                self.pool.enqueue_job(job.value, *args),
                timeout=self.timeout
            )
        except asyncio.TimeoutError:
            logger.error(f"Timed out enqueueing {job.value}")
            return False
        except Exception as e:
            logger.error(f"Failed to enqueue {job.value}: {e}")
            return False
        logger.debug(f"Enqueued {job.value}")
        return True

    async def send_welcome_email(self, email: str) -> bool:
        """Enqueue welcome email setelah registrasi."""
        return await self._enqueue(NotificationJob.WELCOME_EMAIL, email)

    async def send_password_reset_email(self, email: str, token: str) -> bool:
        """Enqueue email berisi link reset password."""
        return await self._enqueue(NotificationJob.PASSWORD_RESET_EMAIL, email, token)

    async def send_otp_sms(self, phone: str, code: str) -> bool:
        """Enqueue SMS berisi kode OTP."""
        return await self._enqueue(NotificationJob.OTP_SMS, phone, code)
