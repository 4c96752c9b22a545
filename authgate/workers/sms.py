"""
SMS provider untuk notification worker.
Console provider untuk development, Twilio untuk production.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from functools import partial
from typing import Optional

from twilio.base.exceptions import TwilioException
from twilio.rest import Client

from authgate.core.config import settings
from authgate.core.exceptions import ServiceUnavailableException

logger = logging.getLogger("authgate.notifications")


class SmsProvider(ABC):
    @abstractmethod
    async def send(self, phone: str, message: str) -> None:
        """Kirim SMS. Raise ServiceUnavailableException jika gagal (job akan di-retry)."""


class ConsoleSmsProvider(SmsProvider):
    """Menulis SMS ke log. Hanya untuk development."""

    async def send(self, phone: str, message: str) -> None:
        logger.info(f"[console-sms] to={phone} message={message}")


class TwilioSmsProvider(SmsProvider):
    """Kirim SMS via Twilio Programmable Messaging."""

    def __init__(
        self,
        account_sid: Optional[str] = None,
        auth_token: Optional[str] = None,
        from_number: Optional[str] = None
    ):
        self.client = Client(
            account_sid or settings.TWILIO_ACCOUNT_SID,
            auth_token or settings.TWILIO_AUTH_TOKEN
        )
        self.from_number = from_number or settings.TWILIO_FROM_NUMBER

    def _send_sync(self, phone: str, message: str) -> str:
        result = self.client.messages.create(body=message, from_=self.from_number, to=phone)
        return result.sid

    async def send(self, phone: str, message: str) -> None:
        loop = asyncio.get_running_loop()
        try:
            sid = await asyncio.wait_for(
                loop.run_in_executor(None, partial(self._send_sync, phone, message)),
                timeout=settings.EXTERNAL_CALL_TIMEOUT_SECONDS * 2
            )
        except asyncio.TimeoutError:
            raise ServiceUnavailableException("SMS provider timed out")
        except TwilioException as e:
            logger.warning(f"Twilio error: {e}")
            raise ServiceUnavailableException("SMS provider unavailable")
        logger.info(f"SMS dispatched via Twilio sid={sid}")


def get_sms_provider() -> SmsProvider:
    """Pilih provider berdasarkan SMS_PROVIDER."""
    if settings.SMS_PROVIDER == "twilio":
        return TwilioSmsProvider()
    return ConsoleSmsProvider()
