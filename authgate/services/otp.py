"""
OTP service untuk AuthGate API.
Generate, simpan, dan verifikasi kode numerik berumur pendek untuk login via telepon.
"""

import hmac
import logging
from typing import Optional

from authgate.core.config import settings
from authgate.core.constants import CacheKey
from authgate.core.exceptions import InvalidOtpException, OtpRequestLimitException
from authgate.core.security import security
from authgate.storage.session_store import SessionStore

logger = logging.getLogger(__name__)


class OtpService:
    """
    Service untuk one-time code per nomor telepon.

    Tiga entry independen di ephemeral store:
    - kode OTP (TTL OTP_TTL_SECONDS)
    - counter permintaan per nomor (TTL OTP_REQUEST_WINDOW_SECONDS)
    - counter verifikasi gagal per kode (TTL OTP_TTL_SECONDS)
    """

    def __init__(self, store: SessionStore):
        """
        Args:
            store: Ephemeral key-value store
        """
        self.store = store

    async def issue(self, phone: str) -> str:
        """
        Generate dan simpan kode baru untuk nomor telepon.

        Args:
            phone: Nomor telepon ter-normalisasi (E.164)

        Returns:
            Kode OTP (untuk diserahkan ke SMS job, bukan ke caller HTTP)

        Raises:
            OtpRequestLimitException: Jika nomor sudah mencapai batas permintaan
        """
        limit_key = CacheKey.OTP_REQUEST_COUNT.format(phone=phone)
        issued = await self.store.get(limit_key)
        if issued is not None and int(issued) >= settings.OTP_MAX_REQUESTS_PER_WINDOW:
            logger.warning("OTP request limit reached for a phone number")
            raise OtpRequestLimitException()

        code = security.generate_numeric_code(settings.OTP_LENGTH)
        await self.store.set(
            CacheKey.OTP_CODE.format(phone=phone),
            code,
            settings.OTP_TTL_SECONDS
        )
        await self.store.delete(CacheKey.OTP_VERIFY_ATTEMPTS.format(phone=phone))
        await self.store.increment(limit_key, settings.OTP_REQUEST_WINDOW_SECONDS)
        return code

    async def consume(self, phone: str, code: str) -> None:
        """
        Verifikasi dan hapus kode. Kode yang cocok hanya bisa dipakai sekali.

        Args:
            phone: Nomor telepon ter-normalisasi
            code: Kode dari user

        Raises:
            InvalidOtpException: Jika kode tidak ada, expired, atau salah
        """
        code_key = CacheKey.OTP_CODE.format(phone=phone)
        stored: Optional[str] = await self.store.get(code_key)
        if stored is None:
            raise InvalidOtpException()

        if not hmac.compare_digest(str(stored), str(code)):
            await self._register_failed_attempt(phone, code_key)
            raise InvalidOtpException()

        # Hapus sebelum caller melanjutkan, sehingga replay kode yang sama gagal
        await self.store.delete(code_key)
        await self.store.delete(CacheKey.OTP_VERIFY_ATTEMPTS.format(phone=phone))

    async def _register_failed_attempt(self, phone: str, code_key: str) -> None:
        attempts = await self.store.increment(
            CacheKey.OTP_VERIFY_ATTEMPTS.format(phone=phone),
            settings.OTP_TTL_SECONDS
        )
        if attempts >= settings.OTP_MAX_VERIFY_ATTEMPTS:
            logger.warning("OTP verify attempts exhausted, code revoked")
            await self.store.delete(code_key)
            await self.store.delete(CacheKey.OTP_VERIFY_ATTEMPTS.format(phone=phone))
