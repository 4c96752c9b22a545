"""
Verifikasi Google ID token untuk AuthGate API.
Trust chain Google ditangani sepenuhnya oleh google-auth.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from google.auth.exceptions import TransportError
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token

from authgate.core.config import settings
from authgate.core.constants import ResponseMessage
from authgate.core.exceptions import AuthenticationError, ServiceUnavailableException

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VerifiedIdentity:
    subject: str
    email: str


class GoogleIdentityVerifier:
    """Verify signed assertion, return subject id + email, or fail."""

    def __init__(self, client_id: Optional[str] = None, timeout: Optional[float] = None):
        """
        Args:
            client_id: OAuth client id untuk audience check
            timeout: Batas waktu verifikasi (detik)
        """
        self.client_id = client_id or settings.GOOGLE_CLIENT_ID
        self.timeout = timeout or settings.EXTERNAL_CALL_TIMEOUT_SECONDS

    def _verify_sync(self, token: str) -> dict:
        return id_token.verify_oauth2_token(
            token,
            google_requests.Request(),
            self.client_id,
            clock_skew_in_seconds=60
        )

    async def verify(self, token: str) -> VerifiedIdentity:
        """
        Verifikasi ID token.

        Args:
            token: Google ID token

        Returns:
            VerifiedIdentity dengan subject dan email (lowercase)

        Raises:
            AuthenticationError: Jika token ditolak atau tidak memuat sub/email
            ServiceUnavailableException: Jika verifikasi timeout atau client id belum dikonfigurasi
        """
        if not self.client_id:
            logger.error("GOOGLE_CLIENT_ID not configured")
            raise ServiceUnavailableException("Google sign-in is not configured")

        loop = asyncio.get_running_loop()
        try:
            idinfo = await asyncio.wait_for(
                loop.run_in_executor(None, self._verify_sync, token),
                timeout=self.timeout
            )
        except asyncio.TimeoutError:
            raise ServiceUnavailableException("Google token verification timed out")
        except ValueError as e:
            # Detail dari provider tidak diteruskan ke caller
            logger.info(f"Google token rejected: {e}")
            raise AuthenticationError(ResponseMessage.GOOGLE_TOKEN_INVALID)
        except TransportError as e:
            logger.error(f"Google certificate fetch failed: {e}")
            raise ServiceUnavailableException("Google token verification unavailable")

        subject = str(idinfo.get("sub") or "")
        email = str(idinfo.get("email") or "").strip().lower()
        if not subject or not email:
            raise AuthenticationError(ResponseMessage.GOOGLE_TOKEN_INVALID)

        return VerifiedIdentity(subject=subject, email=email)
