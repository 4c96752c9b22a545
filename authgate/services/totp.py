"""
Two-factor authentication (TOTP) service untuk AuthGate API.
Menangani setup secret, aktivasi, dan verifikasi kode RFC 6238.
"""

import base64
import io
import logging
from typing import Dict, Optional
from uuid import UUID

import pyotp
import qrcode

from authgate.core.config import settings
from authgate.core.constants import ResponseMessage
from authgate.core.exceptions import (
    ConflictError,
    InvalidTwoFactorCodeException,
    NotFoundError,
    ValidationError
)
from authgate.core.security import security
from authgate.models.account import Account
from authgate.repositories.credential import CredentialRepository

logger = logging.getLogger(__name__)


class TotpService:
    """
    Service class untuk TOTP second factor.
    Secret disimpan terenkripsi; caller tidak pernah melihat ciphertext.
    """

    def __init__(self, repository: CredentialRepository):
        """
        Initialize TOTP service.

        Args:
            repository: Credential repository
        """
        self.repository = repository

    async def setup(self, account_id: UUID) -> Dict[str, str]:
        """
        Stage secret baru dengan mfa_enabled=False.

        Args:
            account_id: Account ID

        Returns:
            Dict berisi provisioning uri, raw secret, dan QR code data URI

        Raises:
            NotFoundError: Jika akun tidak ditemukan
            ConflictError: Jika MFA sudah aktif
        """
        account = await self.repository.get_account(account_id)
        if account is None:
            raise NotFoundError("Account not found")
        if account.a_mfa_enabled:
            raise ConflictError(ResponseMessage.TWO_FACTOR_ALREADY_ENABLED)

        secret = pyotp.random_base32()
        await self.repository.update_account(
            account_id,
            a_mfa_secret=security.encrypt(secret),
            a_mfa_enabled=False
        )

        provisioning_uri = pyotp.TOTP(secret).provisioning_uri(
            name=account.a_email or account.a_phone or str(account.a_id),
            issuer_name=settings.TWO_FACTOR_ISSUER_NAME
        )
        logger.info(f"TOTP secret staged for account {account_id}")

        return {
            "uri": provisioning_uri,
            "secret": secret,
            "qr_code": self._generate_qr_code(provisioning_uri)
        }

    async def verify_and_enable(self, account_id: UUID, code: str) -> None:
        """
        Aktifkan MFA setelah kode pertama terverifikasi.

        Args:
            account_id: Account ID
            code: Kode TOTP dari authenticator

        Raises:
            InvalidTwoFactorCodeException: Jika belum ada secret atau kode salah
        """
        account = await self.repository.get_account(account_id)
        if account is None or not account.a_mfa_secret:
            raise InvalidTwoFactorCodeException(ResponseMessage.TWO_FACTOR_NOT_SET_UP)

        if not self.verify_code(account, code):
            raise InvalidTwoFactorCodeException()

        await self.repository.update_account(account_id, a_mfa_enabled=True)
        logger.info(f"TOTP enabled for account {account_id}")

    def verify_code(self, account: Account, code: str) -> bool:
        """
        Verifikasi kode TOTP terhadap secret akun dengan toleransi ±TOTP_VALID_WINDOW step.

        Args:
            account: Account dengan secret ter-stage
            code: Kode 6 digit

        Returns:
            True jika valid
        """
        secret = self._get_secret(account)
        if secret is None or not code:
            return False
        return pyotp.TOTP(secret).verify(code, valid_window=settings.TOTP_VALID_WINDOW)

    @staticmethod
    def _get_secret(account: Account) -> Optional[str]:
        if not account.a_mfa_secret:
            return None
        try:
            return security.decrypt(account.a_mfa_secret)
        except ValidationError:
            logger.error(f"Stored TOTP secret for account {account.a_id} cannot be decrypted")
            return None

    @staticmethod
    def _generate_qr_code(data: str) -> str:
        """
        Generate QR code sebagai base64 PNG data URI.

        Args:
            data: Data untuk di-encode

        Returns:
            Data URI
        """
        qr = qrcode.QRCode(version=1, box_size=10, border=5)
        qr.add_data(data)
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")
        buffer = io.BytesIO()
        img.save(buffer, format="PNG")
        return f"data:image/png;base64,{base64.b64encode(buffer.getvalue()).decode()}"
