"""
Authentication service untuk AuthGate API.
Session manager: registrasi, login multi-kredensial, rotasi refresh token,
logout, dan reset password.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Union
from uuid import UUID

from authgate.core.config import settings
from authgate.core.constants import CacheKey, IdentityProvider, ResponseMessage, TokenType
from authgate.core.exceptions import (
    AccountInactiveException,
    ConflictError,
    InvalidCredentialsException,
    InvalidTwoFactorCodeException,
    TokenError,
    ValidationError
)
from authgate.core.security import security
from authgate.models.account import Account
from authgate.repositories.credential import CredentialRepository
from authgate.services.events import AccountRegistered, EventBus, LoginFailed, LoginSucceeded
from authgate.services.google import GoogleIdentityVerifier
from authgate.services.notifications import NotificationDispatcher
from authgate.services.otp import OtpService
from authgate.services.totp import TotpService
from authgate.storage.session_store import SessionStore
from authgate.utils.validators import normalize_email, normalize_phone_number

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RequestMetadata:
    """Informasi caller yang ikut di event login."""
    ip: Optional[str] = None
    user_agent: Optional[str] = None


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int = settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60


@dataclass(frozen=True)
class MfaChallenge:
    """Hasil login password yang masih menunggu kode TOTP."""
    mfa_token: str
    requires_mfa: bool = True


def normalize_phone(phone: str) -> str:
    """E.164 phone sebagai PHONE provider key."""
    normalized = normalize_phone_number(phone)
    if normalized is None:
        raise ValidationError("Phone number must be in E.164 format")
    return normalized


class AuthService:
    """
    Service class untuk authentication operations.

    Collaborator di-inject lewat constructor; tidak ada yang diambil dari global state
    selain settings dan security helper.
    """

    def __init__(
        self,
        repository: CredentialRepository,
        store: SessionStore,
        events: EventBus,
        notifications: NotificationDispatcher,
        otp_service: Optional[OtpService] = None,
        totp_service: Optional[TotpService] = None,
        google_verifier: Optional[GoogleIdentityVerifier] = None
    ):
        """
        Initialize authentication service.

        Args:
            repository: Credential store
            store: Ephemeral store untuk session record
            events: Event bus untuk login/registration events
            notifications: Dispatcher job email/SMS
            otp_service: Engine OTP telepon
            totp_service: Engine TOTP
            google_verifier: Verifikator Google ID token
        """
        self.repository = repository
        self.store = store
        self.events = events
        self.notifications = notifications
        self.otp_service = otp_service or OtpService(store)
        self.totp_service = totp_service or TotpService(repository)
        self.google_verifier = google_verifier or GoogleIdentityVerifier()

    # Session issuance
    async def _mint_session(self, account: Account) -> TokenPair:
        """
        Terbitkan access/refresh token dan daftarkan session record refresh token.
        """
        token_id = security.generate_token_id()
        refresh_token = security.create_refresh_token(str(account.a_id), token_id=token_id)
        access_token = security.create_access_token(
            str(account.a_id),
            additional_claims={"role": account.a_role}
        )

        await self.store.set(
            CacheKey.SESSION.format(account_id=account.a_id, token_id=token_id),
            {"issued_at": datetime.now(timezone.utc).isoformat()},
            settings.refresh_token_ttl_seconds
        )
        return TokenPair(access_token=access_token, refresh_token=refresh_token)

    async def _complete_login(self, account: Account, metadata: Optional[RequestMetadata]) -> TokenPair:
        tokens = await self._mint_session(account)
        metadata = metadata or RequestMetadata()
        self.events.publish(
            LoginSucceeded(account_id=account.a_id, ip=metadata.ip, user_agent=metadata.user_agent)
        )
        logger.info(f"Login succeeded for account {account.a_id}")
        return tokens

    @staticmethod
    def _ensure_active(account: Account) -> None:
        if not account.is_active:
            raise AccountInactiveException(status=account.a_status.value)

    async def _resolve_or_provision(
        self,
        provider: IdentityProvider,
        provider_key: str,
        *,
        email: Optional[str] = None,
        phone: Optional[str] = None
    ) -> Account:
        """
        Just-in-time provisioning: cari akun lewat binding, buat jika belum ada.
        Conflict karena request paralel diselesaikan dengan lookup ulang.
        """
        account = await self.repository.get_account_by_binding(provider, provider_key)
        if account is not None:
            return account

        try:
            account = await self.repository.create_account_with_binding(
                provider, provider_key, email=email, phone=phone
            )
        except ConflictError:
            account = await self.repository.get_account_by_binding(provider, provider_key)
            if account is None:
                raise
            return account

        self.events.publish(AccountRegistered(account_id=account.a_id, email=email))
        return account

    # Email / password
    async def register_with_email(self, email: str, password: str) -> TokenPair:
        """
        Registrasi akun baru dengan email dan password.

        Args:
            email: Email user
            password: Plain password

        Returns:
            Token pair session baru

        Raises:
            ConflictError: Jika EMAIL binding sudah ada
        """
        email = normalize_email(email)
        if await self.repository.get_account_by_binding(IdentityProvider.EMAIL, email):
            raise ConflictError(ResponseMessage.EMAIL_ALREADY_EXISTS)

        password_hash = await security.hash_password(password)
        try:
            account = await self.repository.create_account_with_binding(
                IdentityProvider.EMAIL,
                email,
                email=email,
                password_hash=password_hash
            )
        except ConflictError:
            raise ConflictError(ResponseMessage.EMAIL_ALREADY_EXISTS)

        self.events.publish(AccountRegistered(account_id=account.a_id, email=email))
        await self.notifications.send_welcome_email(email)

        return await self._mint_session(account)

    async def login_with_email(
        self,
        email: str,
        password: str,
        metadata: Optional[RequestMetadata] = None
    ) -> Union[TokenPair, MfaChallenge]:
        """
        Login dengan email dan password.

        Password selalu diverifikasi, terhadap dummy hash jika akun tidak ada,
        sehingga durasi "akun tidak ada" dan "password salah" tidak bisa dibedakan.

        Args:
            email: Email user
            password: Plain password
            metadata: IP dan user agent caller

        Returns:
            TokenPair, atau MfaChallenge jika akun mewajibkan TOTP

        Raises:
            InvalidCredentialsException: Kredensial salah
            AccountInactiveException: Akun tidak ACTIVE
        """
        email = normalize_email(email)
        metadata = metadata or RequestMetadata()

        account = await self.repository.get_account_by_binding(IdentityProvider.EMAIL, email)
        password_hash = account.a_password_hash if account else None
        verified = await security.verify_password(password, password_hash)

        if not verified:
            self.events.publish(
                LoginFailed(email=email, ip=metadata.ip, user_agent=metadata.user_agent)
            )
            raise InvalidCredentialsException(ResponseMessage.INVALID_CREDENTIALS)

        self._ensure_active(account)

        if account.a_mfa_enabled:
            logger.info(f"MFA challenge issued for account {account.a_id}")
            return MfaChallenge(mfa_token=security.create_mfa_pending_token(str(account.a_id)))

        return await self._complete_login(account, metadata)

    async def verify_mfa_login(
        self,
        mfa_token: str,
        code: str,
        metadata: Optional[RequestMetadata] = None
    ) -> TokenPair:
        """
        Langkah kedua login: tukar MFA pending token + kode TOTP dengan session.

        Raises:
            TokenError: MFA token invalid atau expired
            InvalidTwoFactorCodeException: Kode TOTP salah
            AccountInactiveException: Akun tidak ACTIVE
        """
        payload = security.decode_mfa_pending_token(mfa_token)
        account = await self.repository.get_account(self._parse_subject(payload["sub"]))
        if account is None:
            raise TokenError(ResponseMessage.TOKEN_INVALID)

        self._ensure_active(account)

        if not account.a_mfa_enabled or not self.totp_service.verify_code(account, code):
            metadata = metadata or RequestMetadata()
            self.events.publish(
                LoginFailed(
                    email=account.a_email or "",
                    ip=metadata.ip,
                    user_agent=metadata.user_agent
                )
            )
            raise InvalidTwoFactorCodeException(ResponseMessage.TWO_FACTOR_INVALID)

        return await self._complete_login(account, metadata)

    # Federated / phone
    async def login_with_google(
        self,
        id_token: str,
        metadata: Optional[RequestMetadata] = None
    ) -> TokenPair:
        """
        Login dengan Google ID token, dengan just-in-time provisioning.

        Raises:
            AuthenticationError: Token ditolak
            ConflictError: Email Google sudah dipakai akun lain tanpa GOOGLE binding
            AccountInactiveException: Akun tidak ACTIVE
        """
        identity = await self.google_verifier.verify(id_token)
        account = await self._resolve_or_provision(
            IdentityProvider.GOOGLE,
            identity.subject,
            email=identity.email
        )
        self._ensure_active(account)
        return await self._complete_login(account, metadata)

    async def request_phone_otp(self, phone: str) -> None:
        """
        Kirim OTP ke nomor telepon. Kode tidak pernah dikembalikan ke caller.

        Raises:
            OtpRequestLimitException: Batas permintaan per nomor tercapai
        """
        phone = normalize_phone(phone)
        code = await self.otp_service.issue(phone)
        await self.notifications.send_otp_sms(phone, code)

    async def verify_phone_otp(
        self,
        phone: str,
        code: str,
        metadata: Optional[RequestMetadata] = None
    ) -> TokenPair:
        """
        Verifikasi OTP dan login; akun PHONE dibuat jika belum ada.

        Raises:
            InvalidOtpException: Kode salah, expired, atau sudah dipakai
            AccountInactiveException: Akun tidak ACTIVE
        """
        phone = normalize_phone(phone)
        await self.otp_service.consume(phone, code)

        account = await self._resolve_or_provision(IdentityProvider.PHONE, phone, phone=phone)
        self._ensure_active(account)
        return await self._complete_login(account, metadata)

    # Session lifecycle
    async def refresh_tokens(self, refresh_token: str) -> TokenPair:
        """
        Rotasi refresh token. Setiap refresh token hanya bisa ditukar sekali.

        Args:
            refresh_token: Refresh token yang masih terdaftar

        Returns:
            Token pair baru

        Raises:
            TokenError: Token invalid, expired, sudah di-redeem, atau sudah di-logout
        """
        payload = security.decode_token(refresh_token, TokenType.REFRESH.value)
        account_id = self._parse_subject(payload["sub"])
        session_key = CacheKey.SESSION.format(account_id=account_id, token_id=payload["jti"])

        # DEL atomik: hanya satu redemption yang melihat key masih ada
        if not await self.store.delete(session_key):
            logger.warning(f"Refresh with unknown session for account {account_id}")
            raise TokenError(ResponseMessage.SESSION_INVALID)

        account = await self.repository.get_account(account_id)
        if account is None:
            raise TokenError(ResponseMessage.SESSION_INVALID)
        self._ensure_active(account)

        return await self._mint_session(account)

    async def logout(self, account_id: UUID, refresh_token: str) -> None:
        """
        Hapus session record satu refresh token. Token expired tetap diterima;
        token rusak atau milik akun lain diabaikan.
        """
        claims = security.get_unverified_claims(refresh_token)
        if not claims:
            return
        token_id = claims.get("jti")
        if not token_id or claims.get("sub") != str(account_id):
            return

        await self.store.delete(CacheKey.SESSION.format(account_id=account_id, token_id=token_id))
        logger.info(f"Session revoked for account {account_id}")

    async def logout_all(self, account_id: UUID) -> int:
        """
        Hapus semua session record akun.

        Returns:
            Jumlah session yang dihapus
        """
        removed = await self.store.delete_by_prefix(
            CacheKey.SESSION_PREFIX.format(account_id=account_id)
        )
        logger.info(f"Revoked {removed} sessions for account {account_id}")
        return removed

    # Password recovery
    async def forgot_password(self, email: str) -> str:
        """
        Kirim email reset jika akun ada. Respons selalu sama.

        Returns:
            Pesan generik
        """
        email = normalize_email(email)
        account = await self.repository.get_account_by_binding(IdentityProvider.EMAIL, email)

        if account is not None and account.is_active:
            token = security.create_password_reset_token(str(account.a_id))
            await self.notifications.send_password_reset_email(email, token)
        else:
            logger.debug("Password reset requested for unknown or inactive identity")

        return ResponseMessage.PASSWORD_RESET_REQUESTED

    async def reset_password(self, token: str, new_password: str) -> None:
        """
        Set password baru dan cabut semua session.

        Raises:
            TokenError: Token invalid, expired, atau akun tidak ACTIVE
        """
        try:
            payload = security.decode_token(token, TokenType.PASSWORD_RESET.value)
            account_id = self._parse_subject(payload["sub"])
        except TokenError:
            raise TokenError(ResponseMessage.RESET_TOKEN_INVALID)

        account = await self.repository.get_account(account_id)
        if account is None or not account.is_active:
            raise TokenError(ResponseMessage.RESET_TOKEN_INVALID)

        password_hash = await security.hash_password(new_password)
        await self.repository.update_account(account_id, a_password_hash=password_hash)
        await self.logout_all(account_id)
        logger.info(f"Password reset for account {account_id}")

    @staticmethod
    def _parse_subject(subject: str) -> UUID:
        try:
            return UUID(str(subject))
        except ValueError:
            raise TokenError(ResponseMessage.TOKEN_INVALID)
