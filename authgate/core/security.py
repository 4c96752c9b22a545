"""
Modul keamanan terpusat untuk AuthGate API.
Menangani password hashing, JWT generation/validation, dan enkripsi MFA secret.
"""

import asyncio
import base64
import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any

from passlib.context import CryptContext
from jose import jwt, JWTError, ExpiredSignatureError
from jose.exceptions import JWTClaimsError
from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from authgate.core.config import settings
from authgate.core.constants import TokenType, TokenScope
from authgate.core.exceptions import (
    TokenError,
    ValidationError,
    ServiceUnavailableException
)


# Password hashing context dengan Argon2
pwd_context = CryptContext(
    schemes=["argon2"],
    deprecated="auto",
    argon2__rounds=4,
    argon2__memory_cost=65536,
    argon2__parallelism=2,
    argon2__hash_len=32,
    argon2__salt_len=16
)

# Hash acak untuk menyamakan durasi verifikasi saat identitas tidak ditemukan
DUMMY_PASSWORD_HASH = pwd_context.hash(secrets.token_urlsafe(32))


class Security:
    """Kelas untuk operasi keamanan."""

    def __init__(self):
        """Inisialisasi security dengan encryption key."""
        self._fernet = self._create_fernet()

    def _create_fernet(self) -> Fernet:
        """
        Membuat Fernet instance untuk enkripsi.
        Menggunakan PBKDF2 untuk derive key dari ENCRYPTION_KEY.
        """
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=32,
            salt=settings.SECRET_KEY.encode()[:16],
            iterations=100000,
        )
        key = base64.urlsafe_b64encode(
            kdf.derive(settings.ENCRYPTION_KEY.encode())
        )
        return Fernet(key)

    # Password Operations
    @staticmethod
    async def hash_password(password: str) -> str:
        """
        Hash password menggunakan Argon2 di thread executor.

        Args:
            password: Plain text password

        Returns:
            Hashed password

        Raises:
            ServiceUnavailableException: Jika hasher melewati batas waktu
        """
        loop = asyncio.get_running_loop()
        try:
            return await asyncio.wait_for(
                loop.run_in_executor(None, pwd_context.hash, password),
                timeout=settings.EXTERNAL_CALL_TIMEOUT_SECONDS
            )
        except asyncio.TimeoutError:
            raise ServiceUnavailableException("Password hasher timed out")

    @staticmethod
    async def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
        """
        Verifikasi password terhadap hash.
        Jika hash tidak ada, verifikasi tetap dijalankan terhadap dummy hash
        sehingga durasi kegagalan tidak membocorkan keberadaan identitas.

        Args:
            plain_password: Plain text password
            hashed_password: Hashed password (boleh None)

        Returns:
            True jika password cocok, False jika tidak
        """
        target = hashed_password or DUMMY_PASSWORD_HASH
        loop = asyncio.get_running_loop()
        try:
            matched = await asyncio.wait_for(
                loop.run_in_executor(None, pwd_context.verify, plain_password, target),
                timeout=settings.EXTERNAL_CALL_TIMEOUT_SECONDS
            )
        except asyncio.TimeoutError:
            raise ServiceUnavailableException("Password hasher timed out")
        return bool(matched) and hashed_password is not None

    # JWT Operations
    @staticmethod
    def _encode(claims: Dict[str, Any], expires_delta: timedelta) -> str:
        now = datetime.now(timezone.utc)
        to_encode = dict(claims)
        to_encode.update({"iat": now, "exp": now + expires_delta})
        return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

    @staticmethod
    def create_access_token(
        subject: str,
        expires_delta: Optional[timedelta] = None,
        additional_claims: Optional[Dict[str, Any]] = None
    ) -> str:
        """
        Membuat JWT access token.

        Args:
            subject: Subject JWT (account id)
            expires_delta: Custom expiration time
            additional_claims: Claims tambahan untuk ditambahkan ke token

        Returns:
            Encoded JWT token
        """
        claims = {"sub": str(subject), "type": TokenType.ACCESS.value}
        if additional_claims:
            claims.update(additional_claims)
        return Security._encode(
            claims, expires_delta or settings.access_token_expire_timedelta
        )

    @staticmethod
    def create_refresh_token(
        subject: str,
        token_id: Optional[str] = None,
        expires_delta: Optional[timedelta] = None
    ) -> str:
        """
        Membuat JWT refresh token dengan `jti` unik.

        Args:
            subject: Subject JWT (account id)
            token_id: Session token id, di-generate jika kosong
            expires_delta: Custom expiration time

        Returns:
            Encoded JWT refresh token
        """
        claims = {
            "sub": str(subject),
            "type": TokenType.REFRESH.value,
            "jti": token_id or Security.generate_token_id(),
        }
        return Security._encode(
            claims, expires_delta or settings.refresh_token_expire_timedelta
        )

    @staticmethod
    def create_mfa_pending_token(subject: str) -> str:
        """Token berumur pendek yang hanya berlaku untuk menyelesaikan login MFA."""
        return Security._encode(
            {"sub": str(subject), "scope": TokenScope.MFA_PENDING.value},
            settings.mfa_token_expire_timedelta
        )

    @staticmethod
    def create_password_reset_token(subject: str) -> str:
        """Token reset password, berlaku PASSWORD_RESET_TOKEN_EXPIRE_MINUTES."""
        return Security._encode(
            {"sub": str(subject), "type": TokenType.PASSWORD_RESET.value},
            settings.password_reset_expire_timedelta
        )

    @staticmethod
    def _decode(token: str) -> Dict[str, Any]:
        try:
            return jwt.decode(
                token,
                settings.SECRET_KEY,
                algorithms=[settings.ALGORITHM]
            )
        except ExpiredSignatureError:
            raise TokenError("Token has expired")
        except JWTClaimsError:
            raise TokenError("Invalid token claims")
        except JWTError:
            raise TokenError("Invalid token")

    @staticmethod
    def decode_token(token: str, expected_type: str = TokenType.ACCESS.value) -> Dict[str, Any]:
        """
        Decode dan validasi JWT token.

        Args:
            token: JWT token
            expected_type: Tipe token yang diharapkan ("access", "refresh", "password-reset")

        Returns:
            Decoded token payload

        Raises:
            TokenError: Jika token tidak valid
        """
        payload = Security._decode(token)

        # Validasi tipe token
        if payload.get("type") != expected_type:
            raise TokenError(f"Invalid token type. Expected {expected_type}")
        if not payload.get("sub"):
            raise TokenError("Invalid token subject")
        if expected_type == TokenType.REFRESH.value and not payload.get("jti"):
            raise TokenError("Invalid token id")

        return payload

    @staticmethod
    def decode_mfa_pending_token(token: str) -> Dict[str, Any]:
        """
        Decode token MFA pending dan pastikan scope-nya benar.

        Raises:
            TokenError: Jika token tidak valid atau scope salah
        """
        payload = Security._decode(token)
        if payload.get("scope") != TokenScope.MFA_PENDING.value or not payload.get("sub"):
            raise TokenError("Invalid token scope")
        return payload

    @staticmethod
    def get_unverified_claims(token: str) -> Optional[Dict[str, Any]]:
        """
        Baca claims tanpa verifikasi signature.
        Hanya dipakai untuk logout, di mana token yang rusak cukup diabaikan.
        """
        try:
            claims = jwt.get_unverified_claims(token)
        except JWTError:
            return None
        return claims if isinstance(claims, dict) else None

    @staticmethod
    def generate_token_id() -> str:
        """Generate session token id (UUID4)."""
        return str(uuid.uuid4())

    @staticmethod
    def generate_numeric_code(length: int = 6) -> str:
        """
        Generate kode numerik untuk OTP dari CSPRNG.

        Args:
            length: Jumlah digit

        Returns:
            Kode numerik dengan leading zero dipertahankan
        """
        return str(secrets.randbelow(10 ** length)).zfill(length)

    # Encryption Operations
    def encrypt(self, data: str) -> str:
        """
        Enkripsi data menggunakan Fernet.

        Args:
            data: Data yang akan dienkripsi

        Returns:
            Encrypted data (base64 encoded)
        """
        return self._fernet.encrypt(data.encode()).decode()

    def decrypt(self, encrypted_data: str) -> str:
        """
        Dekripsi data menggunakan Fernet.

        Args:
            encrypted_data: Data terenkripsi (base64 encoded)

        Returns:
            Decrypted data

        Raises:
            ValidationError: Jika dekripsi gagal
        """
        try:
            return self._fernet.decrypt(encrypted_data.encode()).decode()
        except InvalidToken:
            raise ValidationError("Failed to decrypt data")


# Global security instance
security = Security()
