"""
Authentication schemas untuk AuthGate API.
Menangani validasi untuk registrasi, login, refresh token, OTP, MFA, dan reset password.
Field JSON menggunakan camelCase (refreshToken, idToken, newPassword, ...).
"""

import re
from typing import Optional, Annotated

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from authgate.core.constants import RegexPattern
from authgate.utils.validators import normalize_phone_number


class CamelModel(BaseModel):
    """Base schema dengan alias camelCase, tetap menerima nama field Python."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RegisterEmailRequest(CamelModel):
    """
    Registrasi via email dan password.
    Password: 12-64 karakter, wajib huruf besar, huruf kecil, angka, dan simbol.
    """
    email: EmailStr = Field(..., description="User email address")
    password: Annotated[str, Field(min_length=12, max_length=64)] = Field(
        ...,
        description="User password"
    )

    @field_validator("email")
    def normalize_email(cls, v: str) -> str:
        """Normalize email to lowercase."""
        return v.lower().strip()

    @field_validator("password")
    def validate_password_strength(cls, v: str) -> str:
        if not re.match(RegexPattern.STRONG_PASSWORD, v):
            raise ValueError(
                "Password must contain uppercase, lowercase, number and special character"
            )
        return v

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {"email": "user@example.com", "password": "P@ssw0rd1234!"}
        }
    )


class LoginEmailRequest(CamelModel):
    """Login request schema."""
    email: EmailStr = Field(..., description="User email address")
    password: Annotated[str, Field(min_length=1, max_length=128)] = Field(
        ...,
        description="User password"
    )

    @field_validator("email")
    def normalize_email(cls, v: str) -> str:
        return v.lower().strip()


class MfaLoginRequest(CamelModel):
    """Langkah kedua login untuk akun dengan MFA."""
    mfa_token: str = Field(..., min_length=1, description="MFA pending token dari login")
    code: str = Field(..., pattern=RegexPattern.OTP_CODE, description="Kode TOTP 6 digit")


class RefreshTokenRequest(CamelModel):
    """Refresh token request schema (juga dipakai untuk logout)."""
    refresh_token: str = Field(..., min_length=1, description="JWT refresh token")

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {"refreshToken": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9..."}
        }
    )


class PhoneOtpRequest(CamelModel):
    """Permintaan OTP untuk nomor telepon E.164."""
    phone: str = Field(..., description="Phone number in E.164 format")

    @field_validator("phone", mode="before")
    def validate_phone(cls, v: str) -> str:
        normalized = normalize_phone_number(str(v))
        if normalized is None:
            raise ValueError("Phone number must be in E.164 format")
        return normalized


class PhoneOtpVerifyRequest(PhoneOtpRequest):
    """Verifikasi OTP telepon."""
    code: str = Field(..., pattern=RegexPattern.OTP_CODE, description="6-digit verification code")


class GoogleLoginRequest(CamelModel):
    """Login dengan Google ID token."""
    id_token: str = Field(..., min_length=1, description="Google ID token")


class MfaVerifyRequest(CamelModel):
    """Konfirmasi setup TOTP."""
    token: str = Field(..., pattern=RegexPattern.OTP_CODE, description="Kode TOTP 6 digit")


class ForgotPasswordRequest(CamelModel):
    email: EmailStr = Field(..., description="Email akun")

    @field_validator("email")
    def normalize_email(cls, v: str) -> str:
        return v.lower().strip()


class ResetPasswordRequest(CamelModel):
    token: str = Field(..., min_length=1, description="Password reset token")
    new_password: Annotated[str, Field(min_length=8, max_length=64)] = Field(
        ...,
        description="Password baru"
    )


class TokenResponse(CamelModel):
    """
    Token pair response.
    """
    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="JWT refresh token")
    token_type: str = Field("bearer", description="Token type (always 'bearer')")
    expires_in: int = Field(..., description="Access token lifetime in seconds")


class MfaRequiredResponse(CamelModel):
    """Response login saat akun mewajibkan kode TOTP."""
    requires_mfa: bool = Field(True, description="Selalu true")
    mfa_token: str = Field(..., description="Token MFA pending (5 menit)")


class MfaSetupResponse(CamelModel):
    uri: str = Field(..., description="otpauth:// provisioning URI")
    secret: str = Field(..., description="Base32 secret untuk entry manual")
    qr_code: Optional[str] = Field(None, description="PNG data URI dari provisioning URI")
