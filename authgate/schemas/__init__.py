"""
Pydantic schemas untuk request/response AuthGate API.
"""

from authgate.schemas.auth import (
    RegisterEmailRequest,
    LoginEmailRequest,
    MfaLoginRequest,
    RefreshTokenRequest,
    PhoneOtpRequest,
    PhoneOtpVerifyRequest,
    GoogleLoginRequest,
    MfaVerifyRequest,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    TokenResponse,
    MfaRequiredResponse,
    MfaSetupResponse,
)
from authgate.schemas.response import MessageResponse, ErrorResponse, HealthResponse

__all__ = [
    "RegisterEmailRequest",
    "LoginEmailRequest",
    "MfaLoginRequest",
    "RefreshTokenRequest",
    "PhoneOtpRequest",
    "PhoneOtpVerifyRequest",
    "GoogleLoginRequest",
    "MfaVerifyRequest",
    "ForgotPasswordRequest",
    "ResetPasswordRequest",
    "TokenResponse",
    "MfaRequiredResponse",
    "MfaSetupResponse",
    "MessageResponse",
    "ErrorResponse",
    "HealthResponse",
]
