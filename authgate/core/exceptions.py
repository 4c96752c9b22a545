"""
Custom exceptions untuk AuthGate API.
Semua custom exceptions harus inherit dari base exceptions ini.
"""

from typing import Optional, Dict, Any


class AuthGateException(Exception):
    """Base exception untuk semua custom exceptions di AuthGate API."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize exception.

        Args:
            message: Error message
            status_code: HTTP status code
            details: Additional error details
        """
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class AuthenticationError(AuthGateException):
    """Exception untuk error autentikasi (Unauthorized)."""

    def __init__(self, message: str = "Authentication failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=401, details=details)


class AuthorizationError(AuthGateException):
    """Exception untuk error otorisasi (Forbidden)."""

    def __init__(self, message: str = "Permission denied", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=403, details=details)


class ValidationError(AuthGateException):
    """Exception untuk error validasi data."""

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=422, details=details)


class NotFoundError(AuthGateException):
    """Exception untuk resource tidak ditemukan."""

    def __init__(self, message: str = "Resource not found", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=404, details=details)


class ConflictError(AuthGateException):
    """Exception untuk konflik data (misal: duplicate identity binding)."""

    def __init__(self, message: str = "Resource conflict", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=409, details=details)


class RateLimitError(AuthGateException):
    """Exception untuk burst-control rate limit exceeded."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        retry_after: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.retry_after = retry_after
        details = dict(details or {})
        if retry_after is not None:
            details["retry_after"] = retry_after
        super().__init__(message, status_code=429, details=details)


class TokenError(AuthenticationError):
    """Exception untuk token yang invalid, expired, atau sudah di-redeem."""

    def __init__(self, message: str = "Invalid token", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details=details)


class InvalidCredentialsException(AuthenticationError):
    """Exception untuk kredensial yang tidak valid."""

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message)


class InvalidOtpException(AuthenticationError):
    """Exception untuk kode OTP yang salah, expired, atau sudah dipakai."""

    def __init__(self, message: str = "Invalid verification code"):
        super().__init__(message)


class InvalidTwoFactorCodeException(AuthenticationError):
    """Exception untuk kode TOTP yang tidak valid."""

    def __init__(self, message: str = "Invalid two-factor code"):
        super().__init__(message)


class AccountInactiveException(AuthorizationError):
    """Exception untuk akun dengan status selain ACTIVE."""

    def __init__(self, message: str = "Account is not active", status: Optional[str] = None):
        details = {"status": status} if status else None
        super().__init__(message, details=details)


class OtpRequestLimitException(AuthorizationError):
    """Exception untuk nomor telepon yang melewati batas permintaan OTP."""

    def __init__(self, message: str = "Too many verification code requests"):
        super().__init__(message, details={"rate_limited": True})


class ServiceUnavailableException(AuthGateException):
    """Exception untuk dependency yang tidak tersedia atau timeout (retryable)."""

    def __init__(self, message: str = "Service temporarily unavailable", details: Optional[Dict[str, Any]] = None):
        details = dict(details or {})
        details.setdefault("retryable", True)
        super().__init__(message, status_code=503, details=details)
