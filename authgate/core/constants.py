"""
Konstanta yang digunakan di seluruh aplikasi AuthGate API.
"""

from enum import Enum


class AccountStatus(str, Enum):
    """Status lifecycle akun."""
    ACTIVE = "ACTIVE"
    SUSPENDED = "SUSPENDED"
    DELETED = "DELETED"


class IdentityProvider(str, Enum):
    """Provider identity binding."""
    EMAIL = "EMAIL"
    PHONE = "PHONE"
    GOOGLE = "GOOGLE"


class TokenType(str, Enum):
    """Nilai claim `type` pada JWT yang diterbitkan sistem."""
    ACCESS = "access"
    REFRESH = "refresh"
    PASSWORD_RESET = "password-reset"


class TokenScope(str, Enum):
    """Nilai claim `scope` untuk token dengan akses terbatas."""
    MFA_PENDING = "mfa_pending"


class EventName(str, Enum):
    """Nama event yang dipublikasikan session manager."""
    ACCOUNT_REGISTERED = "account.registered"
    LOGIN_SUCCESS = "login.success"
    LOGIN_FAILED = "login.failed"


class NotificationJob(str, Enum):
    """Nama fungsi job di notification worker."""
    WELCOME_EMAIL = "send_welcome_email"
    PASSWORD_RESET_EMAIL = "send_password_reset_email"
    OTP_SMS = "send_otp_sms"


# Response Messages
class ResponseMessage:
    """Pesan response standar."""
    # Success messages
    LOGOUT_SUCCESS = "Logout successful"
    LOGOUT_ALL_SUCCESS = "All sessions terminated"
    OTP_SENT = "Verification code sent"
    PASSWORD_RESET_REQUESTED = "If the email exists, reset instructions have been sent"
    PASSWORD_RESET_SUCCESS = "Password reset successful"
    TWO_FACTOR_ENABLED = "Two-factor authentication enabled"

    # Error messages
    INVALID_CREDENTIALS = "Invalid email or password"
    ACCOUNT_INACTIVE = "Account is not active"
    EMAIL_ALREADY_EXISTS = "Email already registered"
    TOKEN_INVALID = "Invalid token"
    SESSION_INVALID = "Invalid or expired session"
    RESET_TOKEN_INVALID = "Reset link is expired or invalid"
    GOOGLE_TOKEN_INVALID = "Invalid Google ID token"
    OTP_INVALID = "Invalid verification code"
    OTP_LIMIT_EXCEEDED = "Too many verification code requests"
    TWO_FACTOR_NOT_SET_UP = "Two-factor authentication is not set up"
    TWO_FACTOR_INVALID = "Invalid two-factor code"
    TWO_FACTOR_ALREADY_ENABLED = "Two-factor authentication is already enabled"


# Regex Patterns
class RegexPattern:
    """Regex patterns untuk validasi."""
    E164_PHONE = r'^\+[1-9]\d{7,14}$'
    OTP_CODE = r'^\d{6}$'
    STRONG_PASSWORD = r'^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[^A-Za-z0-9]).+$'


# Cache Keys
class CacheKey:
    """Template untuk key di ephemeral store."""
    SESSION = "session:{account_id}:{token_id}"
    SESSION_PREFIX = "session:{account_id}:"
    OTP_CODE = "otp:{phone}"
    OTP_REQUEST_COUNT = "otp_limit:{phone}"
    OTP_VERIFY_ATTEMPTS = "otp_attempts:{phone}"
    LAST_SEEN_IP = "account:{account_id}:last_ip"
    FAILED_LOGINS_BY_IP = "brute_force_attempts:{ip}"
    RATE_LIMIT = "rate_limit:{namespace}:{identifier}"
