"""
Konfigurasi aplikasi menggunakan Pydantic Settings.
Semua konfigurasi dimuat dari environment variables atau file .env.
"""

from typing import Optional
from datetime import timedelta
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Konfigurasi aplikasi utama."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False
    )

    # Application Settings
    APP_NAME: str = Field(default="AuthGate API", description="Nama aplikasi")
    APP_VERSION: str = Field(default="1.0.0", description="Versi aplikasi")
    DEBUG: bool = Field(default=False, description="Mode debug")
    ENVIRONMENT: str = Field(default="development", description="Environment aplikasi")
    API_PREFIX: str = Field(default="", description="Prefix untuk semua router")

    # Security Settings
    SECRET_KEY: str = Field(..., description="Secret key untuk signing JWT")
    ENCRYPTION_KEY: str = Field(..., description="Key untuk enkripsi MFA secret")

    # JWT Settings
    ALGORITHM: str = Field(default="HS256", description="Algoritma untuk JWT")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=15, description="Masa berlaku access token dalam menit")
    REFRESH_TOKEN_EXPIRE_DAYS: int = Field(default=7, description="Masa berlaku refresh token dalam hari")
    MFA_TOKEN_EXPIRE_MINUTES: int = Field(default=5, description="Masa berlaku MFA pending token")
    PASSWORD_RESET_TOKEN_EXPIRE_MINUTES: int = Field(default=15, description="Masa berlaku token reset password")

    # Phone OTP
    OTP_LENGTH: int = Field(default=6, description="Jumlah digit OTP")
    OTP_TTL_SECONDS: int = Field(default=300, description="Masa berlaku OTP dalam detik")
    OTP_MAX_REQUESTS_PER_WINDOW: int = Field(default=3, description="Maksimal OTP per nomor per window")
    OTP_REQUEST_WINDOW_SECONDS: int = Field(default=3600, description="Window pembatasan OTP per nomor")
    OTP_MAX_VERIFY_ATTEMPTS: int = Field(default=5, description="Maksimal verifikasi gagal per OTP")

    # Two Factor Authentication
    TWO_FACTOR_ISSUER_NAME: str = Field(default="AuthGate", description="Nama issuer untuk TOTP")
    TOTP_VALID_WINDOW: int = Field(default=1, description="Toleransi time-step TOTP")

    # Fraud Signals
    FRAUD_LAST_IP_TTL_DAYS: int = Field(default=30, description="Masa simpan last-seen IP")
    FRAUD_FAILED_LOGIN_WINDOW_SECONDS: int = Field(default=3600, description="Window counter login gagal per IP")
    FRAUD_FAILED_LOGIN_THRESHOLD: int = Field(default=10, description="Ambang sinyal brute force")
    EVENT_QUEUE_MAX_SIZE: int = Field(default=1000, description="Kapasitas antrian event")

    # Per-route rate limits (per caller IP)
    REGISTER_RATE_LIMIT: int = Field(default=3, description="Register per window")
    REGISTER_RATE_WINDOW_SECONDS: int = Field(default=60)
    LOGIN_RATE_LIMIT: int = Field(default=5, description="Login per window")
    LOGIN_RATE_WINDOW_SECONDS: int = Field(default=60)
    REFRESH_RATE_LIMIT: int = Field(default=5, description="Refresh per window")
    REFRESH_RATE_WINDOW_SECONDS: int = Field(default=60)
    PHONE_OTP_RATE_LIMIT: int = Field(default=2, description="OTP request per window")
    PHONE_OTP_RATE_WINDOW_SECONDS: int = Field(default=60)
    FORGOT_PASSWORD_RATE_LIMIT: int = Field(default=2, description="Forgot password per window")
    FORGOT_PASSWORD_RATE_WINDOW_SECONDS: int = Field(default=3600)
    RATE_LIMIT_ENABLED: bool = Field(default=True, description="Aktifkan per-route rate limit")

    # Database
    DATABASE_URL: str = Field(..., description="SQLAlchemy async connection URL")
    DB_POOL_SIZE: int = Field(default=20, description="Database connection pool size")
    DB_MAX_OVERFLOW: int = Field(default=0, description="Database max overflow connections")
    DB_POOL_PRE_PING: bool = Field(default=True, description="Pre-ping database connections")

    # Redis
    REDIS_URL: str = Field(..., description="Redis connection URL")
    REDIS_POOL_SIZE: int = Field(default=10, description="Redis connection pool size")
    REDIS_SOCKET_TIMEOUT: float = Field(default=2.0, description="Timeout operasi Redis (detik)")

    # Timeouts
    EXTERNAL_CALL_TIMEOUT_SECONDS: float = Field(
        default=5.0,
        description="Batas waktu untuk hasher, identity provider, dan enqueue"
    )

    # Google Sign-In
    GOOGLE_CLIENT_ID: Optional[str] = Field(None, description="OAuth client ID untuk audience check")

    # Notifications
    NOTIFICATION_MAX_TRIES: int = Field(default=5, description="Maksimal percobaan job notifikasi")
    NOTIFICATION_BACKOFF_SECONDS: int = Field(default=5, description="Base backoff job notifikasi")
    SMTP_HOST: str = Field(default="localhost", description="SMTP server host")
    SMTP_PORT: int = Field(default=587, description="SMTP server port")
    SMTP_USER: Optional[str] = Field(None, description="SMTP username")
    SMTP_PASSWORD: Optional[str] = Field(None, description="SMTP password")
    SMTP_TLS: bool = Field(default=True, description="Enable SMTP TLS")
    SMTP_SSL: bool = Field(default=False, description="Enable SMTP SSL")
    EMAIL_FROM_NAME: str = Field(default="AuthGate", description="Email sender name")
    EMAIL_FROM_ADDRESS: str = Field(default="noreply@example.com", description="Email sender address")
    FRONTEND_URL: str = Field(default="http://localhost:3000", description="Frontend URL untuk email links")
    SMS_PROVIDER: str = Field(default="console", description="console atau twilio")
    TWILIO_ACCOUNT_SID: Optional[str] = Field(None, description="Twilio account SID")
    TWILIO_AUTH_TOKEN: Optional[str] = Field(None, description="Twilio auth token")
    TWILIO_FROM_NUMBER: Optional[str] = Field(None, description="Nomor pengirim SMS")

    # Logging
    LOG_LEVEL: str = Field(default="INFO", description="Log level")
    LOG_FORMAT: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format"
    )

    @field_validator("DATABASE_URL", "REDIS_URL", mode='before')
    def validate_required_url(cls, v: str) -> str:
        """Pastikan URL infrastruktur tidak kosong."""
        if not v:
            raise ValueError("connection URL must be set")
        return v

    @field_validator("SMS_PROVIDER", mode='before')
    def validate_sms_provider(cls, v: str) -> str:
        """Normalize dan validasi nama SMS provider."""
        v = (v or "console").lower().strip()
        if v not in ("console", "twilio"):
            raise ValueError(f"Unsupported SMS provider: {v}")
        return v

    @field_validator("LOG_LEVEL", mode='before')
    def normalize_log_level(cls, v: str) -> str:
        """Log level selalu uppercase."""
        return (v or "INFO").upper()

    @property
    def access_token_expire_timedelta(self) -> timedelta:
        """Return timedelta untuk access token expiration."""
        return timedelta(minutes=self.ACCESS_TOKEN_EXPIRE_MINUTES)

    @property
    def refresh_token_expire_timedelta(self) -> timedelta:
        """Return timedelta untuk refresh token expiration."""
        return timedelta(days=self.REFRESH_TOKEN_EXPIRE_DAYS)

    @property
    def mfa_token_expire_timedelta(self) -> timedelta:
        """Return timedelta untuk MFA pending token expiration."""
        return timedelta(minutes=self.MFA_TOKEN_EXPIRE_MINUTES)

    @property
    def password_reset_expire_timedelta(self) -> timedelta:
        """Return timedelta untuk password reset token expiration."""
        return timedelta(minutes=self.PASSWORD_RESET_TOKEN_EXPIRE_MINUTES)

    @property
    def refresh_token_ttl_seconds(self) -> int:
        """TTL session record di ephemeral store, sama dengan umur refresh token."""
        return int(self.refresh_token_expire_timedelta.total_seconds())

    @property
    def fraud_last_ip_ttl_seconds(self) -> int:
        return self.FRAUD_LAST_IP_TTL_DAYS * 24 * 60 * 60


@lru_cache()
def get_settings() -> Settings:
    """
    Mendapatkan cached settings instance.
    Menggunakan lru_cache untuk memastikan settings hanya di-load sekali.
    """
    return Settings()


# Global settings instance
settings = get_settings()
