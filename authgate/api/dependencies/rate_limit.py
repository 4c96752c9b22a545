"""
Rate limiting dependencies untuk FastAPI.
Burst-control per route per IP, dengan sliding window di Redis.
"""

from typing import Callable, Optional

from fastapi import Request

from authgate.api.dependencies.services import get_container
from authgate.core.config import settings
from authgate.core.exceptions import RateLimitError


def client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


class RateLimitDependency:
    """
    Rate limiting dependency menggunakan sliding window algorithm.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: int,
        namespace: str,
        key_func: Optional[Callable[[Request], str]] = None
    ):
        """
        Initialize rate limiter.

        Args:
            max_requests: Maximum requests allowed dalam window
            window_seconds: Time window dalam seconds
            namespace: Namespace untuk Redis keys (nama route)
            key_func: Custom function untuk identitas caller (default: client IP)
        """
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.namespace = namespace
        self.key_func = key_func or client_ip

    async def __call__(self, request: Request) -> None:
        """
        Check rate limit untuk request.

        Raises:
            RateLimitError: Jika rate limit exceeded
        """
        if not settings.RATE_LIMIT_ENABLED:
            return

        limiter = get_container(request).rate_limiter
        allowed, info = await limiter.check_rate_limit(
            namespace=self.namespace,
            identifier=self.key_func(request),
            limit=self.max_requests,
            window_seconds=self.window_seconds
        )

        if not allowed:
            raise RateLimitError(
                "Rate limit exceeded",
                retry_after=info["retry_after"],
                details={"limit": info["limit"], "reset": info["reset"]}
            )

        request.state.rate_limit_headers = {
            "X-RateLimit-Limit": str(info["limit"]),
            "X-RateLimit-Remaining": str(info["remaining"]),
            "X-RateLimit-Reset": str(info["reset"])
        }


register_rate_limit = RateLimitDependency(
    settings.REGISTER_RATE_LIMIT, settings.REGISTER_RATE_WINDOW_SECONDS, "register"
)
login_rate_limit = RateLimitDependency(
    settings.LOGIN_RATE_LIMIT, settings.LOGIN_RATE_WINDOW_SECONDS, "login"
)
refresh_rate_limit = RateLimitDependency(
    settings.REFRESH_RATE_LIMIT, settings.REFRESH_RATE_WINDOW_SECONDS, "refresh"
)
phone_otp_rate_limit = RateLimitDependency(
    settings.PHONE_OTP_RATE_LIMIT, settings.PHONE_OTP_RATE_WINDOW_SECONDS, "phone_otp"
)
forgot_password_rate_limit = RateLimitDependency(
    settings.FORGOT_PASSWORD_RATE_LIMIT, settings.FORGOT_PASSWORD_RATE_WINDOW_SECONDS, "forgot_password"
)
