"""
Request logging middleware untuk AuthGate API.
Logs semua HTTP request dengan request ID, durasi, dan body yang sudah di-redact.
"""

from typing import Callable, Optional, Any, List
import time
import json
import uuid
import logging

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp


logger = logging.getLogger("authgate.access")


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Request/response logging middleware.

    Features:
    - Request ID generation (X-Request-ID)
    - Request/response timing
    - Body logging dengan redaksi password, token, dan kode OTP/TOTP
    - Propagasi header X-RateLimit-* dari rate limit dependency
    """

    def __init__(
        self,
        app: ASGIApp,
        log_request_body: bool = False,
        exclude_paths: Optional[List[str]] = None,
        sensitive_fields: Optional[List[str]] = None,
        max_body_size: int = 1024
    ):
        """
        Initialize logging middleware.

        Args:
            app: FastAPI/Starlette application
            log_request_body: Whether to log request bodies
            exclude_paths: Paths to exclude from logging
            sensitive_fields: Fields to redact from logs
            max_body_size: Maximum body size to log (bytes)
        """
        super().__init__(app)
        self.log_request_body = log_request_body
        self.exclude_paths = exclude_paths or ["/health"]
        self.sensitive_fields = sensitive_fields or [
            "password", "token", "secret", "code", "authorization"
        ]
        self.max_body_size = max_body_size

    def should_log_path(self, path: str) -> bool:
        return not any(path.startswith(excluded) for excluded in self.exclude_paths)

    def redact_sensitive_data(self, data: Any) -> Any:
        """
        Redact sensitive fields from data.

        Args:
            data: Data to redact

        Returns:
            Redacted data
        """
        if isinstance(data, dict):
            return {
                key: "[REDACTED]"
                if any(sensitive in key.lower() for sensitive in self.sensitive_fields)
                else self.redact_sensitive_data(value)
                for key, value in data.items()
            }
        if isinstance(data, list):
            return [self.redact_sensitive_data(item) for item in data]
        return data

    async def get_request_body(self, request: Request) -> Optional[str]:
        if not self.log_request_body:
            return None

        body = await request.body()
        if len(body) > self.max_body_size:
            return f"[Body too large: {len(body)} bytes]"
        try:
            return json.dumps(self.redact_sensitive_data(json.loads(body)))
        except (json.JSONDecodeError, UnicodeDecodeError):
            return "[Non-JSON body]"

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        should_log = self.should_log_path(request.url.path)
        request_body = await self.get_request_body(request) if should_log else None

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        response.headers["X-Request-ID"] = request_id
        for header, value in getattr(request.state, "rate_limit_headers", {}).items():
            response.headers[header] = value

        if should_log:
            log_entry = {
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "client_ip": request.client.host if request.client else "unknown",
                "user_agent": request.headers.get("user-agent", "unknown"),
                "status_code": response.status_code,
                "duration_ms": round(duration_ms, 2),
            }
            principal = getattr(request.state, "principal", None)
            if principal is not None:
                log_entry["account_id"] = str(principal.account_id)
            if request_body:
                log_entry["request_body"] = request_body

            if response.status_code >= 500:
                logger.error(log_entry)
            elif response.status_code >= 400:
                logger.warning(log_entry)
            else:
                logger.info(log_entry)

        return response
