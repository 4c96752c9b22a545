"""
Global error handler untuk AuthGate API.
Mengubah semua exception menjadi response dengan format konsisten:
{"error": {"message", "type", "timestamp", "request_id", "details"}}
"""

from typing import Callable, Optional, Dict, Any
import logging
from datetime import datetime, timezone

from fastapi import Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp
from starlette.exceptions import HTTPException as StarletteHTTPException

from authgate.core.config import settings
from authgate.core.exceptions import AuthGateException, RateLimitError


logger = logging.getLogger("authgate.error")


def create_error_response(
    request: Request,
    status_code: int,
    message: str,
    error_type: str = "Error",
    details: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None
) -> JSONResponse:
    """
    Create standardized error response.

    Args:
        request: Request object
        status_code: HTTP status code
        message: Error message
        error_type: Nama tipe error
        details: Additional error details
        headers: Header tambahan (misal Retry-After)

    Returns:
        JSON error response
    """
    error_response = {
        "error": {
            "message": message,
            "type": error_type,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "request_id": getattr(request.state, "request_id", None),
            "details": details or {}
        }
    }

    response_headers = {
        "X-Content-Type-Options": "nosniff",
        "Cache-Control": "no-store"
    }
    if headers:
        response_headers.update(headers)

    return JSONResponse(status_code=status_code, content=error_response, headers=response_headers)


def log_error(request: Request, error: Exception, status_code: int) -> None:
    """Log error dengan context request. 5xx dengan stack trace, sisanya warning."""
    log_entry = {
        "request_id": getattr(request.state, "request_id", "unknown"),
        "method": request.method,
        "path": request.url.path,
        "status_code": status_code,
        "error_type": type(error).__name__,
        "error_message": str(error),
        "client_ip": request.client.host if request.client else "unknown",
    }
    principal = getattr(request.state, "principal", None)
    if principal is not None:
        log_entry["account_id"] = str(principal.account_id)

    if status_code >= 500:
        logger.error(log_entry, exc_info=error)
    else:
        logger.warning(log_entry)


async def authgate_exception_handler(request: Request, exc: AuthGateException) -> JSONResponse:
    """Handler untuk semua AuthGateException."""
    log_error(request, exc, exc.status_code)
    headers = None
    if isinstance(exc, RateLimitError) and exc.retry_after is not None:
        headers = {"Retry-After": str(exc.retry_after)}
    elif exc.status_code == 401:
        headers = {"WWW-Authenticate": "Bearer"}
    return create_error_response(
        request,
        exc.status_code,
        exc.message,
        error_type=type(exc).__name__,
        details=exc.details,
        headers=headers
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handler untuk HTTPException FastAPI/Starlette."""
    log_error(request, exc, exc.status_code)
    return create_error_response(
        request,
        exc.status_code,
        str(exc.detail),
        error_type="HTTPException",
        headers=getattr(exc, "headers", None)
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handler untuk request validation error (422)."""
    errors = [
        {
            "field": " -> ".join(str(x) for x in error["loc"]),
            "message": error["msg"],
            "type": error["type"]
        }
        for error in exc.errors()
    ]
    log_error(request, exc, 422)
    return create_error_response(
        request,
        422,
        "Validation failed",
        error_type="ValidationError",
        details={"validation_errors": errors}
    )


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Last-line error handler untuk exception yang lolos dari exception handlers.
    Detail internal disembunyikan kecuali DEBUG aktif.
    """

    def __init__(self, app: ASGIApp, debug: Optional[bool] = None):
        super().__init__(app)
        self.debug = debug if debug is not None else settings.DEBUG

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except AuthGateException as exc:
            return await authgate_exception_handler(request, exc)
        except Exception as exc:
            log_error(request, exc, 500)
            message = str(exc) if self.debug else "An internal server error occurred"
            return create_error_response(
                request,
                500,
                message,
                error_type="InternalServerError"
            )
