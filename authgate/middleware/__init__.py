"""
Middleware module untuk AuthGate API.
"""

from authgate.middleware.error_handler import (
    ErrorHandlerMiddleware,
    authgate_exception_handler,
    http_exception_handler,
    validation_exception_handler
)
from authgate.middleware.logging import LoggingMiddleware

__all__ = [
    "ErrorHandlerMiddleware",
    "authgate_exception_handler",
    "http_exception_handler",
    "validation_exception_handler",
    "LoggingMiddleware",
]
