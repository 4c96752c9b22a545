"""
Dependencies module untuk FastAPI dependency injection.
"""

from authgate.api.dependencies.auth import (
    Principal,
    CurrentPrincipal,
    get_current_principal,
    require_roles
)
from authgate.api.dependencies.rate_limit import RateLimitDependency, client_ip
from authgate.api.dependencies.services import (
    ServiceContainer,
    build_container,
    get_auth_service,
    get_totp_service
)

__all__ = [
    "Principal",
    "CurrentPrincipal",
    "get_current_principal",
    "require_roles",
    "RateLimitDependency",
    "client_ip",
    "ServiceContainer",
    "build_container",
    "get_auth_service",
    "get_totp_service",
]
