"""
Authentication dependencies untuk FastAPI.
Authentication step (verifikasi access token) dan authorization step (cek role claim).
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Annotated
from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from authgate.api.dependencies.services import get_container
from authgate.core.constants import TokenType
from authgate.core.exceptions import (
    AccountInactiveException,
    AuthenticationError,
    AuthorizationError,
    TokenError
)
from authgate.core.security import security

# Bearer scheme, error ditangani sendiri agar format response konsisten
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    """Subject yang sudah terautentikasi untuk request ini."""
    account_id: UUID
    role: Optional[str] = None
    claims: Dict[str, Any] = field(default_factory=dict)


async def get_current_principal(
    request: Request,
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)]
) -> Principal:
    """
    Verifikasi bearer access token dan attach subject ke request.

    Args:
        request: FastAPI request
        credentials: Authorization header

    Returns:
        Principal

    Raises:
        AuthenticationError: Token tidak ada atau tidak valid
        AccountInactiveException: Akun tidak ACTIVE
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Not authenticated")

    payload = security.decode_token(credentials.credentials, expected_type=TokenType.ACCESS.value)
    try:
        account_id = UUID(str(payload["sub"]))
    except ValueError:
        raise TokenError("Invalid token subject")

    account = await get_container(request).repository.get_account(account_id)
    if account is None:
        raise AuthenticationError("Account not found")
    if not account.is_active:
        raise AccountInactiveException(status=account.a_status.value)

    principal = Principal(account_id=account_id, role=payload.get("role"), claims=payload)
    request.state.principal = principal
    return principal


def require_roles(*roles: str):
    """
    Dependency factory untuk authorization step berdasarkan role claim.

    Example:
        @router.get("/admin", dependencies=[Depends(require_roles("admin"))])
    """
    async def _check(
        principal: Annotated[Principal, Depends(get_current_principal)]
    ) -> Principal:
        if roles and principal.role not in roles:
            raise AuthorizationError("Insufficient role")
        return principal

    return _check


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]
