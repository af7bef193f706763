"""
Bearer authentication and authorization dependencies.

Extracts the caller's credential, resolves it to a Principal through the
auth service, and exposes the access guards as FastAPI dependencies.
"""

from typing import Any, Callable, Iterable, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from modules.access.guards import (
    DEFAULT_OWNER_FIELDS,
    Guard,
    OwnershipGuard,
    PermissionGuard,
    RoleGuard,
    VerifiedEmailGuard,
)
from modules.access.permissions import Permission
from modules.auth.exceptions import MissingTokenError
from modules.auth.interfaces import IAuthService
from shared.exceptions import AuthenticationError, AuthorizationError
from shared.models import Principal, RoleKind

from ..dependencies import get_auth_service

# Bearer token extractor
bearer_scheme = HTTPBearer(auto_error=False)

# Browser clients may carry the credential in a cookie instead of a header.
TOKEN_COOKIE = "token"


def extract_credential(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials],
) -> Optional[str]:
    """Return the raw credential from the Authorization header or the token cookie."""
    if credentials is not None and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(TOKEN_COOKIE) or None


async def get_current_principal(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth: IAuthService = Depends(get_auth_service),
) -> Principal:
    """
    Dependency that requires authentication.

    Use this for endpoints that require a logged-in caller.

    Usage:
        @router.get("/protected")
        async def protected_route(principal: Principal = Depends(get_current_principal)):
            return {"user_id": principal.id}
    """
    raw = extract_credential(request, credentials)
    if raw is None:
        raise MissingTokenError()

    principal = await auth.authenticate(raw)
    request.state.principal = principal
    return principal


async def get_optional_principal(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth: IAuthService = Depends(get_auth_service),
) -> Optional[Principal]:
    """
    Dependency that optionally resolves the caller if authenticated.

    Use this for endpoints that work with or without authentication. A
    rejected credential is treated as anonymous.
    """
    raw = extract_credential(request, credentials)
    if raw is None:
        return None

    try:
        principal = await auth.authenticate(raw)
    except (AuthenticationError, AuthorizationError):
        return None
    request.state.principal = principal
    return principal


def require_guard(guard: Guard) -> Callable:
    """Build a dependency that runs a guard against the current principal."""

    async def dependency(principal: Principal = Depends(get_current_principal)) -> Principal:
        guard.check(principal)
        return principal

    return dependency


def require_roles(*roles: RoleKind) -> Callable:
    """
    Dependency factory restricting an endpoint to the given roles.

    Usage:
        @router.get("/admin-only")
        async def admin_route(principal: Principal = Depends(require_roles(RoleKind.ADMIN))):
            ...
    """
    return require_guard(RoleGuard(roles))


def require_permission(permission: Permission) -> Callable:
    """Dependency factory restricting an endpoint to roles granted a permission."""
    return require_guard(PermissionGuard(permission))


def require_verified_email() -> Callable:
    """Any role, as long as the email address has been verified."""
    return require_guard(VerifiedEmailGuard())


def require_owner(
    principal: Principal,
    resource: Any,
    owner_fields: Iterable[str] = DEFAULT_OWNER_FIELDS,
) -> None:
    """
    Check that the principal owns a loaded resource (admins always pass).

    Ownership needs the resource, so handlers call this after loading it
    rather than declaring it as a dependency.
    """
    OwnershipGuard(owner_fields).check(principal, resource)


# Type alias for cleaner route definitions
RequireAuth = Depends(get_current_principal)
