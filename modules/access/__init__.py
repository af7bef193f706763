"""
Access control module.

Composable authorization guards over a resolved Principal, plus the
role-to-permission matrix.

Public API:
- Guard: Protocol every guard satisfies
- RoleGuard, PermissionGuard, OwnershipGuard, VerifiedEmailGuard, ActiveGuard
- GuardChain: Ordered composition of guards
- Permission, ROLE_PERMISSIONS: Permission matrix
- Access exceptions: UnauthenticatedError, ForbiddenError, etc.
"""

from .guards import (
    Guard,
    RoleGuard,
    PermissionGuard,
    OwnershipGuard,
    VerifiedEmailGuard,
    ActiveGuard,
    GuardChain,
    require_principal,
)
from .permissions import Permission, ROLE_PERMISSIONS, has_permission, permissions_for
from .exceptions import (
    UnauthenticatedError,
    ForbiddenError,
    InsufficientRoleError,
    InsufficientPermissionsError,
    EmailNotVerifiedError,
    AccountInactiveError,
    OwnershipDeniedError,
    ResourceNotFoundError,
)

__all__ = [
    # Guards
    "Guard",
    "RoleGuard",
    "PermissionGuard",
    "OwnershipGuard",
    "VerifiedEmailGuard",
    "ActiveGuard",
    "GuardChain",
    "require_principal",
    # Permissions
    "Permission",
    "ROLE_PERMISSIONS",
    "has_permission",
    "permissions_for",
    # Exceptions
    "UnauthenticatedError",
    "ForbiddenError",
    "InsufficientRoleError",
    "InsufficientPermissionsError",
    "EmailNotVerifiedError",
    "AccountInactiveError",
    "OwnershipDeniedError",
    "ResourceNotFoundError",
]
