"""
Role to permission matrix.

Roles are a closed enum and every role must have a row here; the module
refuses to import otherwise.
"""

from enum import Enum

from shared.models import RoleKind


class Permission(str, Enum):
    """Actions a role may be granted."""

    PROFILE_READ = "profile:read"
    USERS_READ_ANY = "users:read_any"
    USERS_MANAGE = "users:manage"
    BOOKINGS_CREATE = "bookings:create"
    BOOKINGS_READ_OWN = "bookings:read_own"
    PROVIDER_APPLICATION_MANAGE = "provider_application:manage"
    PROVIDER_APPLICATION_REVIEW = "provider_application:review"
    PROVIDER_DOCUMENTS_VERIFY = "provider_documents:verify"


ROLE_PERMISSIONS: dict[RoleKind, frozenset[Permission]] = {
    RoleKind.CLIENT: frozenset({
        Permission.PROFILE_READ,
        Permission.BOOKINGS_CREATE,
        Permission.BOOKINGS_READ_OWN,
    }),
    RoleKind.PROVIDER: frozenset({
        Permission.PROFILE_READ,
        Permission.BOOKINGS_READ_OWN,
        Permission.PROVIDER_APPLICATION_MANAGE,
    }),
    RoleKind.ADMIN: frozenset(Permission) - {Permission.PROVIDER_APPLICATION_MANAGE},
}

_unmapped = set(RoleKind) - set(ROLE_PERMISSIONS)
if _unmapped:
    raise RuntimeError(f"Roles missing from permission matrix: {sorted(r.value for r in _unmapped)}")


def permissions_for(role: RoleKind) -> frozenset[Permission]:
    return ROLE_PERMISSIONS[role]


def has_permission(role: RoleKind, permission: Permission) -> bool:
    return permission in ROLE_PERMISSIONS[role]
