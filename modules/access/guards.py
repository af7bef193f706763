"""
Authorization guards.

Each guard is a pure check over an optional Principal and an optional target
resource: it returns None when the check passes and raises otherwise. Guards
never mutate either argument. They run only after authentication; a missing
principal is always reported as UnauthenticatedError, never as a denial.
"""

from typing import Any, Iterable, Optional, Protocol, runtime_checkable

from shared.models import Principal, RoleKind

from .exceptions import (
    AccountInactiveError,
    EmailNotVerifiedError,
    InsufficientPermissionsError,
    InsufficientRoleError,
    OwnershipDeniedError,
    ResourceNotFoundError,
    UnauthenticatedError,
)
from .permissions import Permission, has_permission

DEFAULT_OWNER_FIELDS = ("owner_id", "client_id", "user_id")


@runtime_checkable
class Guard(Protocol):
    """A single authorization check."""

    def check(self, principal: Optional[Principal], resource: Any = None) -> None:
        ...


def require_principal(principal: Optional[Principal]) -> Principal:
    if principal is None:
        raise UnauthenticatedError()
    return principal


def _field(resource: Any, name: str) -> Any:
    """Read a field from a model/object or a plain mapping (e.g. a DB row)."""
    if isinstance(resource, dict):
        return resource.get(name)
    return getattr(resource, name, None)


class RoleGuard:
    """Passes iff the principal's role is one of the allowed roles."""

    def __init__(self, allowed_roles: Iterable[RoleKind]):
        self.allowed_roles = frozenset(RoleKind(role) for role in allowed_roles)
        if not self.allowed_roles:
            raise ValueError("RoleGuard needs at least one allowed role")

    def check(self, principal: Optional[Principal], resource: Any = None) -> None:
        principal = require_principal(principal)
        if principal.role not in self.allowed_roles:
            raise InsufficientRoleError(
                sorted(role.value for role in self.allowed_roles),
                principal.role.value,
            )


class PermissionGuard:
    """Passes iff the principal's role is granted the permission."""

    def __init__(self, permission: Permission):
        self.permission = permission

    def check(self, principal: Optional[Principal], resource: Any = None) -> None:
        principal = require_principal(principal)
        if not has_permission(principal.role, self.permission):
            raise InsufficientPermissionsError(self.permission.value, principal.role.value)


class OwnershipGuard:
    """
    Passes iff the principal is an admin, owns the resource, or is the resource.

    A missing resource fails with ResourceNotFoundError before ownership is
    considered.
    """

    def __init__(self, owner_fields: Iterable[str] = DEFAULT_OWNER_FIELDS, id_field: str = "id"):
        self.owner_fields = tuple(owner_fields)
        self.id_field = id_field

    def check(self, principal: Optional[Principal], resource: Any = None) -> None:
        principal = require_principal(principal)
        if resource is None:
            raise ResourceNotFoundError()

        if principal.role == RoleKind.ADMIN:
            return

        resource_id = _field(resource, self.id_field)
        if resource_id is not None and str(resource_id) == principal.id:
            return

        for name in self.owner_fields:
            owner = _field(resource, name)
            if owner is not None and str(owner) == principal.id:
                return

        raise OwnershipDeniedError(
            str(resource_id) if resource_id is not None else None,
            principal.id,
        )


class VerifiedEmailGuard:
    """Passes iff the principal has verified their email address."""

    def check(self, principal: Optional[Principal], resource: Any = None) -> None:
        principal = require_principal(principal)
        if not principal.is_email_verified:
            raise EmailNotVerifiedError()


class ActiveGuard:
    """Passes iff the principal is active."""

    def check(self, principal: Optional[Principal], resource: Any = None) -> None:
        principal = require_principal(principal)
        if not principal.is_active:
            raise AccountInactiveError()


class GuardChain:
    """Runs guards in order; the first failure wins."""

    def __init__(self, *guards: Guard):
        self.guards = guards

    def check(self, principal: Optional[Principal], resource: Any = None) -> None:
        require_principal(principal)
        for guard in self.guards:
            guard.check(principal, resource)

    def then(self, guard: Guard) -> "GuardChain":
        return GuardChain(*self.guards, guard)
