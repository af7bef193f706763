"""
Access control module exceptions.

These exceptions are raised by the guards and can be caught
by API error handlers to return appropriate HTTP responses.
"""

from typing import Optional

from shared.exceptions import AuthenticationError, AuthorizationError, NotFoundError


class UnauthenticatedError(AuthenticationError):
    """Raised when a guard runs without a resolved principal."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, code="UNAUTHENTICATED")


class ForbiddenError(AuthorizationError):
    """Base for every guard denial of an authenticated principal."""

    def __init__(
        self,
        message: str = "Access denied",
        code: str = "FORBIDDEN",
        details: Optional[dict] = None,
    ):
        super().__init__(message, code=code, details=details)


class InsufficientRoleError(ForbiddenError):
    """Raised when the principal's role is not among the allowed roles."""

    def __init__(self, required_roles: list[str], user_role: str):
        super().__init__(
            f"Insufficient permissions. Required one of: {', '.join(required_roles)}",
            code="INSUFFICIENT_ROLE",
            details={"required_roles": required_roles, "user_role": user_role},
        )


class InsufficientPermissionsError(ForbiddenError):
    """Raised when the principal's role lacks a permission."""

    def __init__(self, permission: str, user_role: str):
        super().__init__(
            f"Insufficient permissions. Required: {permission}",
            code="INSUFFICIENT_PERMISSIONS",
            details={"required_permission": permission, "user_role": user_role},
        )


class EmailNotVerifiedError(ForbiddenError):
    """Raised when an action needs a verified email address."""

    def __init__(self):
        super().__init__(
            "Please verify your email address before proceeding",
            code="EMAIL_NOT_VERIFIED",
        )


class AccountInactiveError(ForbiddenError):
    """Raised when a deactivated principal reaches a guard."""

    def __init__(self):
        super().__init__("Your account has been deactivated", code="ACCOUNT_INACTIVE")


class OwnershipDeniedError(ForbiddenError):
    """
    Raised when the principal neither owns the resource nor is an admin.

    The API reports this exactly like ResourceNotFoundError so callers
    cannot probe for the existence of other users' resources.
    """

    def __init__(self, resource_id: Optional[str], user_id: str):
        super().__init__(
            "You can only access your own resources",
            code="OWNERSHIP_DENIED",
            details={"resource_id": resource_id, "user_id": user_id},
        )
        self.resource_id = resource_id


class ResourceNotFoundError(NotFoundError):
    """Raised when a guarded resource does not exist."""

    def __init__(self, resource_id: Optional[str] = None):
        super().__init__(
            "Resource not found",
            code="NOT_FOUND",
            details={"resource_id": resource_id} if resource_id else {},
        )
