"""
Authentication module exceptions.

These exceptions are raised by the auth module and can be caught
by API error handlers to return appropriate HTTP responses.
"""

from shared.exceptions import AuthenticationError, AuthorizationError


class MissingTokenError(AuthenticationError):
    """Raised when no authentication token is provided."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, code="MISSING_TOKEN")


class InvalidTokenError(AuthenticationError):
    """Base for credentials that cannot be trusted."""

    def __init__(self, message: str = "Invalid authentication token", code: str = "INVALID_TOKEN"):
        super().__init__(message, code=code)


class MalformedTokenError(InvalidTokenError):
    """Raised when a credential is not a well-formed signed token."""

    def __init__(self, message: str = "Malformed authentication token"):
        super().__init__(message, code="MALFORMED_TOKEN")


class InvalidSignatureError(InvalidTokenError):
    """Raised when a credential's signature does not match the configured secret."""

    def __init__(self, message: str = "Authentication token signature mismatch"):
        super().__init__(message, code="INVALID_SIGNATURE")


class ExpiredTokenError(AuthenticationError):
    """Raised when a JWT token has expired."""

    def __init__(self, message: str = "Authentication token has expired"):
        super().__init__(message, code="TOKEN_EXPIRED")


class UserNotFoundError(AuthenticationError):
    """Raised when the credential's subject doesn't exist in any user store."""

    def __init__(self, user_id: str):
        super().__init__(
            f"User not found: {user_id}",
            code="USER_NOT_FOUND",
            details={"user_id": user_id},
        )


class UserDeactivatedError(AuthorizationError):
    """Raised when the credential's subject exists but has been deactivated."""

    def __init__(self, user_id: str):
        super().__init__(
            f"User is deactivated: {user_id}",
            code="USER_DEACTIVATED",
            details={"user_id": user_id},
        )


class InvalidAdminCredentialsError(AuthenticationError):
    """Raised when admin login credentials don't match the configured admin."""

    def __init__(self):
        super().__init__("Invalid admin credentials", code="INVALID_ADMIN_CREDENTIALS")
