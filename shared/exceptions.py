"""
Base exception classes for the Solutil backend.

Each module should define its own exceptions that inherit from these bases.
This enables consistent error handling across the application: the API layer
maps each base class to one HTTP status.
"""

from typing import Optional, Any


class SolutilError(Exception):
    """
    Base exception for all Solutil errors.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(SolutilError):
    """Resource not found."""

    pass


class ValidationError(SolutilError):
    """Input validation failed."""

    pass


class AuthenticationError(SolutilError):
    """Authentication failed (invalid or missing credentials)."""

    pass


class AuthorizationError(SolutilError):
    """Authorization failed (insufficient permissions)."""

    pass


class RateLimitError(SolutilError):
    """Caller exceeded an allowed request rate."""

    pass


class ExternalServiceError(SolutilError):
    """Error communicating with an external service."""

    def __init__(
        self,
        message: str,
        service: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)
        self.service = service
        self.details["service"] = service
