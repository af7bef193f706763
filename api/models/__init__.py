"""API models package."""

from .errors import ErrorResponse
from .user import UserProfileResponse

__all__ = ["ErrorResponse", "UserProfileResponse"]
