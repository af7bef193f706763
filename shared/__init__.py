"""
Shared infrastructure for the Solutil backend.

This package contains cross-cutting concerns that are used by multiple modules:
- config: Centralized settings management
- database: Supabase client factory
- exceptions: Base exception classes
- logging: Logger setup and audit trail helper
- models: The request Principal and role/status enums

Note: Business logic should NOT go here. This is for infrastructure only.
"""

from .config import Settings, get_settings
from .database import get_supabase_client, is_supabase_configured, reset_client_cache
from .exceptions import (
    SolutilError,
    NotFoundError,
    ValidationError,
    AuthenticationError,
    AuthorizationError,
    RateLimitError,
    ExternalServiceError,
)
from .models import Principal, RoleKind, ProviderStatus

__all__ = [
    "Settings",
    "get_settings",
    "get_supabase_client",
    "is_supabase_configured",
    "reset_client_cache",
    "SolutilError",
    "NotFoundError",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "RateLimitError",
    "ExternalServiceError",
    "Principal",
    "RoleKind",
    "ProviderStatus",
]
