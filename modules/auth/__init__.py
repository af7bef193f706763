"""
Authentication module.

Handles bearer credential verification, identity resolution and the user
stores behind it.

Public API:
- IAuthService / IIdentityResolver / ICredentialVerifier / IUserStore: Interfaces
- CredentialVerifier, CredentialIssuer: Sign and check bearer credentials
- IdentityResolver, AuthService: Claims -> Principal
- StoreHealth, SupabaseUserStore, InMemoryUserStore: User stores
- Auth exceptions: MalformedTokenError, ExpiredTokenError, etc.
"""

from .interfaces import IAuthService, IIdentityResolver, ICredentialVerifier, IUserStore
from .models import Claims, StoreKind, UserRecord
from .credentials import CredentialVerifier, CredentialIssuer
from .stores import StoreHealth, SupabaseUserStore, InMemoryUserStore
from .service import IdentityResolver, AuthService, AdminAuthenticator
from .exceptions import (
    MissingTokenError,
    InvalidTokenError,
    MalformedTokenError,
    InvalidSignatureError,
    ExpiredTokenError,
    UserNotFoundError,
    UserDeactivatedError,
    InvalidAdminCredentialsError,
)

__all__ = [
    # Interfaces
    "IAuthService",
    "IIdentityResolver",
    "ICredentialVerifier",
    "IUserStore",
    # Models
    "Claims",
    "StoreKind",
    "UserRecord",
    # Implementations
    "CredentialVerifier",
    "CredentialIssuer",
    "StoreHealth",
    "SupabaseUserStore",
    "InMemoryUserStore",
    "IdentityResolver",
    "AuthService",
    "AdminAuthenticator",
    # Exceptions
    "MissingTokenError",
    "InvalidTokenError",
    "MalformedTokenError",
    "InvalidSignatureError",
    "ExpiredTokenError",
    "UserNotFoundError",
    "UserDeactivatedError",
    "InvalidAdminCredentialsError",
]
