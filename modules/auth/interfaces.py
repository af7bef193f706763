"""
Authentication module interface.

Other modules should depend on these protocols, not the concrete
implementations. This enables testing with mocks and swapping the user
store without touching the resolver.
"""

from datetime import datetime
from typing import Protocol, Optional, runtime_checkable

from shared.models import Principal, ProviderStatus

from .models import Claims, StoreKind, UserRecord


@runtime_checkable
class IUserStore(Protocol):
    """
    Key-value lookup of user records.

    Both the primary (database) store and the fallback (in-memory) store
    implement this; `kind` tells them apart in logs and on the Principal.
    """

    kind: StoreKind

    async def lookup_by_id(self, user_id: str) -> Optional[UserRecord]:
        """
        Get a user record by ID.

        Returns:
            UserRecord if found, None otherwise

        Raises:
            ExternalServiceError: If the store cannot be reached
        """
        ...

    async def lookup_by_email(self, email: str) -> Optional[UserRecord]:
        """
        Get a user record by email (case-insensitive).

        Returns:
            UserRecord if found, None otherwise
        """
        ...

    async def set_provider_status(self, user_id: str, status: ProviderStatus) -> None:
        """
        Record a provider's verification status on their user record.

        Unknown users are ignored.

        Raises:
            ExternalServiceError: If the store cannot be reached
        """
        ...


@runtime_checkable
class ICredentialVerifier(Protocol):
    """Checks a raw bearer credential and extracts its claims."""

    def verify(self, raw_credential: str, now: Optional[datetime] = None) -> Claims:
        """
        Verify structure, expiry and signature of a credential.

        Args:
            raw_credential: The encoded token as presented by the caller
            now: Verification time (defaults to the current UTC time)

        Returns:
            Claims exactly as encoded at issuance

        Raises:
            MissingTokenError: If the credential is empty
            MalformedTokenError: If it is not a well-formed token
            ExpiredTokenError: If now >= expires_at
            InvalidSignatureError: If the signature does not match
        """
        ...


@runtime_checkable
class IIdentityResolver(Protocol):
    """Turns verified claims into a Principal."""

    async def resolve(self, claims: Claims) -> Principal:
        """
        Resolve claims to a Principal.

        Raises:
            UserNotFoundError: If no store has the subject
            UserDeactivatedError: If the subject's account is inactive
        """
        ...


@runtime_checkable
class IAuthService(Protocol):
    """
    Interface for authentication operations.

    This protocol defines the contract that the auth module exposes
    to the API layer.
    """

    async def authenticate(
        self,
        raw_credential: Optional[str],
        now: Optional[datetime] = None,
    ) -> Principal:
        """
        Verify a credential and resolve the caller.

        Raises:
            AuthenticationError: If the credential or identity is rejected
            AuthorizationError: If the identity is deactivated
        """
        ...

    async def find_user(self, user_id: str) -> Optional[UserRecord]:
        """
        Look up an ordinary user by ID in the active store.

        Returns:
            UserRecord if found, None otherwise (the admin is never found)
        """
        ...
