"""
Authentication service implementation.

Resolves verified credential claims into a Principal, choosing between the
primary and fallback user stores according to StoreHealth.
"""

import logging
import secrets
from datetime import datetime
from typing import Optional

from shared.config import Settings
from shared.exceptions import ExternalServiceError
from shared.models import Principal, ProviderStatus, RoleKind

from .credentials import CredentialIssuer, CredentialVerifier
from .exceptions import InvalidAdminCredentialsError, UserDeactivatedError, UserNotFoundError
from .interfaces import IAuthService, IIdentityResolver, IUserStore
from .models import Claims, StoreKind, UserRecord
from .stores import StoreHealth

logger = logging.getLogger(__name__)


class IdentityResolver(IIdentityResolver):
    """
    Builds the request Principal from verified claims.

    The reserved admin identity is synthesized from claims and never looked
    up. Everyone else is looked up in the primary store, or in the fallback
    store while StoreHealth reports the primary as unreachable.
    """

    def __init__(
        self,
        primary: IUserStore,
        fallback: IUserStore,
        health: StoreHealth,
        admin_subject_id: str = "admin",
    ):
        self._primary = primary
        self._fallback = fallback
        self._health = health
        self._admin_subject_id = admin_subject_id

    def is_admin_claims(self, claims: Claims) -> bool:
        """Both the admin flag and the reserved subject id are required."""
        return claims.is_admin and claims.subject_id == self._admin_subject_id

    def select_store(self) -> IUserStore:
        if self._health.should_try_primary():
            return self._primary
        return self._fallback

    async def resolve(self, claims: Claims) -> Principal:
        """Resolve claims to a Principal."""
        if self.is_admin_claims(claims):
            return Principal(
                id=claims.subject_id,
                email=claims.email,
                display_name=claims.display_name,
                role=RoleKind.ADMIN,
                is_active=True,
                is_email_verified=True,
            )

        store = self.select_store()
        record = await self._lookup(store, claims.subject_id)

        via_fallback = store.kind == StoreKind.FALLBACK
        if via_fallback:
            logger.warning(
                f"Resolved identity from fallback store (non-authoritative): "
                f"subject={claims.subject_id} found={record is not None}"
            )

        # Admins are never persisted with ordinary users.
        if record is None or record.role == RoleKind.ADMIN:
            raise UserNotFoundError(claims.subject_id)

        if not record.is_active:
            raise UserDeactivatedError(record.id)

        return self._to_principal(record, via_fallback)

    async def find_user(self, user_id: str) -> Optional[UserRecord]:
        """Look up an ordinary user record in whichever store is active."""
        record = await self._lookup(self.select_store(), user_id)
        if record is None or record.role == RoleKind.ADMIN:
            return None
        return record

    async def set_provider_status(self, user_id: str, status: ProviderStatus) -> None:
        """Write a provider's verification status to whichever store is active."""
        store = self.select_store()
        try:
            await store.set_provider_status(user_id, status)
        except ExternalServiceError as e:
            if store.kind == StoreKind.PRIMARY:
                self._health.mark_unavailable(e.message)
            raise
        self._note_primary_success(store)

    async def _lookup(self, store: IUserStore, user_id: str) -> Optional[UserRecord]:
        try:
            record = await store.lookup_by_id(user_id)
        except ExternalServiceError as e:
            if store.kind == StoreKind.PRIMARY:
                self._health.mark_unavailable(e.message)
            raise
        self._note_primary_success(store)
        return record

    def _note_primary_success(self, store: IUserStore) -> None:
        if store.kind == StoreKind.PRIMARY and not self._health.is_primary_available():
            self._health.mark_available()

    @staticmethod
    def _to_principal(record: UserRecord, via_fallback: bool) -> Principal:
        return Principal(
            id=record.id,
            email=record.email,
            display_name=record.display_name,
            role=record.role,
            is_active=record.is_active,
            is_email_verified=record.is_email_verified,
            provider_status=record.provider_status if record.role == RoleKind.PROVIDER else None,
            via_fallback=via_fallback,
        )


class AuthService(IAuthService):
    """
    Implementation of the authentication service.

    Composes credential verification and identity resolution; this is what
    the request dependencies call.
    """

    def __init__(self, verifier: CredentialVerifier, resolver: IdentityResolver):
        self._verifier = verifier
        self._resolver = resolver

    @property
    def resolver(self) -> IdentityResolver:
        return self._resolver

    def verify(self, raw_credential: Optional[str], now: Optional[datetime] = None) -> Claims:
        return self._verifier.verify(raw_credential or "", now)

    async def authenticate(
        self,
        raw_credential: Optional[str],
        now: Optional[datetime] = None,
    ) -> Principal:
        claims = self.verify(raw_credential, now)
        return await self._resolver.resolve(claims)

    async def find_user(self, user_id: str) -> Optional[UserRecord]:
        return await self._resolver.find_user(user_id)


class AdminAuthenticator:
    """
    Checks the configured platform admin credentials and issues admin tokens.

    The admin account lives in configuration only. Login is disabled while
    either the admin email or password is unset.
    """

    def __init__(
        self,
        issuer: CredentialIssuer,
        admin_email: str,
        admin_password: str,
        display_name: str = "Platform Admin",
    ):
        self._issuer = issuer
        self._email = admin_email.strip().lower()
        self._password = admin_password
        self._display_name = display_name

    @classmethod
    def from_settings(cls, settings: Settings, issuer: CredentialIssuer) -> "AdminAuthenticator":
        return cls(
            issuer,
            settings.admin_email,
            settings.admin_password,
            settings.admin_display_name,
        )

    @property
    def enabled(self) -> bool:
        return bool(self._email and self._password)

    def login(self, email: str, password: str, now: Optional[datetime] = None) -> tuple[str, Claims]:
        """
        Issue an admin credential for matching email and password.

        Raises:
            InvalidAdminCredentialsError: If admin login is disabled or the
                credentials don't match
        """
        if not self.enabled:
            logger.warning("Admin login attempted but no admin credentials are configured")
            raise InvalidAdminCredentialsError()

        email_ok = secrets.compare_digest(
            email.strip().lower().encode("utf-8"), self._email.encode("utf-8")
        )
        password_ok = secrets.compare_digest(
            password.encode("utf-8"), self._password.encode("utf-8")
        )
        if not (email_ok and password_ok):
            raise InvalidAdminCredentialsError()

        return self._issuer.issue_admin(self._email, self._display_name, now=now)
