"""
Dependency injection setup for FastAPI.

This module provides the "container" that wires together all module
implementations. Each module exposes its service through an interface,
and this file creates the concrete implementations.

Store selection happens here: Supabase-backed stores when Supabase is
configured, in-memory stores otherwise.
"""

from typing import TYPE_CHECKING, Optional

from shared.config import Settings, get_settings

# Type checking imports for interfaces (avoids circular imports)
if TYPE_CHECKING:
    from modules.auth.credentials import CredentialIssuer, CredentialVerifier
    from modules.auth.interfaces import IAuthService, IUserStore
    from modules.auth.service import AdminAuthenticator, IdentityResolver
    from modules.auth.stores import StoreHealth
    from modules.ratelimit.interfaces import IRateLimiter
    from modules.verification.interfaces import (
        IApplicationRepository,
        IProviderVerificationService,
    )


class ServiceContainer:
    """
    Container for all service instances.

    This class manages the lifecycle of service instances and their
    dependencies. Services are created lazily on first access.

    All services are cached as singletons within the container.
    Use reset() to clear all cached services for testing.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings
        self._store_health: "StoreHealth | None" = None
        self._primary_store: "IUserStore | None" = None
        self._fallback_store: "IUserStore | None" = None
        self._credential_verifier: "CredentialVerifier | None" = None
        self._credential_issuer: "CredentialIssuer | None" = None
        self._admin_authenticator: "AdminAuthenticator | None" = None
        self._identity_resolver: "IdentityResolver | None" = None
        self._auth_service: "IAuthService | None" = None
        self._rate_limiter: "IRateLimiter | None" = None
        self._application_repository: "IApplicationRepository | None" = None
        self._verification_service: "IProviderVerificationService | None" = None

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    @property
    def uses_supabase(self) -> bool:
        """Whether the primary stores are backed by Supabase."""
        from shared.database import is_supabase_configured
        return is_supabase_configured(self.settings) and not self.settings.use_fallback_store

    @property
    def store_health(self) -> "StoreHealth":
        """Get the primary-store health flag."""
        if self._store_health is None:
            from modules.auth.stores import StoreHealth
            self._store_health = StoreHealth(
                primary_available=self.uses_supabase,
                retry_after_seconds=self.settings.store_retry_seconds,
            )
            if not self.uses_supabase:
                self._store_health.mark_unavailable("primary store not configured", permanent=True)
        return self._store_health

    @property
    def primary_store(self) -> "IUserStore":
        """Get the primary user store."""
        if self._primary_store is None:
            from modules.auth.models import StoreKind
            from modules.auth.stores import InMemoryUserStore, SupabaseUserStore
            if self.uses_supabase:
                from shared.database import get_supabase_client
                self._primary_store = SupabaseUserStore(
                    get_supabase_client(), table=self.settings.users_table
                )
            else:
                self._primary_store = InMemoryUserStore(kind=StoreKind.PRIMARY)
        return self._primary_store

    @property
    def fallback_store(self) -> "IUserStore":
        """Get the fallback user store (demo accounts in development only)."""
        if self._fallback_store is None:
            from modules.auth.stores import DEMO_USERS, InMemoryUserStore
            records = DEMO_USERS if self.settings.is_development else ()
            self._fallback_store = InMemoryUserStore(records)
        return self._fallback_store

    @property
    def credential_verifier(self) -> "CredentialVerifier":
        if self._credential_verifier is None:
            from modules.auth.credentials import CredentialVerifier
            self._credential_verifier = CredentialVerifier.from_settings(self.settings)
        return self._credential_verifier

    @property
    def credential_issuer(self) -> "CredentialIssuer":
        if self._credential_issuer is None:
            from modules.auth.credentials import CredentialIssuer
            self._credential_issuer = CredentialIssuer.from_settings(self.settings)
        return self._credential_issuer

    @property
    def admin_authenticator(self) -> "AdminAuthenticator":
        if self._admin_authenticator is None:
            from modules.auth.service import AdminAuthenticator
            self._admin_authenticator = AdminAuthenticator.from_settings(
                self.settings, self.credential_issuer
            )
        return self._admin_authenticator

    @property
    def identity_resolver(self) -> "IdentityResolver":
        """Get the identity resolver over the primary and fallback stores."""
        if self._identity_resolver is None:
            from modules.auth.service import IdentityResolver
            self._identity_resolver = IdentityResolver(
                primary=self.primary_store,
                fallback=self.fallback_store,
                health=self.store_health,
                admin_subject_id=self.settings.admin_subject_id,
            )
        return self._identity_resolver

    @property
    def auth(self) -> "IAuthService":
        """Get the auth service instance."""
        if self._auth_service is None:
            from modules.auth.service import AuthService
            self._auth_service = AuthService(self.credential_verifier, self.identity_resolver)
        return self._auth_service

    @property
    def rate_limiter(self) -> "IRateLimiter":
        """Get the rate limiter instance."""
        if self._rate_limiter is None:
            from modules.ratelimit.service import InMemoryRateLimiter
            self._rate_limiter = InMemoryRateLimiter(max_keys=self.settings.rate_limit_max_keys)
        return self._rate_limiter

    @property
    def application_repository(self) -> "IApplicationRepository":
        """Get the provider application repository instance."""
        if self._application_repository is None:
            from modules.verification.repository import (
                InMemoryApplicationRepository,
                SupabaseApplicationRepository,
            )
            if self.uses_supabase:
                from shared.database import get_supabase_client
                self._application_repository = SupabaseApplicationRepository(
                    get_supabase_client(), table=self.settings.applications_table
                )
            else:
                self._application_repository = InMemoryApplicationRepository()
        return self._application_repository

    @property
    def verification(self) -> "IProviderVerificationService":
        """Get the provider verification service instance."""
        if self._verification_service is None:
            from modules.verification.service import ProviderVerificationService
            self._verification_service = ProviderVerificationService(
                self.application_repository, status_sink=self.identity_resolver
            )
        return self._verification_service

    def reset(self) -> None:
        """
        Reset all cached services.

        This is primarily for testing - allows tests to get fresh
        service instances with different mock dependencies.
        """
        self._settings = None
        self._store_health = None
        self._primary_store = None
        self._fallback_store = None
        self._credential_verifier = None
        self._credential_issuer = None
        self._admin_authenticator = None
        self._identity_resolver = None
        self._auth_service = None
        self._rate_limiter = None
        self._application_repository = None
        self._verification_service = None


# Module-level container singleton
_container: ServiceContainer | None = None


def get_container() -> ServiceContainer:
    """Get the singleton service container."""
    global _container
    if _container is None:
        _container = ServiceContainer()
    return _container


def reset_container() -> None:
    """
    Reset the service container.

    This clears the cached container, so the next call to get_container()
    will create a fresh container with new service instances.

    Primarily used for testing.
    """
    global _container
    _container = None


# FastAPI dependency functions
# These are the functions that should be used in route Depends() calls


def get_auth_service() -> "IAuthService":
    """FastAPI dependency for auth service."""
    return get_container().auth


def get_admin_authenticator() -> "AdminAuthenticator":
    """FastAPI dependency for admin login."""
    return get_container().admin_authenticator


def get_store_health() -> "StoreHealth":
    """FastAPI dependency for the primary-store health flag."""
    return get_container().store_health


def get_rate_limiter() -> "IRateLimiter":
    """FastAPI dependency for the rate limiter."""
    return get_container().rate_limiter


def get_verification_service() -> "IProviderVerificationService":
    """FastAPI dependency for provider verification service."""
    return get_container().verification


def get_app_settings() -> Settings:
    """FastAPI dependency for the settings the container was built with."""
    return get_container().settings
