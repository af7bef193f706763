"""
Provider verification module interface.

Routes and other modules depend on these protocols, not the concrete
implementations.
"""

from datetime import datetime
from typing import Protocol, Optional, runtime_checkable

from shared.models import Principal, ProviderStatus

from .models import ApplicationSummary, DocumentKind, DocumentStatus, ProviderApplication


@runtime_checkable
class IApplicationRepository(Protocol):
    """Persistence for provider applications with compare-and-set saves."""

    async def get(self, provider_id: str) -> Optional[ProviderApplication]:
        ...

    async def create(self, application: ProviderApplication) -> ProviderApplication:
        """
        Insert an application unless one already exists for the provider.

        Returns:
            The stored application (the existing one if there was one)
        """
        ...

    async def save(self, application: ProviderApplication, expected_version: int) -> bool:
        """
        Replace the stored application if its version still equals expected_version.

        Returns:
            True if saved, False if another writer got there first
        """
        ...

    async def list(
        self,
        status: Optional[ProviderStatus] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[ProviderApplication]:
        ...

    async def count(self, status: Optional[ProviderStatus] = None) -> int:
        ...


@runtime_checkable
class IProviderStatusSink(Protocol):
    """Where application state changes are mirrored onto the provider's user record."""

    async def set_provider_status(self, user_id: str, status: ProviderStatus) -> None:
        ...


@runtime_checkable
class IProviderVerificationService(Protocol):
    """
    Interface for provider onboarding operations.

    Every state-changing call is serialized per provider; concurrent events
    on the same application never both apply.
    """

    async def open_application(self, provider: Principal) -> ProviderApplication:
        """
        Get the provider's application, creating a pending one on first use.

        Raises:
            NotAProviderError: If the principal is not a provider
        """
        ...

    async def get_application(self, provider_id: str) -> ProviderApplication:
        """
        Raises:
            ApplicationNotFoundError: If the provider has no application
        """
        ...

    async def get_summary(self, provider_id: str) -> ApplicationSummary:
        ...

    async def record_document(
        self,
        caller: Principal,
        kind: DocumentKind,
        reference: str,
        uploaded_at: Optional[datetime] = None,
    ) -> ProviderApplication:
        """
        Record an uploaded document on the caller's own application.

        Raises:
            InvalidTransitionError: If the application is under review
        """
        ...

    async def add_portfolio_item(
        self,
        caller: Principal,
        reference: str,
        description: str = "",
        uploaded_at: Optional[datetime] = None,
    ) -> ProviderApplication:
        ...

    async def submit(self, caller: Principal) -> ProviderApplication:
        ...

    async def resubmit(self, caller: Principal) -> ProviderApplication:
        ...

    async def approve(self, admin: Principal, provider_id: str) -> ProviderApplication:
        ...

    async def reject(self, admin: Principal, provider_id: str, reason: str) -> ProviderApplication:
        ...

    async def verify_document(
        self,
        admin: Principal,
        provider_id: str,
        kind: DocumentKind,
        verified: bool = True,
    ) -> ProviderApplication:
        """
        Raises:
            DocumentNotUploadedError: If the document was never uploaded
        """
        ...

    async def list_applications(
        self,
        status: Optional[ProviderStatus] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[ProviderApplication], int]:
        """
        Returns:
            (applications, total matching count)
        """
        ...


@runtime_checkable
class IDocumentStorage(Protocol):
    """
    External file storage for provider documents.

    Uploads happen outside this service; the storage collaborator reports
    back an opaque reference, and routes record only the resulting flags.
    """

    async def describe(self, reference: str) -> Optional[DocumentStatus]:
        """
        Look up a stored file.

        Returns:
            DocumentStatus for the reference, or None if nothing is stored
        """
        ...
