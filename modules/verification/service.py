"""
Provider verification service implementation.

Owns persistence and serialization of provider applications; the transition
rules themselves live in state_machine.py.
"""

import asyncio
import logging
import weakref
from datetime import datetime, timezone
from typing import Callable, Optional

from modules.access.exceptions import InsufficientRoleError
from shared.exceptions import ExternalServiceError
from shared.logging import audit
from shared.models import Principal, ProviderStatus, RoleKind

from .exceptions import (
    ApplicationNotFoundError,
    DocumentNotUploadedError,
    InvalidTransitionError,
    NotAProviderError,
)
from .interfaces import (
    IApplicationRepository,
    IProviderStatusSink,
    IProviderVerificationService,
)
from .models import (
    REQUIRED_DOCUMENTS,
    ApplicationEvent,
    ApplicationSummary,
    DocumentKind,
    DocumentStatus,
    PortfolioItem,
    ProviderApplication,
)
from .state_machine import (
    apply_document_update,
    apply_document_verification,
    apply_event,
)

logger = logging.getLogger(__name__)

Mutation = Callable[[ProviderApplication, datetime], ProviderApplication]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def clamp_upload_time(uploaded_at: Optional[datetime], now: datetime) -> datetime:
    """Caller-reported upload time, read as UTC when naive and never later than now."""
    if uploaded_at is None:
        return now
    if uploaded_at.tzinfo is None:
        uploaded_at = uploaded_at.replace(tzinfo=timezone.utc)
    return min(uploaded_at, now)


class ProviderVerificationService(IProviderVerificationService):
    """
    Implementation of provider onboarding.

    Every change to one provider's application runs under that provider's
    lock, and is saved with compare-and-set on the application version. The
    lock serializes callers in this process; the version check catches
    writers in other processes.
    """

    def __init__(
        self,
        repository: IApplicationRepository,
        clock: Callable[[], datetime] = _utcnow,
        status_sink: Optional[IProviderStatusSink] = None,
    ):
        self._repo = repository
        self._clock = clock
        self._status_sink = status_sink
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    def _lock_for(self, provider_id: str) -> asyncio.Lock:
        lock = self._locks.get(provider_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[provider_id] = lock
        return lock

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def open_application(self, provider: Principal) -> ProviderApplication:
        if provider.role != RoleKind.PROVIDER:
            raise NotAProviderError(provider.id)

        existing = await self._repo.get(provider.id)
        if existing is not None:
            return existing

        now = self._clock()
        created = await self._repo.create(
            ProviderApplication(provider_id=provider.id, created_at=now, updated_at=now)
        )
        logger.info(f"Opened provider application for {provider.id}")
        return created

    async def get_application(self, provider_id: str) -> ProviderApplication:
        application = await self._repo.get(provider_id)
        if application is None:
            raise ApplicationNotFoundError(provider_id)
        return application

    async def get_summary(self, provider_id: str) -> ApplicationSummary:
        application = await self.get_application(provider_id)
        return build_summary(application)

    async def list_applications(
        self,
        status: Optional[ProviderStatus] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[ProviderApplication], int]:
        applications = await self._repo.list(status=status, limit=limit, offset=offset)
        total = await self._repo.count(status=status)
        return applications, total

    # -------------------------------------------------------------------------
    # Provider-side changes
    # -------------------------------------------------------------------------

    async def record_document(
        self,
        caller: Principal,
        kind: DocumentKind,
        reference: str,
        uploaded_at: Optional[datetime] = None,
    ) -> ProviderApplication:
        await self.open_application(caller)

        def mutate(application: ProviderApplication, now: datetime) -> ProviderApplication:
            status = DocumentStatus(
                uploaded=True,
                verified=False,
                uploaded_at=clamp_upload_time(uploaded_at, now),
                recorded_at=now,
                reference=reference,
            )
            return apply_document_update(
                application, caller, now, lambda checklist: checklist.with_document(kind, status)
            )

        application = await self._mutate(caller.id, ApplicationEvent.UPDATE_DOCUMENTS, mutate)
        logger.info(f"Recorded {kind.value} for provider {caller.id}")
        return application

    async def add_portfolio_item(
        self,
        caller: Principal,
        reference: str,
        description: str = "",
        uploaded_at: Optional[datetime] = None,
    ) -> ProviderApplication:
        await self.open_application(caller)

        def mutate(application: ProviderApplication, now: datetime) -> ProviderApplication:
            item = PortfolioItem(
                reference=reference,
                description=description,
                uploaded_at=clamp_upload_time(uploaded_at, now),
                recorded_at=now,
            )
            return apply_document_update(
                application, caller, now, lambda checklist: checklist.with_portfolio_item(item)
            )

        return await self._mutate(caller.id, ApplicationEvent.UPDATE_DOCUMENTS, mutate)

    async def submit(self, caller: Principal) -> ProviderApplication:
        await self.open_application(caller)
        return await self._transition(caller, caller.id, ApplicationEvent.SUBMIT)

    async def resubmit(self, caller: Principal) -> ProviderApplication:
        await self.open_application(caller)
        return await self._transition(caller, caller.id, ApplicationEvent.RESUBMIT)

    # -------------------------------------------------------------------------
    # Admin-side changes
    # -------------------------------------------------------------------------

    async def approve(self, admin: Principal, provider_id: str) -> ProviderApplication:
        return await self._transition(admin, provider_id, ApplicationEvent.APPROVE)

    async def reject(self, admin: Principal, provider_id: str, reason: str) -> ProviderApplication:
        return await self._transition(admin, provider_id, ApplicationEvent.REJECT, reason=reason)

    async def verify_document(
        self,
        admin: Principal,
        provider_id: str,
        kind: DocumentKind,
        verified: bool = True,
    ) -> ProviderApplication:
        if admin.role != RoleKind.ADMIN:
            raise InsufficientRoleError([RoleKind.ADMIN.value], admin.role.value)

        def mutate(application: ProviderApplication, now: datetime) -> ProviderApplication:
            if not application.checklist.status_of(kind).uploaded:
                raise DocumentNotUploadedError(provider_id, kind)
            return apply_document_verification(
                application, admin, now, lambda checklist: checklist.with_verification(kind, verified)
            )

        application = await self._mutate(provider_id, ApplicationEvent.VERIFY_DOCUMENT, mutate)
        audit(
            "provider_document_verified",
            admin.id,
            provider=provider_id,
            document=kind.value,
            verified=verified,
        )
        return application

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    async def _transition(
        self,
        caller: Principal,
        provider_id: str,
        event: ApplicationEvent,
        reason: Optional[str] = None,
    ) -> ProviderApplication:
        previous: dict[str, ProviderStatus] = {}

        def mutate(application: ProviderApplication, now: datetime) -> ProviderApplication:
            previous["status"] = application.status
            return apply_event(application, event, caller, now, reason=reason)

        application = await self._mutate(provider_id, event, mutate, publish=True)
        audit(
            f"provider_application_{event.value}",
            caller.id,
            provider=provider_id,
            from_state=previous["status"].value,
            to_state=application.status.value,
        )
        return application

    async def _publish_status(self, application: ProviderApplication) -> None:
        """Mirror the application state onto the provider's user record."""
        if self._status_sink is None:
            return
        try:
            await self._status_sink.set_provider_status(
                application.provider_id, application.status
            )
        except ExternalServiceError as e:
            # The application row stays authoritative; the user record catches
            # up on the next transition.
            logger.error(
                f"Could not record provider status {application.status.value} "
                f"for {application.provider_id}: {e.message}"
            )

    async def _mutate(
        self,
        provider_id: str,
        event: ApplicationEvent,
        mutate: Mutation,
        publish: bool = False,
    ) -> ProviderApplication:
        """
        Load, change and compare-and-set save one application under its lock.

        With `publish`, the new state is mirrored to the user record before
        the lock is released, so records see transitions in order.
        """
        async with self._lock_for(provider_id):
            current = await self.get_application(provider_id)
            updated = mutate(current, self._clock())
            saved = await self._repo.save(updated, expected_version=current.version)
            if not saved:
                latest = await self.get_application(provider_id)
                logger.warning(
                    f"Lost update race on provider application {provider_id} "
                    f"event={event.value} state={latest.status.value}"
                )
                raise InvalidTransitionError(
                    event, latest.status, "application was changed concurrently"
                )
            if publish:
                await self._publish_status(updated)
            return updated


def build_summary(application: ProviderApplication) -> ApplicationSummary:
    """Compute dashboard progress for an application."""
    checklist = application.checklist
    missing = checklist.missing_required()
    required_total = len(REQUIRED_DOCUMENTS)
    required_uploaded = required_total - len(missing)
    statuses = [checklist.status_of(kind) for kind in DocumentKind]

    can_resubmit = (
        application.status == ProviderStatus.REJECTED
        and application.rejected_at is not None
        and checklist.updated_since(application.rejected_at)
        and not missing
    )

    return ApplicationSummary(
        provider_id=application.provider_id,
        status=application.status,
        submitted_at=application.submitted_at,
        approved_at=application.approved_at,
        rejected_at=application.rejected_at,
        rejection_reason=application.rejection_reason,
        required_total=required_total,
        required_uploaded=required_uploaded,
        documents_uploaded=sum(1 for status in statuses if status.uploaded),
        documents_verified=sum(1 for status in statuses if status.verified),
        portfolio_items=len(checklist.portfolio),
        missing_required=missing,
        completion_percentage=round(required_uploaded * 100 / required_total),
        can_submit=application.status == ProviderStatus.PENDING and not missing,
        can_resubmit=can_resubmit,
    )
