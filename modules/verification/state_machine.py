"""
Provider application state machine.

Pure functions: given an application, an event, the caller and the current
time, produce the next version of the application or raise
InvalidTransitionError. Persistence and locking live in the service.

    pending ──submit──> under_review ──approve──> approved
                             │ ▲
                        reject │ │ resubmit
                             ▼ │
                          rejected
"""

from datetime import datetime
from typing import Callable, Optional

from shared.models import Principal, ProviderStatus, RoleKind

from .exceptions import InvalidTransitionError
from .models import ApplicationEvent, DocumentChecklist, ProviderApplication

TRANSITIONS: dict[tuple[ProviderStatus, ApplicationEvent], ProviderStatus] = {
    (ProviderStatus.PENDING, ApplicationEvent.SUBMIT): ProviderStatus.UNDER_REVIEW,
    (ProviderStatus.UNDER_REVIEW, ApplicationEvent.APPROVE): ProviderStatus.APPROVED,
    (ProviderStatus.UNDER_REVIEW, ApplicationEvent.REJECT): ProviderStatus.REJECTED,
    (ProviderStatus.REJECTED, ApplicationEvent.RESUBMIT): ProviderStatus.UNDER_REVIEW,
}

# The checklist is frozen while an admin is reviewing it.
LOCKED_STATES = frozenset({ProviderStatus.UNDER_REVIEW})


def can_apply(status: ProviderStatus, event: ApplicationEvent) -> bool:
    return (status, event) in TRANSITIONS


def _require_owner(application: ProviderApplication, caller: Principal, event: ApplicationEvent) -> None:
    if caller.role != RoleKind.PROVIDER or caller.id != application.provider_id:
        raise InvalidTransitionError(
            event, application.status, "only the owning provider may do this"
        )


def _require_admin(application: ProviderApplication, caller: Principal, event: ApplicationEvent) -> None:
    if caller.role != RoleKind.ADMIN:
        raise InvalidTransitionError(event, application.status, "admin role required")


def _require_complete(application: ProviderApplication, event: ApplicationEvent) -> None:
    missing = application.checklist.missing_required()
    if missing:
        raise InvalidTransitionError(
            event,
            application.status,
            "missing required documents",
            extra={"missing_documents": [kind.value for kind in missing]},
        )


def apply_event(
    application: ProviderApplication,
    event: ApplicationEvent,
    caller: Principal,
    now: datetime,
    reason: Optional[str] = None,
) -> ProviderApplication:
    """
    Apply a lifecycle event.

    Args:
        application: Current application (not modified)
        event: One of submit/approve/reject/resubmit
        caller: Principal performing the event
        now: Transition time, recorded on the new version
        reason: Rejection reason, required for reject

    Returns:
        The next version of the application

    Raises:
        InvalidTransitionError: If the event is not allowed from the current
            state, or its guard fails
    """
    target = TRANSITIONS.get((application.status, event))
    if target is None:
        raise InvalidTransitionError(event, application.status, "not allowed from current state")

    update: dict = {"status": target}

    if event == ApplicationEvent.SUBMIT:
        _require_owner(application, caller, event)
        _require_complete(application, event)
        update["submitted_at"] = now

    elif event == ApplicationEvent.APPROVE:
        _require_admin(application, caller, event)
        update.update(approved_at=now, approved_by=caller.id, reviewed_by=caller.id)

    elif event == ApplicationEvent.REJECT:
        _require_admin(application, caller, event)
        reason = (reason or "").strip()
        if not reason:
            raise InvalidTransitionError(event, application.status, "a rejection reason is required")
        update.update(rejected_at=now, rejection_reason=reason, reviewed_by=caller.id)

    elif event == ApplicationEvent.RESUBMIT:
        _require_owner(application, caller, event)
        rejected_at = application.rejected_at
        if rejected_at is None or not application.checklist.updated_since(rejected_at):
            raise InvalidTransitionError(
                event, application.status, "documents must be updated since the rejection"
            )
        _require_complete(application, event)
        update.update(submitted_at=now, rejected_at=None, rejection_reason=None)

    update["updated_at"] = now
    update["version"] = application.version + 1
    return application.model_copy(update=update)


def apply_document_update(
    application: ProviderApplication,
    caller: Principal,
    now: datetime,
    change: Callable[[DocumentChecklist], DocumentChecklist],
) -> ProviderApplication:
    """
    Apply a provider-side checklist change without changing state.

    Raises:
        InvalidTransitionError: If the caller is not the owning provider or
            the application is under review
    """
    event = ApplicationEvent.UPDATE_DOCUMENTS
    _require_owner(application, caller, event)
    if application.status in LOCKED_STATES:
        raise InvalidTransitionError(
            event, application.status, "documents cannot change while under review"
        )
    return application.model_copy(update={
        "checklist": change(application.checklist),
        "updated_at": now,
        "version": application.version + 1,
    })


def apply_document_verification(
    application: ProviderApplication,
    caller: Principal,
    now: datetime,
    change: Callable[[DocumentChecklist], DocumentChecklist],
) -> ProviderApplication:
    """Apply an admin-side verification flag change without changing state."""
    _require_admin(application, caller, ApplicationEvent.VERIFY_DOCUMENT)
    return application.model_copy(update={
        "checklist": change(application.checklist),
        "updated_at": now,
        "version": application.version + 1,
    })
