"""
Provider verification module exceptions.
"""

from typing import Any, Optional

from shared.exceptions import NotFoundError, ValidationError
from shared.models import ProviderStatus

from .models import ApplicationEvent, DocumentKind


class InvalidTransitionError(ValidationError):
    """
    Raised when an event is not allowed for the application's current state.

    Nothing is applied when this is raised. The current state is included so
    the caller can correct course.
    """

    def __init__(
        self,
        event: ApplicationEvent,
        current_state: ProviderStatus,
        reason: str,
        extra: Optional[dict[str, Any]] = None,
    ):
        details = {
            "event": event.value,
            "current_state": current_state.value,
            "reason": reason,
        }
        if extra:
            details.update(extra)
        super().__init__(
            f"Cannot {event.value.replace('_', ' ')} application in state "
            f"'{current_state.value}': {reason}",
            code="INVALID_TRANSITION",
            details=details,
        )
        self.event = event
        self.current_state = current_state


class ApplicationNotFoundError(NotFoundError):
    """Raised when a provider has no application."""

    def __init__(self, provider_id: str):
        super().__init__(
            f"Provider application not found: {provider_id}",
            code="APPLICATION_NOT_FOUND",
            details={"provider_id": provider_id},
        )


class DocumentNotUploadedError(NotFoundError):
    """Raised when an admin tries to verify a document that was never uploaded."""

    def __init__(self, provider_id: str, kind: DocumentKind):
        super().__init__(
            f"Document not found: {kind.value}",
            code="DOCUMENT_NOT_UPLOADED",
            details={"provider_id": provider_id, "document": kind.value},
        )


class NotAProviderError(ValidationError):
    """Raised when an application is requested for a non-provider account."""

    def __init__(self, user_id: str):
        super().__init__(
            "User is not a provider",
            code="NOT_A_PROVIDER",
            details={"user_id": user_id},
        )
