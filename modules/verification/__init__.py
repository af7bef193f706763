"""
Provider verification module.

Tracks each provider's onboarding application through review:
pending -> under_review -> approved | rejected, with rejected providers able
to resubmit after updating their documents.

Public API:
- IProviderVerificationService / IApplicationRepository / IDocumentStorage: Interfaces
- ProviderVerificationService: Implementation
- apply_event: Pure transition function
- InMemoryApplicationRepository, SupabaseApplicationRepository: Persistence
- Models: ProviderApplication, DocumentChecklist, DocumentKind, etc.
- Exceptions: InvalidTransitionError, ApplicationNotFoundError, etc.
"""

from .interfaces import IApplicationRepository, IDocumentStorage, IProviderVerificationService
from .models import (
    REQUIRED_DOCUMENTS,
    ApplicationEvent,
    ApplicationSummary,
    DocumentChecklist,
    DocumentKind,
    DocumentStatus,
    PortfolioItem,
    ProviderApplication,
)
from .state_machine import TRANSITIONS, apply_event, can_apply
from .repository import InMemoryApplicationRepository, SupabaseApplicationRepository
from .service import ProviderVerificationService, build_summary
from .exceptions import (
    InvalidTransitionError,
    ApplicationNotFoundError,
    DocumentNotUploadedError,
    NotAProviderError,
)

__all__ = [
    # Interfaces
    "IApplicationRepository",
    "IDocumentStorage",
    "IProviderVerificationService",
    # Models
    "REQUIRED_DOCUMENTS",
    "ApplicationEvent",
    "ApplicationSummary",
    "DocumentChecklist",
    "DocumentKind",
    "DocumentStatus",
    "PortfolioItem",
    "ProviderApplication",
    # State machine
    "TRANSITIONS",
    "apply_event",
    "can_apply",
    # Implementations
    "InMemoryApplicationRepository",
    "SupabaseApplicationRepository",
    "ProviderVerificationService",
    "build_summary",
    # Exceptions
    "InvalidTransitionError",
    "ApplicationNotFoundError",
    "DocumentNotUploadedError",
    "NotAProviderError",
]
