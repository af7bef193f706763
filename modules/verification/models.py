"""
Provider verification module data models.

These models define the onboarding application a provider goes through
before being allowed to receive bookings, and the document checklist that
gates its submission.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field

from shared.models import ProviderStatus


class DocumentKind(str, Enum):
    """Singular documents a provider uploads."""

    NATIONAL_ID = "national_id"
    BUSINESS_LICENSE = "business_license"
    CERTIFICATE = "certificate"
    GOOD_CONDUCT_CERTIFICATE = "good_conduct_certificate"


# Every one of these must be uploaded before the application can be submitted.
REQUIRED_DOCUMENTS: frozenset[DocumentKind] = frozenset({
    DocumentKind.NATIONAL_ID,
    DocumentKind.BUSINESS_LICENSE,
    DocumentKind.GOOD_CONDUCT_CERTIFICATE,
})


class ApplicationEvent(str, Enum):
    """Events that drive the application lifecycle."""

    SUBMIT = "submit"                    # Provider submits for the first time
    APPROVE = "approve"                  # Admin approves
    REJECT = "reject"                    # Admin rejects with a reason
    RESUBMIT = "resubmit"                # Provider resubmits after rejection
    UPDATE_DOCUMENTS = "update_documents"  # Provider edits the checklist (no state change)
    VERIFY_DOCUMENT = "verify_document"    # Admin marks a document verified (no state change)


class DocumentStatus(BaseModel):
    """Upload/verification flags for one document, as reported by document storage."""

    uploaded: bool = Field(default=False, description="Whether a file has been stored")
    verified: bool = Field(default=False, description="Whether an admin has checked it")
    uploaded_at: Optional[datetime] = Field(None, description="When the file was stored")
    recorded_at: Optional[datetime] = Field(None, description="When this service recorded the upload")
    reference: Optional[str] = Field(None, description="Opaque URL/id from document storage")

    model_config = {"frozen": True}


class PortfolioItem(BaseModel):
    """One optional portfolio entry (photos of past work and the like)."""

    reference: str = Field(..., min_length=1, description="Opaque URL/id from document storage")
    description: str = Field(default="", max_length=500, description="Caption")
    uploaded_at: datetime = Field(..., description="When the file was stored")
    recorded_at: Optional[datetime] = Field(None, description="When this service recorded the upload")

    model_config = {"frozen": True}


class DocumentChecklist(BaseModel):
    """
    Documents attached to an application.

    Fixed-kind documents live in `documents`; the variable-length portfolio
    is kept apart so completeness only ever looks at fixed kinds.
    """

    documents: dict[DocumentKind, DocumentStatus] = Field(default_factory=dict)
    portfolio: list[PortfolioItem] = Field(default_factory=list)

    model_config = {"frozen": True}

    def status_of(self, kind: DocumentKind) -> DocumentStatus:
        return self.documents.get(kind, DocumentStatus())

    def missing_required(self) -> list[DocumentKind]:
        """Required kinds not yet uploaded, in declaration order."""
        return [
            kind for kind in DocumentKind
            if kind in REQUIRED_DOCUMENTS and not self.status_of(kind).uploaded
        ]

    def is_complete(self) -> bool:
        return not self.missing_required()

    def updated_since(self, moment: datetime) -> bool:
        """
        Whether any document or portfolio item was recorded after `moment`.

        Only the server-side `recorded_at` counts; `uploaded_at` comes from
        the caller and is informational.
        """
        for status in self.documents.values():
            if status.uploaded and status.recorded_at and status.recorded_at > moment:
                return True
        return any(
            item.recorded_at is not None and item.recorded_at > moment for item in self.portfolio
        )

    def with_document(self, kind: DocumentKind, status: DocumentStatus) -> "DocumentChecklist":
        return self.model_copy(update={"documents": {**self.documents, kind: status}})

    def with_portfolio_item(self, item: PortfolioItem) -> "DocumentChecklist":
        return self.model_copy(update={"portfolio": [*self.portfolio, item]})

    def with_verification(self, kind: DocumentKind, verified: bool) -> "DocumentChecklist":
        current = self.status_of(kind)
        return self.with_document(kind, current.model_copy(update={"verified": verified}))


class ProviderApplication(BaseModel):
    """
    One provider's onboarding application.

    Only the state machine produces new versions of this record; it is
    never deleted so review history stays auditable.
    """

    provider_id: str = Field(..., description="Principal ID of the provider")
    status: ProviderStatus = Field(default=ProviderStatus.PENDING)
    checklist: DocumentChecklist = Field(default_factory=DocumentChecklist)
    rejection_reason: Optional[str] = Field(None, description="Set only while rejected")

    submitted_at: Optional[datetime] = Field(None, description="Last (re)submission")
    approved_at: Optional[datetime] = Field(None, description="Approval time, never cleared")
    rejected_at: Optional[datetime] = Field(None, description="Set only while rejected")
    approved_by: Optional[str] = Field(None, description="Admin who approved")
    reviewed_by: Optional[str] = Field(None, description="Admin who made the last decision")

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    version: int = Field(default=0, ge=0, description="Bumped on every change")


class ApplicationSummary(BaseModel):
    """Progress view of an application for the provider dashboard."""

    provider_id: str
    status: ProviderStatus
    submitted_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    required_total: int
    required_uploaded: int
    documents_uploaded: int
    documents_verified: int
    portfolio_items: int
    missing_required: list[DocumentKind] = Field(default_factory=list)
    completion_percentage: int = Field(..., ge=0, le=100)
    can_submit: bool
    can_resubmit: bool


class RecordDocumentRequest(BaseModel):
    """Upload report from document storage for one document kind."""

    reference: str = Field(..., min_length=1, max_length=2048)
    uploaded_at: Optional[datetime] = Field(
        None, description="When storage accepted the file; defaults to now, never later than now"
    )


class AddPortfolioItemRequest(BaseModel):
    """Upload report from document storage for a portfolio entry."""

    reference: str = Field(..., min_length=1, max_length=2048)
    description: str = Field(default="", max_length=500)
    uploaded_at: Optional[datetime] = Field(
        None, description="When storage accepted the file; defaults to now, never later than now"
    )


class RejectApplicationRequest(BaseModel):
    """Admin rejection with the reason shown to the provider."""

    reason: str = Field(..., min_length=1, max_length=2000)


class VerifyDocumentRequest(BaseModel):
    """Admin verification flag for one document."""

    verified: bool


class ApplicationListResponse(BaseModel):
    """Paginated admin review queue."""

    applications: list[ProviderApplication]
    total: int
    limit: int
    offset: int
