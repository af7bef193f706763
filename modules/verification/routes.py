"""
Provider verification API endpoints.

Two routers: provider self-service under /api/providers/me and the admin
review queue under /api/admin/providers.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from api.middleware.auth import require_guard
from api.middleware.rate_limit import rate_limit
from api.dependencies import get_verification_service
from modules.access.guards import (
    ActiveGuard,
    GuardChain,
    PermissionGuard,
    RoleGuard,
    VerifiedEmailGuard,
)
from modules.access.permissions import Permission
from shared.models import Principal, ProviderStatus, RoleKind

from .interfaces import IProviderVerificationService
from .models import (
    AddPortfolioItemRequest,
    ApplicationListResponse,
    ApplicationSummary,
    DocumentKind,
    ProviderApplication,
    RecordDocumentRequest,
    RejectApplicationRequest,
    VerifyDocumentRequest,
)

router = APIRouter()
admin_router = APIRouter()

provider_only = require_guard(
    GuardChain(
        ActiveGuard(),
        RoleGuard([RoleKind.PROVIDER]),
        PermissionGuard(Permission.PROVIDER_APPLICATION_MANAGE),
    )
)
verified_provider = require_guard(
    GuardChain(
        ActiveGuard(),
        RoleGuard([RoleKind.PROVIDER]),
        PermissionGuard(Permission.PROVIDER_APPLICATION_MANAGE),
        VerifiedEmailGuard(),
    )
)
admin_reviewer = require_guard(
    GuardChain(
        RoleGuard([RoleKind.ADMIN]),
        PermissionGuard(Permission.PROVIDER_APPLICATION_REVIEW),
    )
)
admin_verifier = require_guard(
    GuardChain(
        RoleGuard([RoleKind.ADMIN]),
        PermissionGuard(Permission.PROVIDER_DOCUMENTS_VERIFY),
    )
)


# -----------------------------------------------------------------------------
# Provider self-service
# -----------------------------------------------------------------------------


@router.get("/application", response_model=ProviderApplication)
async def get_my_application(
    principal: Principal = Depends(provider_only),
    service: IProviderVerificationService = Depends(get_verification_service),
) -> ProviderApplication:
    """
    Get the caller's application, opening a pending one on first access.
    """
    return await service.open_application(principal)


@router.get("/summary", response_model=ApplicationSummary)
async def get_my_summary(
    principal: Principal = Depends(provider_only),
    service: IProviderVerificationService = Depends(get_verification_service),
) -> ApplicationSummary:
    """
    Get completion progress for the caller's application.
    """
    await service.open_application(principal)
    return await service.get_summary(principal.id)


@router.put(
    "/documents/{kind}",
    response_model=ProviderApplication,
    dependencies=[Depends(rate_limit("provider_documents", guard=provider_only))],
)
async def record_document(
    kind: DocumentKind,
    request: RecordDocumentRequest,
    principal: Principal = Depends(provider_only),
    service: IProviderVerificationService = Depends(get_verification_service),
) -> ProviderApplication:
    """
    Record a document the storage service has accepted.

    Replaces any previous upload of the same kind and clears its
    verification flag. Not allowed while the application is under review.
    """
    return await service.record_document(principal, kind, request.reference, request.uploaded_at)


@router.post(
    "/portfolio",
    response_model=ProviderApplication,
    status_code=201,
    dependencies=[Depends(rate_limit("provider_documents", guard=provider_only))],
)
async def add_portfolio_item(
    request: AddPortfolioItemRequest,
    principal: Principal = Depends(provider_only),
    service: IProviderVerificationService = Depends(get_verification_service),
) -> ProviderApplication:
    """
    Add a portfolio entry to the caller's application.
    """
    return await service.add_portfolio_item(
        principal, request.reference, request.description, request.uploaded_at
    )


@router.post(
    "/submit",
    response_model=ProviderApplication,
    dependencies=[Depends(rate_limit("provider_submit", guard=verified_provider))],
)
async def submit_application(
    principal: Principal = Depends(verified_provider),
    service: IProviderVerificationService = Depends(get_verification_service),
) -> ProviderApplication:
    """
    Submit the caller's application for review.

    Requires every required document to be uploaded.
    """
    return await service.submit(principal)


@router.post(
    "/resubmit",
    response_model=ProviderApplication,
    dependencies=[Depends(rate_limit("provider_submit", guard=verified_provider))],
)
async def resubmit_application(
    principal: Principal = Depends(verified_provider),
    service: IProviderVerificationService = Depends(get_verification_service),
) -> ProviderApplication:
    """
    Resubmit a rejected application after updating its documents.
    """
    return await service.resubmit(principal)


# -----------------------------------------------------------------------------
# Admin review
# -----------------------------------------------------------------------------


@admin_router.get("", response_model=ApplicationListResponse)
async def list_applications(
    status: Optional[ProviderStatus] = Query(default=None, description="Filter by status"),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    admin: Principal = Depends(admin_reviewer),
    service: IProviderVerificationService = Depends(get_verification_service),
) -> ApplicationListResponse:
    """
    List provider applications, oldest submission first.
    """
    applications, total = await service.list_applications(status=status, limit=limit, offset=offset)
    return ApplicationListResponse(
        applications=applications, total=total, limit=limit, offset=offset
    )


@admin_router.get("/{provider_id}", response_model=ProviderApplication)
async def get_application(
    provider_id: str,
    admin: Principal = Depends(admin_reviewer),
    service: IProviderVerificationService = Depends(get_verification_service),
) -> ProviderApplication:
    return await service.get_application(provider_id)


@admin_router.post("/{provider_id}/approve", response_model=ProviderApplication)
async def approve_application(
    provider_id: str,
    admin: Principal = Depends(admin_reviewer),
    service: IProviderVerificationService = Depends(get_verification_service),
) -> ProviderApplication:
    """
    Approve an application under review.
    """
    return await service.approve(admin, provider_id)


@admin_router.post("/{provider_id}/reject", response_model=ProviderApplication)
async def reject_application(
    provider_id: str,
    request: RejectApplicationRequest,
    admin: Principal = Depends(admin_reviewer),
    service: IProviderVerificationService = Depends(get_verification_service),
) -> ProviderApplication:
    """
    Reject an application under review with a reason for the provider.
    """
    return await service.reject(admin, provider_id, request.reason)


@admin_router.put("/{provider_id}/documents/{kind}/verify", response_model=ProviderApplication)
async def verify_document(
    provider_id: str,
    kind: DocumentKind,
    request: VerifyDocumentRequest,
    admin: Principal = Depends(admin_verifier),
    service: IProviderVerificationService = Depends(get_verification_service),
) -> ProviderApplication:
    """
    Mark an uploaded document as verified (or clear the flag).
    """
    return await service.verify_document(admin, provider_id, kind, request.verified)
