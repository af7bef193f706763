"""
Shared data models used across modules.

These models are shared infrastructure, not business logic.
Module-specific models should stay in their respective module directories.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class RoleKind(str, Enum):
    """Closed set of account roles."""

    CLIENT = "client"
    PROVIDER = "provider"
    ADMIN = "admin"


class ProviderStatus(str, Enum):
    """Provider onboarding status."""

    PENDING = "pending"            # Registered, documents being collected
    UNDER_REVIEW = "under_review"  # Submitted, waiting for an admin decision
    APPROVED = "approved"          # Allowed to receive bookings
    REJECTED = "rejected"          # Needs document changes before resubmitting


class Principal(BaseModel):
    """
    The resolved identity attached to a request.

    Built on every request from verified claims plus a user store lookup
    (or synthesized from claims for the platform admin), handed to route
    handlers via dependency injection, and discarded when the request ends.
    """

    id: str = Field(..., description="Opaque user ID, never reused")
    email: str = Field(..., description="User's email address")
    display_name: str = Field(default="", description="Display name")
    role: RoleKind = Field(..., description="Account role")
    is_active: bool = Field(default=True, description="Deactivated accounts are denied")
    is_email_verified: bool = Field(default=False, description="Whether email is verified")
    provider_status: Optional[ProviderStatus] = Field(
        None,
        description="Onboarding status, only meaningful for providers",
    )
    via_fallback: bool = Field(
        default=False,
        description="Resolved from the non-authoritative fallback store",
    )

    model_config = {
        "frozen": True,  # Never mutated during a request
        "extra": "ignore",
    }

    @property
    def is_admin(self) -> bool:
        return self.role == RoleKind.ADMIN

    @property
    def is_provider(self) -> bool:
        return self.role == RoleKind.PROVIDER
