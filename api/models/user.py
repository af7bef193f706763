"""
User profile models.

These models are what the user endpoints return, built either from the
request Principal or from a stored user record.
"""

from typing import Optional

from pydantic import BaseModel

from modules.auth.models import UserRecord
from shared.models import Principal, ProviderStatus


class UserProfileResponse(BaseModel):
    """User profile response model."""

    id: str
    email: str
    display_name: str
    role: str
    is_active: bool
    email_verified: bool
    provider_status: Optional[ProviderStatus] = None

    @classmethod
    def from_principal(cls, principal: Principal) -> "UserProfileResponse":
        return cls(
            id=principal.id,
            email=principal.email,
            display_name=principal.display_name,
            role=principal.role.value,
            is_active=principal.is_active,
            email_verified=principal.is_email_verified,
            provider_status=principal.provider_status,
        )

    @classmethod
    def from_record(cls, record: UserRecord) -> "UserProfileResponse":
        return cls(
            id=record.id,
            email=record.email,
            display_name=record.display_name,
            role=record.role.value,
            is_active=record.is_active,
            email_verified=record.is_email_verified,
            provider_status=record.provider_status,
        )
