"""
Authentication module data models.

These models define the data structures used by the auth module
and exposed to other modules through the interface.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field

from shared.models import ProviderStatus, RoleKind


class CredentialPayload(BaseModel):
    """
    Wire shape of a signed bearer credential.

    Timestamps are integer epoch seconds, as JWT registered claims require.
    """

    sub: str = Field(..., min_length=1, description="Subject (user ID)")
    email: str = Field(..., description="User's email")
    name: str = Field(default="", description="Display name")
    is_admin: bool = Field(default=False, description="Platform admin flag")
    iat: int = Field(..., description="Issued at timestamp")
    exp: int = Field(..., description="Expiration timestamp")

    model_config = {"extra": "ignore"}


class Claims(BaseModel):
    """Verified claims extracted from a bearer credential."""

    subject_id: str = Field(..., description="User ID the credential was issued to")
    email: str = Field(..., description="Email at issuance time")
    display_name: str = Field(default="", description="Display name at issuance time")
    is_admin: bool = Field(default=False, description="Admin flag set by the issuer")
    issued_at: datetime = Field(..., description="Issuance time (UTC)")
    expires_at: datetime = Field(..., description="Expiry time (UTC)")

    model_config = {"frozen": True}

    @classmethod
    def from_payload(cls, payload: CredentialPayload) -> "Claims":
        return cls(
            subject_id=payload.sub,
            email=payload.email,
            display_name=payload.name,
            is_admin=payload.is_admin,
            issued_at=datetime.fromtimestamp(payload.iat, tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload.exp, tz=timezone.utc),
        )

    def to_payload(self) -> dict:
        """Encode as JWT claims (epoch seconds, sub-second precision dropped)."""
        return {
            "sub": self.subject_id,
            "email": self.email,
            "name": self.display_name,
            "is_admin": self.is_admin,
            "iat": int(self.issued_at.timestamp()),
            "exp": int(self.expires_at.timestamp()),
        }


class StoreKind(str, Enum):
    """Which user store a record came from."""

    PRIMARY = "primary"    # Authoritative database
    FALLBACK = "fallback"  # In-memory mock data used during outages


class UserRecord(BaseModel):
    """
    A user as held by a user store.

    This is store data, not an identity: the identity resolver turns it
    into a Principal after checking it is usable.
    """

    id: str = Field(..., description="User ID")
    email: str = Field(..., description="Email address")
    display_name: str = Field(default="", description="Display name")
    role: RoleKind = Field(default=RoleKind.CLIENT, description="Account role")
    is_active: bool = Field(default=True, description="Whether the account is active")
    is_email_verified: bool = Field(default=False, description="Whether email is verified")
    provider_status: Optional[ProviderStatus] = Field(
        None,
        description="Onboarding status for providers",
    )

    model_config = {"extra": "ignore"}


class AdminLoginRequest(BaseModel):
    """Credentials for the reserved platform admin account."""

    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=1, max_length=255)


class TokenResponse(BaseModel):
    """An issued bearer credential."""

    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
