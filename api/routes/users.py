"""
User-related endpoints.

Provides endpoints for reading user profiles.
"""

from fastapi import APIRouter, Depends

from modules.auth.interfaces import IAuthService
from shared.models import Principal
from ..dependencies import get_auth_service
from ..middleware.auth import RequireAuth, require_owner
from ..models import UserProfileResponse

router = APIRouter()


@router.get("/me", response_model=UserProfileResponse)
async def get_current_user_profile(
    principal: Principal = RequireAuth,
) -> UserProfileResponse:
    """
    Get the current user's profile.

    Requires authentication.
    """
    return UserProfileResponse.from_principal(principal)


@router.get("/{user_id}", response_model=UserProfileResponse)
async def get_user_profile(
    user_id: str,
    principal: Principal = RequireAuth,
    auth: IAuthService = Depends(get_auth_service),
) -> UserProfileResponse:
    """
    Get a user's profile.

    Callers may read their own profile; admins may read anyone's. Any other
    request answers 404 whether or not the user exists.
    """
    record = await auth.find_user(user_id)
    # A user record is its own resource: no owner fields, only its id.
    require_owner(principal, record, owner_fields=())

    return UserProfileResponse.from_record(record)
