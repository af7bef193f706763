"""
Authentication endpoints.

Ordinary users sign in through the external identity provider; only the
reserved platform admin signs in here.
"""

from fastapi import APIRouter, Depends

from modules.auth.models import AdminLoginRequest, TokenResponse
from modules.auth.service import AdminAuthenticator
from modules.ratelimit.interfaces import IRateLimiter
from shared.config import Settings
from shared.logging import audit

from ..dependencies import get_admin_authenticator, get_app_settings, get_rate_limiter
from ..middleware.rate_limit import enforce_rate_limit

router = APIRouter()


@router.post("/admin/login", response_model=TokenResponse)
async def admin_login(
    request: AdminLoginRequest,
    authenticator: AdminAuthenticator = Depends(get_admin_authenticator),
    limiter: IRateLimiter = Depends(get_rate_limiter),
    settings: Settings = Depends(get_app_settings),
) -> TokenResponse:
    """
    Exchange the configured admin email and password for an admin credential.

    Attempts are rate limited per email address, successful or not.
    """
    enforce_rate_limit(limiter, settings, f"email:{request.email.strip().lower()}", "admin_login")

    token, claims = authenticator.login(request.email, request.password)
    audit("admin_login", claims.subject_id)
    return TokenResponse(access_token=token, expires_at=claims.expires_at)
