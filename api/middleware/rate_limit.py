"""
Rate limiting dependency.

Wraps the rate limiter service so a route can be throttled per principal
with a single Depends().
"""

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from fastapi import Depends, Request

from modules.ratelimit.interfaces import IRateLimiter
from modules.ratelimit.models import RateLimitDecision
from shared.config import Settings
from shared.models import Principal

from ..dependencies import get_app_settings, get_rate_limiter
from .auth import get_current_principal


def rate_limit(
    action_key: Optional[str] = None,
    max_attempts: Optional[int] = None,
    window_seconds: Optional[int] = None,
    guard: Callable = get_current_principal,
) -> Callable:
    """
    Per-principal sliding-window throttle for one action.

    The action defaults to the route's path template, so every route gets its
    own budget unless several share an explicit key. Limits default to the
    configured rate_limit_max_attempts and rate_limit_window_seconds.

    Only callers the guard lets through are counted: the guard dependency
    resolves first, so denied requests never spend budget or open windows.
    FastAPI caches the guard per request, so a handler that also depends on
    it does not run it twice.

    Usage:
        @router.post(
            "/submit",
            dependencies=[Depends(rate_limit("provider_submit", guard=verified_provider))],
        )
        async def submit(principal: Principal = Depends(verified_provider)):
            ...
    """

    async def dependency(
        request: Request,
        principal: Principal = Depends(guard),
        limiter: IRateLimiter = Depends(get_rate_limiter),
        settings: Settings = Depends(get_app_settings),
    ) -> RateLimitDecision:
        return enforce_rate_limit(
            limiter,
            settings,
            principal.id,
            action_key or route_action_key(request),
            max_attempts=max_attempts,
            window_seconds=window_seconds,
        )

    return dependency


def route_action_key(request: Request) -> str:
    """Method plus path template of the matched route, e.g. "POST /api/x/{id}"."""
    route = request.scope.get("route")
    path = getattr(route, "path", None) or request.url.path
    return f"{request.method} {path}"


def enforce_rate_limit(
    limiter: IRateLimiter,
    settings: Settings,
    principal_id: str,
    action_key: str,
    max_attempts: Optional[int] = None,
    window_seconds: Optional[int] = None,
) -> RateLimitDecision:
    """Check one attempt now; raises RateLimitedError when over the limit."""
    return limiter.check(
        principal_id,
        action_key,
        datetime.now(timezone.utc),
        max_attempts or settings.rate_limit_max_attempts,
        timedelta(seconds=window_seconds or settings.rate_limit_window_seconds),
    )
