"""
Health check endpoints.

Provides endpoints for monitoring application health and readiness.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from modules.auth.stores import StoreHealth
from shared.config import Settings

from ..dependencies import get_app_settings, get_store_health

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness check response model."""

    status: str
    user_store: str
    last_store_error: Optional[str] = None
    store_changed_at: datetime


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: Settings = Depends(get_app_settings)) -> HealthResponse:
    """
    Basic health check endpoint.

    Returns 200 if the API is running.
    """
    return HealthResponse(status="healthy", version=settings.app_version)


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check(health: StoreHealth = Depends(get_store_health)) -> ReadinessResponse:
    """
    Readiness check endpoint.

    Reports "degraded" while identities are being served from the fallback
    store; the API still answers requests in that state.
    """
    primary = health.is_primary_available()
    return ReadinessResponse(
        status="ready" if primary else "degraded",
        user_store="primary" if primary else "fallback",
        last_store_error=health.last_error,
        store_changed_at=health.changed_at,
    )
