"""
FastAPI application factory.

Creates and configures the FastAPI application instance.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from modules.access.exceptions import OwnershipDeniedError, ResourceNotFoundError
from modules.auth.exceptions import UserDeactivatedError
from modules.ratelimit.exceptions import RateLimitedError
from modules.verification.routes import admin_router as provider_review_router
from modules.verification.routes import router as provider_router
from shared.config import get_settings
from shared.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ExternalServiceError,
    NotFoundError,
    RateLimitError,
    SolutilError,
    ValidationError,
)
from shared.logging import audit, configure_logging

from .dependencies import get_container
from .models import ErrorResponse
from .routes import auth, health, users

logger = logging.getLogger(__name__)

# Credential and identity failures all read the same to the caller; the
# specific kind stays in `error` and in the logs.
UNIFORM_AUTH_MESSAGE = "Access denied"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Runs startup and shutdown logic.
    """
    # Startup
    container = get_container()
    settings = container.settings
    configure_logging(settings.log_level)

    if settings.uses_default_secret and not settings.is_development:
        logger.warning(
            f"JWT_SECRET is not set in environment '{settings.environment}'; using the "
            "built-in development secret. Credentials signed with it are forgeable."
        )
    elif settings.uses_default_secret:
        logger.info("Using the built-in development JWT secret")

    await probe_user_store()

    logger.info(f"Starting {settings.app_name} on {settings.host}:{settings.port}")
    yield
    # Shutdown
    logger.info(f"Shutting down {settings.app_name}")


async def probe_user_store() -> None:
    """Set the store health flag from one reachability check of the primary store."""
    container = get_container()
    health = container.store_health
    if not container.uses_supabase:
        logger.warning("Supabase is not configured; identities resolve from the fallback store")
        return

    try:
        await container.primary_store.ping()
    except ExternalServiceError as e:
        health.mark_unavailable(e.message)
    else:
        health.mark_available()


def error_status(exc: SolutilError) -> int:
    """Map an exception to its HTTP status code."""
    if isinstance(exc, OwnershipDeniedError):
        return 404
    if isinstance(exc, AuthenticationError):
        return 401
    if isinstance(exc, AuthorizationError):
        return 403
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, RateLimitError):
        return 429
    if isinstance(exc, ValidationError):
        return 400
    if isinstance(exc, ExternalServiceError):
        return 503
    return 500


def error_body(exc: SolutilError) -> dict:
    """Build the response body, hiding what callers must not learn."""
    if isinstance(exc, OwnershipDeniedError):
        return ResourceNotFoundError().to_dict()
    if isinstance(exc, (AuthenticationError, UserDeactivatedError)):
        return {"error": exc.code, "message": UNIFORM_AUTH_MESSAGE, "details": {}}
    if isinstance(exc, ExternalServiceError):
        return {"error": exc.code, "message": "Service temporarily unavailable", "details": {}}
    return exc.to_dict()


async def solutil_error_handler(request: Request, exc: SolutilError) -> JSONResponse:
    """Translate the exception hierarchy into JSON error responses."""
    status_code = error_status(exc)
    principal = getattr(request.state, "principal", None)
    principal_id = principal.id if principal is not None else None

    headers: dict[str, str] = {}
    if status_code == 401:
        headers["WWW-Authenticate"] = "Bearer"
    if isinstance(exc, RateLimitedError):
        headers["Retry-After"] = str(exc.retry_after_seconds)

    if isinstance(exc, (AuthenticationError, AuthorizationError, RateLimitError)):
        audit(
            "access_denied",
            principal_id,
            kind=exc.code,
            method=request.method,
            path=request.url.path,
        )
    elif isinstance(exc, ExternalServiceError):
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    elif status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}", exc_info=exc)

    body = ErrorResponse(**error_body(exc))
    return JSONResponse(
        status_code=status_code, content=body.model_dump(), headers=headers or None
    )


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI instance
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Access control and provider verification for the Solutil marketplace",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/api/docs" if settings.debug else None,
        redoc_url="/api/redoc" if settings.debug else None,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    app.add_exception_handler(SolutilError, solutil_error_handler)

    # Register routes
    app.include_router(health.router, prefix="/api", tags=["health"])
    app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
    app.include_router(users.router, prefix="/api/users", tags=["users"])
    app.include_router(provider_router, prefix="/api/providers/me", tags=["providers"])
    app.include_router(provider_review_router, prefix="/api/admin/providers", tags=["admin"])

    return app


# Application instance for uvicorn
app = create_app()
