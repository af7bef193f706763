"""
Shared test fixtures and utilities.

This module provides common test infrastructure used across all test modules.
"""

import pytest
from datetime import datetime, timezone, timedelta
from typing import Optional

import jwt  # PyJWT
from fastapi.testclient import TestClient

import api.dependencies as dependencies
from api.dependencies import ServiceContainer
from modules.auth.models import UserRecord
from shared.config import Settings
from shared.models import ProviderStatus, RoleKind


# Test JWT secret (only for testing)
TEST_JWT_SECRET = "test-secret-key-for-testing-only"

TEST_ADMIN_EMAIL = "admin@solutil.test"
TEST_ADMIN_PASSWORD = "correct-horse-battery-staple"

CLIENT_ID = "client-123"
PROVIDER_ID = "provider-123"
UNVERIFIED_PROVIDER_ID = "provider-unverified"
INACTIVE_ID = "client-inactive"


def create_test_token(
    user_id: str = CLIENT_ID,
    email: str = "client@example.com",
    name: str = "Test User",
    is_admin: bool = False,
    expired: bool = False,
    secret: str = TEST_JWT_SECRET,
    now: Optional[datetime] = None,
) -> str:
    """
    Create a test bearer credential.

    Args:
        user_id: Subject ID to include in the token
        email: Email to include in the token
        name: Display name to include in the token
        is_admin: Admin flag claim
        expired: If True, creates an expired token
        secret: Signing secret
        now: Issuance time (defaults to the current time)

    Returns:
        JWT token string
    """
    now = now or datetime.now(timezone.utc)
    exp = now - timedelta(hours=1) if expired else now + timedelta(hours=1)

    payload = {
        "sub": user_id,
        "email": email,
        "name": name,
        "is_admin": is_admin,
        "exp": int(exp.timestamp()),
        "iat": int((now - timedelta(hours=2) if expired else now).timestamp()),
    }
    return jwt.encode(payload, secret, algorithm="HS256")


def create_admin_token(**kwargs) -> str:
    """Create a credential for the reserved admin identity."""
    kwargs.setdefault("email", TEST_ADMIN_EMAIL)
    kwargs.setdefault("name", "Platform Admin")
    return create_test_token(user_id="admin", is_admin=True, **kwargs)


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


TEST_USERS = [
    UserRecord(
        id=CLIENT_ID,
        email="client@example.com",
        display_name="Test Client",
        role=RoleKind.CLIENT,
        is_email_verified=True,
    ),
    UserRecord(
        id=PROVIDER_ID,
        email="provider@example.com",
        display_name="Test Provider",
        role=RoleKind.PROVIDER,
        is_email_verified=True,
        provider_status=ProviderStatus.PENDING,
    ),
    UserRecord(
        id=UNVERIFIED_PROVIDER_ID,
        email="unverified@example.com",
        display_name="Unverified Provider",
        role=RoleKind.PROVIDER,
        is_email_verified=False,
        provider_status=ProviderStatus.PENDING,
    ),
    UserRecord(
        id=INACTIVE_ID,
        email="inactive@example.com",
        display_name="Inactive Client",
        role=RoleKind.CLIENT,
        is_active=False,
    ),
]


@pytest.fixture
def test_settings() -> Settings:
    """Settings with a known secret, admin account and no Supabase."""
    return Settings(
        environment="test",
        jwt_secret=TEST_JWT_SECRET,
        admin_email=TEST_ADMIN_EMAIL,
        admin_password=TEST_ADMIN_PASSWORD,
        supabase_url="",
        supabase_service_role_key="",
        rate_limit_max_attempts=5,
        rate_limit_window_seconds=900,
    )


@pytest.fixture
def container(test_settings: Settings, monkeypatch) -> ServiceContainer:
    """
    Install a fresh service container for the test.

    The in-memory primary store is seeded with TEST_USERS and marked
    reachable, so identities resolve from the primary store.
    """
    container = ServiceContainer(test_settings)
    for record in TEST_USERS:
        container.primary_store.add(record)
    container.store_health.mark_available()
    monkeypatch.setattr(dependencies, "_container", container)
    return container


@pytest.fixture(autouse=True)
def reset_container_singleton():
    """Reset the service container before and after each test."""
    dependencies.reset_container()
    yield
    dependencies.reset_container()


@pytest.fixture
def client(container: ServiceContainer) -> TestClient:
    """Test client for a fresh app wired to the test container."""
    from api.app import create_app
    return TestClient(create_app())


@pytest.fixture
def client_headers() -> dict[str, str]:
    return bearer(create_test_token(CLIENT_ID, "client@example.com"))


@pytest.fixture
def provider_headers() -> dict[str, str]:
    return bearer(create_test_token(PROVIDER_ID, "provider@example.com"))


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return bearer(create_admin_token())
