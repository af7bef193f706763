"""Tests for authentication: admin login and bearer credential handling."""

import pytest
from datetime import datetime, timedelta, timezone

from tests.conftest import (
    CLIENT_ID,
    INACTIVE_ID,
    TEST_ADMIN_EMAIL,
    TEST_ADMIN_PASSWORD,
    bearer,
    create_test_token,
)


def login(client, email=TEST_ADMIN_EMAIL, password=TEST_ADMIN_PASSWORD):
    return client.post("/api/auth/admin/login", json={"email": email, "password": password})


class TestAdminLogin:
    def test_login_success(self, client):
        """The configured admin account should receive a bearer credential."""
        response = login(client)
        assert response.status_code == 200
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["access_token"]

        me = client.get("/api/users/me", headers=bearer(data["access_token"]))
        assert me.status_code == 200
        assert me.json()["role"] == "admin"
        assert me.json()["id"] == "admin"

    def test_login_wrong_password(self, client):
        response = login(client, password="wrong")
        assert response.status_code == 401
        assert response.json()["error"] == "INVALID_ADMIN_CREDENTIALS"
        assert response.json()["message"] == "Access denied"

    def test_login_is_rate_limited(self, client):
        """Repeated failures for one email should be throttled."""
        for _ in range(5):
            assert login(client, password="wrong").status_code == 401

        response = login(client)
        assert response.status_code == 429
        assert "Retry-After" in response.headers

    def test_rate_limit_ignores_email_case(self, client):
        for _ in range(5):
            login(client, email=TEST_ADMIN_EMAIL.upper(), password="wrong")
        assert login(client).status_code == 429

    def test_login_audited(self, client, caplog):
        with caplog.at_level("INFO", logger="solutil.audit"):
            login(client)
        assert "admin_login principal=admin" in caplog.text


class TestBearerCredentials:
    def test_valid_token(self, client, client_headers):
        response = client.get("/api/users/me", headers=client_headers)
        assert response.status_code == 200
        assert response.json()["id"] == CLIENT_ID

    @pytest.mark.parametrize(
        "headers",
        [
            {},
            {"Authorization": "Bearer not-a-token"},
            bearer(create_test_token(expired=True)),
            bearer(create_test_token(secret="wrong-secret")),
            bearer(create_test_token(user_id="ghost")),
        ],
        ids=["missing", "malformed", "expired", "bad-signature", "unknown-user"],
    )
    def test_rejections_look_alike(self, client, headers):
        """Every credential failure should carry the same message and challenge."""
        response = client.get("/api/users/me", headers=headers)
        assert response.status_code == 401
        assert response.json()["message"] == "Access denied"
        assert response.json()["details"] == {}
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_error_kind_is_reported(self, client):
        response = client.get("/api/users/me", headers=bearer(create_test_token(expired=True)))
        assert response.json()["error"] == "TOKEN_EXPIRED"

    def test_inactive_user(self, client):
        """A deactivated account is refused with 403."""
        response = client.get(
            "/api/users/me", headers=bearer(create_test_token(INACTIVE_ID, "inactive@example.com"))
        )
        assert response.status_code == 403
        assert response.json()["error"] == "USER_DEACTIVATED"
        assert response.json()["message"] == "Access denied"

    def test_admin_flag_is_not_enough(self, client):
        """An ordinary subject claiming admin stays an ordinary user."""
        token = create_test_token(CLIENT_ID, "client@example.com", is_admin=True)
        response = client.get("/api/users/me", headers=bearer(token))
        assert response.status_code == 200
        assert response.json()["role"] == "client"

    def test_denials_are_audited(self, client, caplog):
        with caplog.at_level("INFO", logger="solutil.audit"):
            client.get("/api/users/me")
        assert "access_denied" in caplog.text
        assert "kind=MISSING_TOKEN" in caplog.text

    def test_token_from_other_clock(self, client):
        """Tokens issued recently by another host still verify."""
        token = create_test_token(now=datetime.now(timezone.utc) - timedelta(minutes=5))
        assert client.get("/api/users/me", headers=bearer(token)).status_code == 200
