"""Tests for the provider verification endpoints."""

import pytest

from tests.conftest import (
    CLIENT_ID,
    PROVIDER_ID,
    UNVERIFIED_PROVIDER_ID,
    bearer,
    create_test_token,
)

REQUIRED = ["national_id", "business_license", "good_conduct_certificate"]


def upload(client, headers, kind, reference=None):
    return client.put(
        f"/api/providers/me/documents/{kind}",
        json={"reference": reference or f"https://files.example.com/{kind}.pdf"},
        headers=headers,
    )


def upload_required(client, headers):
    for kind in REQUIRED:
        assert upload(client, headers, kind).status_code == 200


class TestProviderEndpoints:
    def test_requires_credential(self, client):
        """Should return 401 with a bearer challenge when no credential is sent."""
        response = client.get("/api/providers/me/application")
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"
        assert response.json()["message"] == "Access denied"

    def test_opens_application(self, client, provider_headers):
        response = client.get("/api/providers/me/application", headers=provider_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["provider_id"] == PROVIDER_ID
        assert data["status"] == "pending"

    def test_accepts_cookie_credential(self, client):
        """Browser clients may send the credential as a cookie."""
        client.cookies.set("token", create_test_token(PROVIDER_ID, "provider@example.com"))
        response = client.get("/api/providers/me/application")
        assert response.status_code == 200

    def test_clients_are_forbidden(self, client, client_headers):
        response = client.get("/api/providers/me/application", headers=client_headers)
        assert response.status_code == 403
        assert response.json()["error"] == "INSUFFICIENT_ROLE"

    def test_admin_is_not_a_provider(self, client, admin_headers):
        response = client.get("/api/providers/me/summary", headers=admin_headers)
        assert response.status_code == 403

    def test_upload_document(self, client, provider_headers):
        response = upload(client, provider_headers, "national_id")
        assert response.status_code == 200
        document = response.json()["checklist"]["documents"]["national_id"]
        assert document["uploaded"] is True
        assert document["verified"] is False

    def test_unknown_document_kind(self, client, provider_headers):
        response = upload(client, provider_headers, "passport")
        assert response.status_code == 422

    def test_add_portfolio_item(self, client, provider_headers):
        response = client.post(
            "/api/providers/me/portfolio",
            json={"reference": "https://files.example.com/job.jpg", "description": "Deck repair"},
            headers=provider_headers,
        )
        assert response.status_code == 201
        assert response.json()["checklist"]["portfolio"][0]["description"] == "Deck repair"

    def test_summary(self, client, provider_headers):
        upload(client, provider_headers, "national_id")
        data = client.get("/api/providers/me/summary", headers=provider_headers).json()
        assert data["required_uploaded"] == 1
        assert data["missing_required"] == ["business_license", "good_conduct_certificate"]
        assert data["can_submit"] is False

    def test_incomplete_submit(self, client, provider_headers):
        """Submitting with documents missing should fail and name them."""
        upload(client, provider_headers, "national_id")
        response = client.post("/api/providers/me/submit", headers=provider_headers)
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "INVALID_TRANSITION"
        assert body["details"]["current_state"] == "pending"
        assert body["details"]["missing_documents"] == [
            "business_license", "good_conduct_certificate"
        ]

    def test_submit(self, client, provider_headers):
        upload_required(client, provider_headers)
        response = client.post("/api/providers/me/submit", headers=provider_headers)
        assert response.status_code == 200
        assert response.json()["status"] == "under_review"
        assert response.json()["submitted_at"] is not None

    def test_submit_requires_verified_email(self, client):
        headers = bearer(create_test_token(UNVERIFIED_PROVIDER_ID, "unverified@example.com"))
        response = client.post("/api/providers/me/submit", headers=headers)
        assert response.status_code == 403
        assert response.json()["error"] == "EMAIL_NOT_VERIFIED"

    def test_documents_locked_under_review(self, client, provider_headers):
        upload_required(client, provider_headers)
        client.post("/api/providers/me/submit", headers=provider_headers)
        response = upload(client, provider_headers, "certificate")
        assert response.status_code == 400
        assert response.json()["details"]["current_state"] == "under_review"

    def test_submit_is_rate_limited(self, client, provider_headers):
        """The sixth attempt inside the window should get a 429."""
        for _ in range(5):
            assert client.post("/api/providers/me/submit", headers=provider_headers).status_code == 400

        response = client.post("/api/providers/me/submit", headers=provider_headers)
        assert response.status_code == 429
        assert response.json()["error"] == "RATE_LIMITED"
        assert int(response.headers["Retry-After"]) > 0

    def test_rate_limit_is_per_action(self, client, provider_headers):
        for _ in range(5):
            client.post("/api/providers/me/submit", headers=provider_headers)
        assert upload(client, provider_headers, "national_id").status_code == 200

    def test_denied_callers_spend_no_budget(self, client, container, client_headers):
        """Requests refused by the guards are never counted against the limit."""
        unverified = bearer(create_test_token(UNVERIFIED_PROVIDER_ID, "unverified@example.com"))
        for _ in range(7):
            assert client.post("/api/providers/me/submit", headers=client_headers).status_code == 403
            response = client.post("/api/providers/me/submit", headers=unverified)
            assert response.status_code == 403
            assert response.json()["error"] == "EMAIL_NOT_VERIFIED"

        limiter = container.rate_limiter
        assert limiter.attempts(CLIENT_ID, "provider_submit") == 0
        assert limiter.attempts(UNVERIFIED_PROVIDER_ID, "provider_submit") == 0
        assert len(limiter) == 0

    def test_forbidden_upload_spends_no_budget(self, client, container, client_headers):
        for _ in range(7):
            assert upload(client, client_headers, "national_id").status_code == 403
        assert container.rate_limiter.attempts(CLIENT_ID, "provider_documents") == 0


class TestAdminEndpoints:
    def submit(self, client, provider_headers):
        upload_required(client, provider_headers)
        assert client.post("/api/providers/me/submit", headers=provider_headers).status_code == 200

    def test_providers_cannot_review(self, client, provider_headers):
        self.submit(client, provider_headers)
        response = client.post(f"/api/admin/providers/{PROVIDER_ID}/approve", headers=provider_headers)
        assert response.status_code == 403

    def test_list_queue(self, client, provider_headers, admin_headers):
        self.submit(client, provider_headers)
        response = client.get(
            "/api/admin/providers", params={"status": "under_review"}, headers=admin_headers
        )
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["applications"][0]["provider_id"] == PROVIDER_ID

    def test_list_limit_bounds(self, client, admin_headers):
        response = client.get("/api/admin/providers", params={"limit": 0}, headers=admin_headers)
        assert response.status_code == 422

    def test_get_unknown_application(self, client, admin_headers):
        response = client.get(f"/api/admin/providers/{CLIENT_ID}", headers=admin_headers)
        assert response.status_code == 404
        assert response.json()["error"] == "APPLICATION_NOT_FOUND"

    def test_approve(self, client, provider_headers, admin_headers):
        self.submit(client, provider_headers)
        response = client.post(f"/api/admin/providers/{PROVIDER_ID}/approve", headers=admin_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "approved"
        assert data["approved_by"] == "admin"

    def test_profile_follows_decision(self, client, provider_headers, admin_headers):
        """The provider's own profile should show each review outcome."""
        def provider_status():
            return client.get("/api/users/me", headers=provider_headers).json()["provider_status"]

        assert provider_status() == "pending"

        self.submit(client, provider_headers)
        assert provider_status() == "under_review"

        client.post(f"/api/admin/providers/{PROVIDER_ID}/approve", headers=admin_headers)
        assert provider_status() == "approved"

    def test_approve_twice(self, client, provider_headers, admin_headers):
        self.submit(client, provider_headers)
        client.post(f"/api/admin/providers/{PROVIDER_ID}/approve", headers=admin_headers)
        response = client.post(
            f"/api/admin/providers/{PROVIDER_ID}/reject",
            json={"reason": "second thoughts"},
            headers=admin_headers,
        )
        assert response.status_code == 400
        assert response.json()["details"]["current_state"] == "approved"

    def test_reject_requires_reason(self, client, provider_headers, admin_headers):
        self.submit(client, provider_headers)
        response = client.post(
            f"/api/admin/providers/{PROVIDER_ID}/reject", json={"reason": ""}, headers=admin_headers
        )
        assert response.status_code == 422

    def test_reject_and_resubmit(self, client, provider_headers, admin_headers):
        """A rejected provider updates a document, resubmits and is approved."""
        self.submit(client, provider_headers)
        rejected = client.post(
            f"/api/admin/providers/{PROVIDER_ID}/reject",
            json={"reason": "License photo is blurry"},
            headers=admin_headers,
        )
        assert rejected.json()["rejection_reason"] == "License photo is blurry"

        summary = client.get("/api/providers/me/summary", headers=provider_headers).json()
        assert summary["status"] == "rejected"
        assert summary["can_resubmit"] is False

        upload(client, provider_headers, "business_license", "https://files.example.com/bl-v2.pdf")
        resubmitted = client.post("/api/providers/me/resubmit", headers=provider_headers)
        assert resubmitted.status_code == 200
        assert resubmitted.json()["status"] == "under_review"
        assert resubmitted.json()["rejection_reason"] is None

        approved = client.post(f"/api/admin/providers/{PROVIDER_ID}/approve", headers=admin_headers)
        assert approved.json()["status"] == "approved"

    def test_verify_document(self, client, provider_headers, admin_headers):
        self.submit(client, provider_headers)
        response = client.put(
            f"/api/admin/providers/{PROVIDER_ID}/documents/national_id/verify",
            json={"verified": True},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["checklist"]["documents"]["national_id"]["verified"] is True

    def test_verify_missing_document(self, client, provider_headers, admin_headers):
        self.submit(client, provider_headers)
        response = client.put(
            f"/api/admin/providers/{PROVIDER_ID}/documents/certificate/verify",
            json={"verified": True},
            headers=admin_headers,
        )
        assert response.status_code == 404
        assert response.json()["error"] == "DOCUMENT_NOT_UPLOADED"
