"""Integration tests for JWT authentication and the ``/api/v1/me`` endpoint.

Validates:
  - /health is public (plain Django view, no DRF).
  - Protected DRF endpoints return 401 without a token, with an invalid
    token and with a malformed Authorization header.
  - A token obtained from /api/v1/auth/token/ resolves to the caller's
    account and role.
"""

import pytest

from django.contrib.auth import get_user_model

from modules.accounts.models import Role

pytestmark = pytest.mark.integration


class TestPublicEndpoints:
    """Health check must remain accessible without credentials."""

    def test_health_is_public(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestProtectedEndpoints:
    """All DRF endpoints require a valid JWT by default."""

    def test_no_token_returns_401(self, api_client):
        response = api_client.get("/api/v1/me")
        assert response.status_code == 401

    def test_invalid_token_returns_401(self, api_client):
        api_client.credentials(HTTP_AUTHORIZATION="Bearer invalid.token.here")
        response = api_client.get("/api/v1/me")
        assert response.status_code == 401

    def test_malformed_auth_header_returns_401(self, api_client):
        api_client.credentials(HTTP_AUTHORIZATION="Token some-token")
        response = api_client.get("/api/v1/me")
        assert response.status_code == 401

    def test_401_includes_www_authenticate_header(self, api_client):
        response = api_client.get("/api/v1/shipments/")
        assert response.status_code == 401
        assert "Bearer" in response.get("WWW-Authenticate", "")


class TestMe:
    def test_token_resolves_to_account(self, api_client, make_account):
        courier = make_account(Role.COURIER)
        courier.user.set_password("s3cret-pass")
        courier.user.save()

        token = api_client.post(
            "/api/v1/auth/token/",
            {"username": courier.user.username, "password": "s3cret-pass"},
            format="json",
        ).json()["access"]
        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")

        response = api_client.get("/api/v1/me")
        assert response.status_code == 200
        assert response.json()["role"] == "COURIER"
        assert response.json()["id"] == str(courier.id)

    def test_user_without_account_is_404(self, api_client):
        user = get_user_model().objects.create_user(username="loose", password="x")
        api_client.force_authenticate(user=user)
        response = api_client.get("/api/v1/me")
        assert response.status_code == 404

    def test_soft_deleted_account_is_404(self, client_for, merchant):
        client = client_for(merchant)
        merchant.delete()
        assert client.get("/api/v1/me").status_code == 404
