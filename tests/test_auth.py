"""Login endpoint and access guard tests.

Tests the login outcomes (200/400/404/401), the token returned on success,
and how protected routes treat missing, malformed, foreign and expired
tokens as well as a server without a signing secret.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from src.dashboard.core.security import create_access_token, verify_token

from conftest import ADMIN_EMAIL, ADMIN_PASSWORD


# ── Login Tests ───────────────────────────────────────────────────────────────


async def test_login_valid_credentials(client, admin):
    """Login with valid credentials returns a token and the public profile."""
    response = await client.post(
        "/api/auth/login",
        json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 200, response.text
    data = response.json()
    assert data["message"] == "Login successful"
    assert data["user"] == {"id": admin.id, "name": "Admin", "email": ADMIN_EMAIL}
    assert "hashed_password" not in data["user"]

    claims = verify_token(data["token"])
    assert claims.admin_id == admin.id
    assert claims.email == ADMIN_EMAIL


async def test_login_email_is_case_insensitive(client):
    response = await client.post(
        "/api/auth/login",
        json={"email": "  Admin@Example.COM ", "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 200


@pytest.mark.parametrize(
    "body",
    [
        {},
        {"email": ADMIN_EMAIL},
        {"password": ADMIN_PASSWORD},
        {"email": "   ", "password": ADMIN_PASSWORD},
        {"email": ADMIN_EMAIL, "password": ""},
    ],
)
async def test_login_missing_fields_returns_400(client, body):
    response = await client.post("/api/auth/login", json=body)
    assert response.status_code == 400
    assert response.json()["detail"] == "Email and password are required"


async def test_login_missing_fields_never_touches_store(client, app):
    """A missing field is rejected before any credential lookup."""

    class ExplodingRepository:
        async def get_by_email(self, email):
            raise AssertionError("store must not be queried")

    app.state.admin_repository = ExplodingRepository()
    response = await client.post("/api/auth/login", json={"email": ADMIN_EMAIL})
    assert response.status_code == 400


async def test_login_unknown_email_returns_404(client):
    response = await client.post(
        "/api/auth/login",
        json={"email": "nobody@example.com", "password": "any-password"},
    )
    assert response.status_code == 404
    assert response.json()["detail"] == "User not found"


async def test_login_wrong_password_returns_401(client):
    response = await client.post(
        "/api/auth/login",
        json={"email": ADMIN_EMAIL, "password": "wrong-password"},
    )
    assert response.status_code == 401
    assert response.json()["detail"] == "Incorrect password"


async def test_login_without_secret_returns_500(client, missing_secret):
    response = await client.post(
        "/api/auth/login",
        json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 500


async def test_login_without_credential_store_returns_503(client, app):
    app.state.admin_repository = None
    response = await client.post(
        "/api/auth/login",
        json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 503


# ── Access Guard Tests ────────────────────────────────────────────────────────


async def test_protected_route_without_token_returns_401(client):
    response = await client.get("/api/contacts")
    assert response.status_code == 401
    assert response.json()["detail"] == "Not authenticated"
    assert response.headers["www-authenticate"] == "Bearer"


async def test_protected_route_with_non_bearer_scheme_returns_401(client):
    response = await client.get("/api/deal-contacts", headers={"Authorization": "Basic abc"})
    assert response.status_code == 401


async def test_protected_route_with_malformed_token_returns_401(client):
    response = await client.get(
        "/api/contacts", headers={"Authorization": "Bearer not-a-real-token"}
    )
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid or expired token"


async def test_protected_route_with_foreign_token_returns_401(client, admin):
    now = datetime.now(timezone.utc)
    forged = jwt.encode(
        {"sub": admin.id, "iat": now, "exp": now + timedelta(days=1), "type": "access"},
        "attacker-secret",
        algorithm="HS256",
    )
    response = await client.get("/api/contacts", headers={"Authorization": f"Bearer {forged}"})
    assert response.status_code == 401


async def test_protected_route_with_expired_token_returns_401(client, admin):
    issued = datetime.now(timezone.utc) - timedelta(days=8)
    token = create_access_token(admin.id, admin.name, admin.email, issued_at=issued)
    response = await client.get("/api/contacts", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


async def test_protected_route_with_valid_token_returns_200(client, auth_headers):
    response = await client.get("/api/contacts", headers=auth_headers)
    assert response.status_code == 200
    assert response.json() == []


async def test_protected_route_without_secret_returns_500(client, auth_headers, missing_secret):
    response = await client.get("/api/contacts", headers=auth_headers)
    assert response.status_code == 500


async def test_missing_secret_reported_before_missing_token(client, missing_secret):
    response = await client.get("/api/contacts")
    assert response.status_code == 500
    assert "JWT_SECRET_KEY" in response.json()["detail"]


async def test_preflight_is_answered_without_token(client):
    response = await client.options(
        "/api/contacts",
        headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "DELETE",
            "Access-Control-Request-Headers": "Authorization",
        },
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:3000"


async def test_preflight_from_unlisted_origin_is_refused(client):
    response = await client.options(
        "/api/contacts",
        headers={
            "Origin": "http://evil.example",
            "Access-Control-Request-Method": "GET",
        },
    )
    assert response.status_code == 400
    assert "access-control-allow-origin" not in response.headers
