"""FastAPI dependency injection for repositories and authentication.

These dependencies are used in endpoint function signatures to inject the
repositories stored on app.state and the authenticated administrator's claims.
"""

from __future__ import annotations

import uuid
from typing import Any

from fastapi import HTTPException, Request, status

from src.dashboard.core.errors import UnauthorizedError, ValidationError
from src.dashboard.core.security import TokenClaims, get_signing_secret, verify_token

INVALID_ID_MESSAGE = "Invalid ID"


# ── Access Guard ──────────────────────────────────────────────────────────────


async def require_admin(request: Request) -> TokenClaims | None:
    """Gate protected endpoints behind a valid ``Authorization: Bearer`` token.

    Pre-flight (OPTIONS) requests pass through unconditionally. On success the
    decoded claims are attached to ``request.state.admin`` and returned.

    Raises:
        UnauthorizedError: If the header is missing/malformed or the token is invalid.
        ConfigurationFault: If the server has no signing secret.
    """
    if request.method == "OPTIONS":
        return None

    # Secret is checked before the header
    get_signing_secret()

    auth_header = request.headers.get("Authorization") or ""
    if not auth_header.startswith("Bearer "):
        raise UnauthorizedError("Not authenticated")

    claims = verify_token(auth_header[7:])
    request.state.admin = claims
    return claims


# ── Identifiers ───────────────────────────────────────────────────────────────


def parse_record_id(raw_id: str) -> uuid.UUID:
    """Parse a path identifier, rejecting malformed values before any lookup.

    Raises:
        ValidationError: If raw_id is not a well-formed record identifier.
    """
    try:
        return uuid.UUID(raw_id)
    except (TypeError, ValueError):
        raise ValidationError(INVALID_ID_MESSAGE)


# ── Repositories ──────────────────────────────────────────────────────────────


def _get_state_repository(request: Request, attribute: str, label: str) -> Any:
    repo = getattr(request.app.state, attribute, None)
    if repo is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{label} not initialized",
        )
    return repo


def get_admin_repository(request: Request) -> Any:
    """Retrieve AdminRepository from app.state, 503 if not available."""
    return _get_state_repository(request, "admin_repository", "Credential store")


def get_contact_repository(request: Request) -> Any:
    """Retrieve ContactRepository from app.state, 503 if not available."""
    return _get_state_repository(request, "contact_repository", "Contact store")


def get_deal_contact_repository(request: Request) -> Any:
    """Retrieve DealContactRepository from app.state, 503 if not available."""
    return _get_state_repository(request, "deal_contact_repository", "Deal contact store")
