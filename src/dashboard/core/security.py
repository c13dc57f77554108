"""JWT session tokens and password hashing.

Provides the core security primitives used by the login endpoint and the
access guard.

Uses bcrypt directly (not passlib) for Python 3.13 compatibility.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
from jose import JWTError, jwt

from src.dashboard.config import get_settings
from src.dashboard.core.errors import ConfigurationFault, UnauthorizedError

logger = logging.getLogger(__name__)

INVALID_TOKEN_MESSAGE = "Invalid or expired token"

MAX_BCRYPT_BYTES = 72


@dataclass(frozen=True)
class TokenClaims:
    """Decoded session token claims attached to authenticated requests."""

    admin_id: str
    name: str
    email: str
    issued_at: datetime
    expires_at: datetime


# ── Password Hashing ──────────────────────────────────────────────────────────


def hash_password(password: str) -> str:
    """Hash a plaintext password using bcrypt with a fresh salt."""
    salt = bcrypt.gensalt()
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Verify a plaintext password against its bcrypt hash."""
    if len(plain.encode("utf-8")) > MAX_BCRYPT_BYTES:
        # No stored password can be this long, so it cannot match
        logger.info("Password candidate exceeds %d bytes, rejected", MAX_BCRYPT_BYTES)
        return False
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        logger.warning("Stored password hash has an invalid format")
        return False


# ── JWT Tokens ────────────────────────────────────────────────────────────────


def get_signing_secret() -> str:
    """Return the JWT signing secret.

    Raises:
        ConfigurationFault: If no secret is configured.
    """
    secret = get_settings().JWT_SECRET_KEY
    if not secret:
        raise ConfigurationFault("JWT_SECRET_KEY is not configured on the server")
    return secret


def create_access_token(
    admin_id: str,
    name: str,
    email: str,
    issued_at: datetime | None = None,
) -> str:
    """Create a signed session token for an administrator.

    The token embeds the administrator's id (``sub``), name and email, and
    expires ``JWT_EXPIRE_DAYS`` (7 by default) after issuance.

    Raises:
        ConfigurationFault: If no signing secret is configured.
    """
    settings = get_settings()
    secret = get_signing_secret()
    now = issued_at or datetime.now(timezone.utc)
    to_encode: dict[str, Any] = {
        "sub": admin_id,
        "name": name,
        "email": email,
        "iat": now,
        "exp": now + timedelta(days=settings.JWT_EXPIRE_DAYS),
        "type": "access",
    }
    return jwt.encode(to_encode, secret, algorithm=settings.JWT_ALGORITHM)


def verify_token(token: str) -> TokenClaims:
    """Decode and validate a session token.

    Malformed, expired, foreign-signed and incomplete tokens all fail the
    same way so callers cannot tell them apart.

    Raises:
        UnauthorizedError: If the token is not valid.
        ConfigurationFault: If no signing secret is configured.
    """
    settings = get_settings()
    secret = get_signing_secret()
    try:
        payload = jwt.decode(token, secret, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        raise UnauthorizedError(INVALID_TOKEN_MESSAGE)

    if payload.get("type") != "access" or not payload.get("sub"):
        raise UnauthorizedError(INVALID_TOKEN_MESSAGE)

    try:
        return TokenClaims(
            admin_id=str(payload["sub"]),
            name=str(payload.get("name") or ""),
            email=str(payload.get("email") or ""),
            issued_at=datetime.fromtimestamp(int(payload["iat"]), tz=timezone.utc),
            expires_at=datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc),
        )
    except (KeyError, TypeError, ValueError):
        raise UnauthorizedError(INVALID_TOKEN_MESSAGE)
