"""Authentication API endpoint.

Login is the only auth operation exposed; administrators are provisioned
out-of-band. Failure reasons are logged server-side and only surfaced to the
caller as a status code and a short message.
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Depends

from src.dashboard.api.deps import get_admin_repository
from src.dashboard.auth.schemas import LoginRequest, LoginResponse
from src.dashboard.core.errors import NotFoundError, UnauthorizedError, ValidationError
from src.dashboard.core.security import create_access_token, verify_password

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, repo: Any = Depends(get_admin_repository)) -> LoginResponse:
    """Authenticate an administrator and return a session token."""
    email = (body.email or "").strip()
    password = body.password or ""

    if not email or not password:
        logger.info("auth.login_rejected", reason="missing_fields")
        raise ValidationError("Email and password are required")

    admin = await repo.get_by_email(email)
    if admin is None:
        logger.info("auth.login_rejected", reason="unknown_email", email=email)
        raise NotFoundError("User not found")

    if not verify_password(password, admin.hashed_password):
        logger.info("auth.login_rejected", reason="wrong_password", admin_id=admin.id)
        raise UnauthorizedError("Incorrect password")

    token = create_access_token(admin_id=admin.id, name=admin.name, email=admin.email)
    logger.info("auth.login_succeeded", admin_id=admin.id)

    return LoginResponse(token=token, user=admin.to_public())
