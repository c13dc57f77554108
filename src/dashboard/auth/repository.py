"""Credential store -- async access to administrator records.

AdminRepository follows the session_factory callable pattern used by the
record repositories. Passwords are hashed here, so callers never handle a
hash directly when creating or changing credentials.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Callable

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.dashboard.auth.models import Administrator
from src.dashboard.auth.schemas import AdminCreate, AdminRead, check_new_password, normalize_email
from src.dashboard.core.database import store_errors
from src.dashboard.core.errors import NotFoundError, ValidationError
from src.dashboard.core.security import hash_password

logger = structlog.get_logger(__name__)


def _model_to_admin(model: Administrator) -> AdminRead:
    """Convert Administrator model to AdminRead schema."""
    return AdminRead(
        id=str(model.id),
        name=model.name,
        email=model.email,
        hashed_password=model.hashed_password,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


class AdminRepository:
    """Lookup and provisioning operations for administrators.

    Args:
        session_factory: Async callable that yields AsyncSession instances.
    """

    def __init__(
        self, session_factory: Callable[..., AsyncGenerator[AsyncSession, None]]
    ) -> None:
        self._session_factory = session_factory

    async def get_by_email(self, email: str) -> AdminRead | None:
        """Find an administrator by email (case-insensitive).

        Returns:
            AdminRead if found, None otherwise.
        """
        async for session in self._session_factory():
            with store_errors("admin.get_by_email"):
                result = await session.execute(
                    select(Administrator).where(Administrator.email == normalize_email(email))
                )
                model = result.scalar_one_or_none()
            return _model_to_admin(model) if model is not None else None

    async def create(self, data: AdminCreate) -> AdminRead:
        """Create an administrator, hashing the supplied password.

        Raises:
            ValidationError: If the email is already registered.
        """
        async for session in self._session_factory():
            model = Administrator(
                name=data.name,
                email=normalize_email(str(data.email)),
                hashed_password=hash_password(data.password),
            )
            session.add(model)
            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                raise ValidationError(f"Administrator already exists: {model.email}") from exc
            with store_errors("admin.create"):
                await session.refresh(model)
            logger.info("admin.created", admin_id=str(model.id), email=model.email)
            return _model_to_admin(model)

    async def set_password(self, email: str, new_password: str) -> AdminRead:
        """Replace an administrator's password with a freshly salted hash.

        Raises:
            ValidationError: If the new password is too short or too long for bcrypt.
            NotFoundError: If no administrator has that email.
        """
        try:
            check_new_password(new_password)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc

        async for session in self._session_factory():
            with store_errors("admin.set_password"):
                result = await session.execute(
                    select(Administrator).where(Administrator.email == normalize_email(email))
                )
                model = result.scalar_one_or_none()
                if model is None:
                    raise NotFoundError(f"Administrator not found: {email}")
                model.hashed_password = hash_password(new_password)
                await session.commit()
                await session.refresh(model)
            logger.info("admin.password_changed", admin_id=str(model.id))
            return _model_to_admin(model)
