"""Contact repository -- async list/flag/delete for contact records.

Identifiers arrive already parsed as UUIDs; malformed ids are rejected at the
API boundary before any query is issued.
"""

from __future__ import annotations

import uuid
from collections.abc import AsyncGenerator, Callable

import structlog
from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.dashboard.contacts.models import ContactModel
from src.dashboard.contacts.schemas import ContactCreate, ContactRead
from src.dashboard.core.database import store_errors

logger = structlog.get_logger(__name__)


def _model_to_contact(model: ContactModel) -> ContactRead:
    """Convert ContactModel to ContactRead schema."""
    return ContactRead(
        id=str(model.id),
        name=model.name,
        email=model.email,
        phone=model.phone,
        contacted=model.contacted,
        created_at=model.created_at,
    )


class ContactRepository:
    """Async operations on contact records.

    Args:
        session_factory: Async callable that yields AsyncSession instances.
    """

    def __init__(
        self, session_factory: Callable[..., AsyncGenerator[AsyncSession, None]]
    ) -> None:
        self._session_factory = session_factory

    async def list_contacts(self) -> list[ContactRead]:
        """List all contacts, most recent first (id breaks creation-time ties)."""
        async for session in self._session_factory():
            with store_errors("contacts.list"):
                stmt = select(ContactModel).order_by(
                    ContactModel.created_at.desc(), ContactModel.id.desc()
                )
                result = await session.execute(stmt)
                models = result.scalars().all()
            return [_model_to_contact(m) for m in models]

    async def create_contact(self, data: ContactCreate) -> ContactRead:
        """Insert a contact the way the public form does."""
        async for session in self._session_factory():
            with store_errors("contacts.create"):
                model = ContactModel(name=data.name, email=data.email, phone=data.phone)
                session.add(model)
                await session.commit()
                await session.refresh(model)
            return _model_to_contact(model)

    async def set_contacted(
        self, contact_id: uuid.UUID, contacted: bool = True
    ) -> ContactRead | None:
        """Update only the contacted flag.

        Returns:
            The updated ContactRead, or None if no contact has that id.
        """
        async for session in self._session_factory():
            with store_errors("contacts.set_contacted"):
                stmt = (
                    update(ContactModel)
                    .where(ContactModel.id == contact_id)
                    .values(contacted=contacted)
                    .returning(ContactModel)
                )
                result = await session.execute(stmt)
                model = result.scalar_one_or_none()
                await session.commit()
            if model is None:
                return None
            logger.info("contacts.flag_updated", contact_id=str(contact_id), contacted=contacted)
            return _model_to_contact(model)

    async def delete_contact(self, contact_id: uuid.UUID) -> bool:
        """Delete a contact.

        Returns:
            True if a row was removed, False if no contact has that id.
        """
        async for session in self._session_factory():
            with store_errors("contacts.delete"):
                stmt = (
                    delete(ContactModel)
                    .where(ContactModel.id == contact_id)
                    .returning(ContactModel.id)
                )
                result = await session.execute(stmt)
                deleted = result.scalar_one_or_none()
                await session.commit()
            if deleted is None:
                return False
            logger.info("contacts.deleted", contact_id=str(contact_id))
            return True
