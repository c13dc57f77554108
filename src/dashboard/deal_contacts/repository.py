"""Deal contact repository -- async CRUD for closed-deal/client records.

Uses the session_factory callable pattern: each method opens its own session,
so every operation is atomic at the single-record level. Patches are applied
attribute by attribute from DealContactPatch.changes(); the date-range rule
is re-checked against the merged record before anything is written.
"""

from __future__ import annotations

import uuid
from collections.abc import AsyncGenerator, Callable

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.dashboard.core.database import store_errors
from src.dashboard.core.errors import ValidationError
from src.dashboard.deal_contacts.models import DealContactModel
from src.dashboard.deal_contacts.schemas import (
    DealContactCreate,
    DealContactPatch,
    DealContactRead,
    check_date_range,
)

logger = structlog.get_logger(__name__)


# ── Serialization Helpers ───────────────────────────────────────────────────


def _model_to_deal_contact(model: DealContactModel) -> DealContactRead:
    """Convert DealContactModel to DealContactRead schema."""
    return DealContactRead(
        id=str(model.id),
        name=model.name,
        company_name=model.company_name,
        phone=model.phone,
        address=model.address,
        service_description=model.service_description,
        start_date=model.start_date,
        end_date=model.end_date,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


# ── Repository ──────────────────────────────────────────────────────────────


class DealContactRepository:
    """Async CRUD operations for deal contacts.

    Args:
        session_factory: Async callable that yields AsyncSession instances.
    """

    def __init__(
        self, session_factory: Callable[..., AsyncGenerator[AsyncSession, None]]
    ) -> None:
        self._session_factory = session_factory

    async def list_deal_contacts(self) -> list[DealContactRead]:
        """List all deal contacts, most recent first (id breaks ties)."""
        async for session in self._session_factory():
            with store_errors("deal_contacts.list"):
                stmt = select(DealContactModel).order_by(
                    DealContactModel.created_at.desc(), DealContactModel.id.desc()
                )
                result = await session.execute(stmt)
                models = result.scalars().all()
            return [_model_to_deal_contact(m) for m in models]

    async def create_deal_contact(self, data: DealContactCreate) -> DealContactRead:
        """Create a deal contact from an already-validated payload.

        Returns:
            DealContactRead with generated id and timestamps.
        """
        async for session in self._session_factory():
            with store_errors("deal_contacts.create"):
                model = DealContactModel(
                    name=data.name,
                    company_name=data.company_name,
                    phone=data.phone,
                    address=data.address,
                    service_description=data.service_description,
                    start_date=data.start_date,
                    end_date=data.end_date,
                )
                session.add(model)
                await session.commit()
                await session.refresh(model)
            logger.info("deal_contacts.created", deal_contact_id=str(model.id))
            return _model_to_deal_contact(model)

    async def update_deal_contact(
        self, deal_contact_id: uuid.UUID, patch: DealContactPatch
    ) -> DealContactRead | None:
        """Apply a partial update; keys absent from the patch are left untouched.

        Returns:
            The updated DealContactRead, or None if no record has that id.

        Raises:
            ValidationError: If the merged dates violate end >= start.
        """
        changes = patch.changes()
        async for session in self._session_factory():
            with store_errors("deal_contacts.update"):
                model = await session.get(DealContactModel, deal_contact_id)
                if model is None:
                    return None

                start = changes.get("start_date", model.start_date)
                end = changes.get("end_date", model.end_date)
                try:
                    check_date_range(start, end)
                except ValueError as exc:
                    raise ValidationError(str(exc)) from exc

                for attribute, value in changes.items():
                    setattr(model, attribute, value)
                await session.commit()
                await session.refresh(model)
            logger.info(
                "deal_contacts.updated",
                deal_contact_id=str(deal_contact_id),
                fields=sorted(changes),
            )
            return _model_to_deal_contact(model)

    async def delete_deal_contact(self, deal_contact_id: uuid.UUID) -> bool:
        """Delete a deal contact.

        Returns:
            True if a row was removed, False if no record has that id.
        """
        async for session in self._session_factory():
            with store_errors("deal_contacts.delete"):
                stmt = (
                    delete(DealContactModel)
                    .where(DealContactModel.id == deal_contact_id)
                    .returning(DealContactModel.id)
                )
                result = await session.execute(stmt)
                deleted = result.scalar_one_or_none()
                await session.commit()
            if deleted is None:
                return False
            logger.info("deal_contacts.deleted", deal_contact_id=str(deal_contact_id))
            return True
