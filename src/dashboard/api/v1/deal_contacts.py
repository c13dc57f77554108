"""REST API endpoints for deal contacts (closed-deal / client address book).

Provides list, create, partial update and delete. All endpoints require a
valid administrator token; any administrator may act on any record.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from src.dashboard.api.deps import (
    get_deal_contact_repository,
    parse_record_id,
    require_admin,
)
from src.dashboard.core.errors import NotFoundError
from src.dashboard.deal_contacts.schemas import (
    DealContactCreate,
    DealContactPatch,
    DealContactRead,
)

router = APIRouter(
    prefix="/api/deal-contacts",
    tags=["deal-contacts"],
    dependencies=[Depends(require_admin)],
)

DEAL_CONTACT_NOT_FOUND = "Deal contact not found"


class DeleteResponse(BaseModel):
    """Confirmation for a deletion."""

    ok: bool = True
    message: str


@router.get("", response_model=list[DealContactRead])
async def list_deal_contacts(
    repo: Any = Depends(get_deal_contact_repository),
) -> list[DealContactRead]:
    """List all deal contacts, most recent first."""
    return await repo.list_deal_contacts()


@router.post("", response_model=DealContactRead, status_code=status.HTTP_201_CREATED)
async def create_deal_contact(
    body: DealContactCreate,
    repo: Any = Depends(get_deal_contact_repository),
) -> DealContactRead:
    """Create a deal contact."""
    return await repo.create_deal_contact(body)


@router.patch("/{deal_contact_id}", response_model=DealContactRead)
async def update_deal_contact(
    deal_contact_id: str,
    body: DealContactPatch,
    repo: Any = Depends(get_deal_contact_repository),
) -> DealContactRead:
    """Apply a partial update to a deal contact."""
    record_id = parse_record_id(deal_contact_id)
    deal_contact = await repo.update_deal_contact(record_id, body)
    if deal_contact is None:
        raise NotFoundError(DEAL_CONTACT_NOT_FOUND)
    return deal_contact


@router.delete("/{deal_contact_id}", response_model=DeleteResponse)
async def delete_deal_contact(
    deal_contact_id: str,
    repo: Any = Depends(get_deal_contact_repository),
) -> DeleteResponse:
    """Delete a deal contact by ID."""
    record_id = parse_record_id(deal_contact_id)
    if not await repo.delete_deal_contact(record_id):
        raise NotFoundError(DEAL_CONTACT_NOT_FOUND)
    return DeleteResponse(message="Deal contact deleted")
