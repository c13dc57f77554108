"""REST API endpoints for contact records.

Contacts are created by the public contact form, so the dashboard only lists,
flags and deletes them. All endpoints require a valid administrator token.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends
from pydantic import BaseModel

from src.dashboard.api.deps import get_contact_repository, parse_record_id, require_admin
from src.dashboard.contacts.schemas import ContactedUpdate, ContactRead
from src.dashboard.core.errors import NotFoundError

router = APIRouter(
    prefix="/api/contacts",
    tags=["contacts"],
    dependencies=[Depends(require_admin)],
)

CONTACT_NOT_FOUND = "Contact not found"


class MessageResponse(BaseModel):
    """Confirmation for a deletion."""

    message: str


@router.get("", response_model=list[ContactRead])
async def list_contacts(repo: Any = Depends(get_contact_repository)) -> list[ContactRead]:
    """List all contacts, most recent first."""
    return await repo.list_contacts()


@router.delete("/{contact_id}", response_model=MessageResponse)
async def delete_contact(
    contact_id: str,
    repo: Any = Depends(get_contact_repository),
) -> MessageResponse:
    """Delete a contact by ID."""
    record_id = parse_record_id(contact_id)
    if not await repo.delete_contact(record_id):
        raise NotFoundError(CONTACT_NOT_FOUND)
    return MessageResponse(message="Contact deleted successfully")


@router.patch("/{contact_id}/contacted", response_model=ContactRead)
async def mark_contacted(
    contact_id: str,
    body: ContactedUpdate | None = Body(default=None),
    repo: Any = Depends(get_contact_repository),
) -> ContactRead:
    """Set the contacted flag (true unless the body says otherwise)."""
    record_id = parse_record_id(contact_id)
    contacted = body.flag() if body is not None else True
    contact = await repo.set_contacted(record_id, contacted)
    if contact is None:
        raise NotFoundError(CONTACT_NOT_FOUND)
    return contact
