"""List views over the dashboard resources.

Each view owns a local ``items`` list and changes it only after the server
confirms the operation. Failures are recorded on ``view.error`` and re-raised.
"""

from __future__ import annotations

from typing import Any

from src.dashboard.client.http import ApiError, DashboardClient


class _ResourceView:
    def __init__(self, client: DashboardClient) -> None:
        self._client = client
        self.items: list[dict[str, Any]] = []
        self.loading = False
        self.error: str | None = None

    async def _call(self, coro):
        self.loading = True
        self.error = None
        try:
            return await coro
        except ApiError as exc:
            self.error = exc.message
            raise
        finally:
            self.loading = False

    def _replace(self, updated: dict[str, Any]) -> None:
        self.items = [updated if item["id"] == updated["id"] else item for item in self.items]

    def _drop(self, record_id: str) -> None:
        self.items = [item for item in self.items if item["id"] != record_id]

    def get(self, record_id: str) -> dict[str, Any] | None:
        return next((item for item in self.items if item["id"] == record_id), None)


class ContactsView(_ResourceView):
    """Contact requests, newest first."""

    async def load(self) -> list[dict[str, Any]]:
        self.items = await self._call(self._client.list_contacts())
        return self.items

    async def remove(self, contact_id: str) -> None:
        await self._call(self._client.delete_contact(contact_id))
        self._drop(contact_id)

    async def mark_contacted(self, contact_id: str, contacted: bool = True) -> dict[str, Any]:
        updated = await self._call(self._client.mark_contacted(contact_id, contacted))
        self._replace(updated)
        return updated


class DealContactsView(_ResourceView):
    """Deal contacts (closed contracts), newest first."""

    async def load(self) -> list[dict[str, Any]]:
        self.items = await self._call(self._client.list_deal_contacts())
        return self.items

    async def create(self, payload: dict[str, Any]) -> dict[str, Any]:
        created = await self._call(self._client.create_deal_contact(payload))
        self.items = [created, *self.items]
        return created

    async def update(self, deal_contact_id: str, patch: dict[str, Any]) -> dict[str, Any]:
        updated = await self._call(self._client.update_deal_contact(deal_contact_id, patch))
        self._replace(updated)
        return updated

    async def remove(self, deal_contact_id: str) -> None:
        await self._call(self._client.delete_deal_contact(deal_contact_id))
        self._drop(deal_contact_id)
