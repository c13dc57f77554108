"""Shared fixtures for the dashboard test suite.

Provides:
- In-memory repository doubles installed on app.state (no database needed)
- The FastAPI app and an httpx AsyncClient bound to it via ASGITransport
- A provisioned administrator and bearer headers for protected routes
"""

from __future__ import annotations

import os

# Must be set before settings are first read (src.dashboard.main builds the app at import)
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-dashboard-tests")

import uuid
from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.dashboard.auth.schemas import AdminCreate, AdminRead, normalize_email
from src.dashboard.config import get_settings
from src.dashboard.contacts.schemas import ContactCreate, ContactRead
from src.dashboard.core.errors import ValidationError
from src.dashboard.core.security import create_access_token, hash_password
from src.dashboard.deal_contacts.schemas import (
    DealContactCreate,
    DealContactPatch,
    DealContactRead,
    check_date_range,
)
from src.dashboard.main import create_app

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "secret123"
# Hashing is slow by design; hash the fixture password once per session
_ADMIN_HASH = hash_password(ADMIN_PASSWORD)


def _newest_first(records: list) -> list:
    return sorted(records, key=lambda r: (r.created_at, r.id), reverse=True)


# ── In-Memory Test Doubles ───────────────────────────────────────────────────


class InMemoryAdminRepository:
    """In-memory AdminRepository for testing without database."""

    def __init__(self) -> None:
        self._admins: dict[str, AdminRead] = {}

    def add(self, name: str, email: str, hashed_password: str) -> AdminRead:
        admin = AdminRead(
            id=str(uuid.uuid4()),
            name=name,
            email=normalize_email(email),
            hashed_password=hashed_password,
            created_at=datetime.now(timezone.utc),
        )
        self._admins[admin.email] = admin
        return admin

    async def get_by_email(self, email: str) -> AdminRead | None:
        return self._admins.get(normalize_email(email))

    async def create(self, data: AdminCreate) -> AdminRead:
        if normalize_email(str(data.email)) in self._admins:
            raise ValidationError("Administrator already exists")
        return self.add(data.name, str(data.email), hash_password(data.password))


class InMemoryContactRepository:
    """In-memory ContactRepository; records every call for assertions."""

    def __init__(self) -> None:
        self._contacts: dict[str, ContactRead] = {}
        self.calls: list[tuple[str, object]] = []
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def _tick(self) -> datetime:
        self._clock += timedelta(minutes=1)
        return self._clock

    async def create_contact(self, data: ContactCreate) -> ContactRead:
        contact = ContactRead(
            id=str(uuid.uuid4()),
            name=data.name,
            email=data.email,
            phone=data.phone,
            contacted=False,
            created_at=self._tick(),
        )
        self._contacts[contact.id] = contact
        return contact

    async def list_contacts(self) -> list[ContactRead]:
        self.calls.append(("list", None))
        return _newest_first(list(self._contacts.values()))

    async def set_contacted(self, contact_id: uuid.UUID, contacted: bool = True) -> ContactRead | None:
        self.calls.append(("set_contacted", contact_id))
        contact = self._contacts.get(str(contact_id))
        if contact is None:
            return None
        updated = contact.model_copy(update={"contacted": contacted})
        self._contacts[updated.id] = updated
        return updated

    async def delete_contact(self, contact_id: uuid.UUID) -> bool:
        self.calls.append(("delete", contact_id))
        return self._contacts.pop(str(contact_id), None) is not None


class InMemoryDealContactRepository:
    """In-memory DealContactRepository mirroring the merged date-range check."""

    def __init__(self) -> None:
        self._records: dict[str, DealContactRead] = {}
        self.calls: list[tuple[str, object]] = []
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def _tick(self) -> datetime:
        self._clock += timedelta(minutes=1)
        return self._clock

    async def list_deal_contacts(self) -> list[DealContactRead]:
        self.calls.append(("list", None))
        return _newest_first(list(self._records.values()))

    async def create_deal_contact(self, data: DealContactCreate) -> DealContactRead:
        self.calls.append(("create", None))
        now = self._tick()
        record = DealContactRead(
            id=str(uuid.uuid4()),
            created_at=now,
            updated_at=now,
            **data.model_dump(),
        )
        self._records[record.id] = record
        return record

    async def update_deal_contact(
        self, deal_contact_id: uuid.UUID, patch: DealContactPatch
    ) -> DealContactRead | None:
        self.calls.append(("update", deal_contact_id))
        record = self._records.get(str(deal_contact_id))
        if record is None:
            return None
        changes = patch.changes()
        try:
            check_date_range(
                changes.get("start_date", record.start_date),
                changes.get("end_date", record.end_date),
            )
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc
        updated = record.model_copy(update={**changes, "updated_at": self._tick()})
        self._records[updated.id] = updated
        return updated

    async def delete_deal_contact(self, deal_contact_id: uuid.UUID) -> bool:
        self.calls.append(("delete", deal_contact_id))
        return self._records.pop(str(deal_contact_id), None) is not None


# ── App & Client ─────────────────────────────────────────────────────────────


@pytest.fixture
def admin_repo() -> InMemoryAdminRepository:
    repo = InMemoryAdminRepository()
    repo.add("Admin", ADMIN_EMAIL, _ADMIN_HASH)
    return repo


@pytest.fixture
def contact_repo() -> InMemoryContactRepository:
    return InMemoryContactRepository()


@pytest.fixture
def deal_repo() -> InMemoryDealContactRepository:
    return InMemoryDealContactRepository()


@pytest.fixture
def app(admin_repo, contact_repo, deal_repo):
    """FastAPI app with in-memory repositories (lifespan is not run)."""
    application = create_app()
    application.state.admin_repository = admin_repo
    application.state.contact_repository = contact_repo
    application.state.deal_contact_repository = deal_repo
    return application


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for testing the API."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def admin(admin_repo) -> AdminRead:
    return admin_repo._admins[ADMIN_EMAIL]


@pytest.fixture
def auth_headers(admin) -> dict[str, str]:
    token = create_access_token(admin_id=admin.id, name=admin.name, email=admin.email)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def missing_secret(monkeypatch):
    """Run a test with no JWT signing secret configured."""
    monkeypatch.setenv("JWT_SECRET_KEY", "")
    get_settings.cache_clear()
    yield
    monkeypatch.undo()
    get_settings.cache_clear()
