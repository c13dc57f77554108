"""Tests for the Python client: session state, HTTP client and list views.

The client talks to the real app through httpx.ASGITransport, backed by the
in-memory repositories from conftest.
"""

from __future__ import annotations

import json
import uuid

import httpx
import pytest
import pytest_asyncio

from src.dashboard.client.http import CONNECTION_ERROR_MESSAGE, ApiError, DashboardClient
from src.dashboard.client.session import SessionStore
from src.dashboard.client.storage import FileSessionStorage, MemorySessionStorage
from src.dashboard.client.views import ContactsView, DealContactsView
from src.dashboard.contacts.schemas import ContactCreate

from conftest import ADMIN_EMAIL, ADMIN_PASSWORD


@pytest.fixture
def session() -> SessionStore:
    return SessionStore(MemorySessionStorage())


@pytest.fixture
def unauthorized_calls() -> list[str]:
    return []


@pytest.fixture
def api(app, session, unauthorized_calls) -> DashboardClient:
    return DashboardClient(
        session,
        base_url="http://test/api",
        on_unauthorized=lambda: unauthorized_calls.append("redirect"),
        transport=httpx.ASGITransport(app=app),
    )


@pytest_asyncio.fixture
async def logged_in(api) -> DashboardClient:
    await api.login(ADMIN_EMAIL, ADMIN_PASSWORD)
    return api


# ── Storage ──────────────────────────────────────────────────────────────────


def test_file_storage_roundtrip(tmp_path):
    path = tmp_path / "nested" / "session.json"
    storage = FileSessionStorage(path)

    assert storage.load() is None
    storage.save({"token": "t", "user": {"id": "1", "name": "A", "email": "a@x.io"}})

    assert json.loads(path.read_text())["auth"]["token"] == "t"
    assert storage.load()["user"]["name"] == "A"

    storage.clear()
    assert not path.exists()
    storage.clear()


def test_file_storage_ignores_corrupt_file(tmp_path):
    path = tmp_path / "session.json"
    path.write_text("{not json")

    assert FileSessionStorage(path).load() is None


# ── Session State ────────────────────────────────────────────────────────────


def test_hydrate_restores_persisted_session():
    stored = {"token": "abc", "user": {"id": "1", "name": "Admin", "email": "a@x.io"}}
    session = SessionStore(MemorySessionStorage(stored))

    state = session.hydrate()

    assert state.is_authenticated
    assert state.token == "abc"
    assert state.user["name"] == "Admin"


@pytest.mark.parametrize(
    "stored",
    [
        {"token": "abc"},
        {"user": {"id": "1", "name": "A", "email": "a@x.io"}},
        {"token": "", "user": {"id": "1", "name": "A", "email": "a@x.io"}},
        "garbage",
    ],
)
def test_hydrate_discards_invalid_storage(stored):
    storage = MemorySessionStorage(stored)
    session = SessionStore(storage)

    state = session.hydrate()

    assert not state.is_authenticated
    assert storage.load() is None


def test_session_login_requires_token_and_user(session):
    with pytest.raises(ValueError):
        session.login(None, {"id": "1", "name": "A", "email": "a@x.io"})
    with pytest.raises(ValueError):
        session.login("token", None)
    assert not session.state.is_authenticated


def test_logout_clears_state_and_storage():
    storage = MemorySessionStorage()
    session = SessionStore(storage)
    session.login("token", {"id": "1", "name": "A", "email": "a@x.io"})

    session.logout()

    assert session.token is None
    assert storage.load() is None


# ── HTTP Client ──────────────────────────────────────────────────────────────


async def test_login_stores_session(api, session, admin):
    data = await api.login(ADMIN_EMAIL, ADMIN_PASSWORD)

    assert data["user"]["id"] == admin.id
    assert session.state.is_authenticated
    assert session.user == {"id": admin.id, "name": "Admin", "email": ADMIN_EMAIL}


async def test_login_failure_is_normalized(api, session, unauthorized_calls):
    with pytest.raises(ApiError) as exc_info:
        await api.login(ADMIN_EMAIL, "wrong-password")

    assert exc_info.value.status_code == 401
    assert exc_info.value.message == "Incorrect password"
    assert not session.state.is_authenticated
    assert unauthorized_calls == []


async def test_rejected_token_clears_session_and_redirects(api, session, unauthorized_calls):
    session.login("stale-token", {"id": "1", "name": "A", "email": "a@x.io"})

    with pytest.raises(ApiError) as exc_info:
        await api.list_contacts()

    assert exc_info.value.status_code == 401
    assert session.token is None
    assert unauthorized_calls == ["redirect"]


async def test_connection_failure_uses_generic_message(session):
    def refuse(request):
        raise httpx.ConnectError("refused", request=request)

    client = DashboardClient(
        session, base_url="http://test/api", transport=httpx.MockTransport(refuse)
    )

    with pytest.raises(ApiError) as exc_info:
        await client.list_contacts()

    assert exc_info.value.message == CONNECTION_ERROR_MESSAGE
    assert exc_info.value.status_code is None


async def test_error_message_taken_from_error_field(session):
    transport = httpx.MockTransport(
        lambda request: httpx.Response(500, json={"error": "Server exploded"})
    )
    client = DashboardClient(session, base_url="http://test/api", transport=transport)

    with pytest.raises(ApiError) as exc_info:
        await client.list_deal_contacts()

    assert exc_info.value.message == "Server exploded"


async def test_login_response_without_token_is_rejected(session):
    transport = httpx.MockTransport(
        lambda request: httpx.Response(200, json={"message": "ok", "user": {"id": "1"}})
    )
    client = DashboardClient(session, base_url="http://test/api", transport=transport)

    with pytest.raises(ApiError):
        await client.login("a@x.io", "secret123")
    assert not session.state.is_authenticated


async def test_bearer_header_is_attached(session):
    seen = {}

    def capture(request):
        seen["authorization"] = request.headers.get("Authorization")
        seen["path"] = request.url.path
        return httpx.Response(200, json=[])

    session.login("tok-123", {"id": "1", "name": "A", "email": "a@x.io"})
    client = DashboardClient(session, base_url="http://test/api", transport=httpx.MockTransport(capture))

    await client.list_contacts()

    assert seen == {"authorization": "Bearer tok-123", "path": "/api/contacts"}


# ── Views ────────────────────────────────────────────────────────────────────


async def test_contacts_view_flow(logged_in, contact_repo):
    first = await contact_repo.create_contact(ContactCreate(name="Uno", email="uno@x.io", phone="1"))
    second = await contact_repo.create_contact(ContactCreate(name="Dos", email="dos@x.io", phone="2"))
    view = ContactsView(logged_in)

    await view.load()
    assert [c["id"] for c in view.items] == [second.id, first.id]

    await view.mark_contacted(first.id)
    assert view.get(first.id)["contacted"] is True

    await view.remove(second.id)
    assert [c["id"] for c in view.items] == [first.id]


async def test_view_keeps_state_when_server_rejects(logged_in, contact_repo):
    contact = await contact_repo.create_contact(ContactCreate(name="Uno", email="uno@x.io", phone="1"))
    view = ContactsView(logged_in)
    await view.load()

    with pytest.raises(ApiError):
        await view.remove(str(uuid.uuid4()))

    assert [c["id"] for c in view.items] == [contact.id]
    assert view.error == "Contact not found"


async def test_deal_contacts_view_flow(logged_in):
    view = DealContactsView(logged_in)
    await view.load()
    assert view.items == []

    older = await view.create(
        {
            "nombre": "Ana Ruiz",
            "nombreEmpresa": "Ruiz SA",
            "telefono": "123456",
            "direccion": "Calle 1",
            "descripcionServicio": "Soporte",
        }
    )
    newer = await view.create(
        {
            "nombre": "Luis Paz",
            "nombreEmpresa": "Paz Ltda",
            "telefono": "654321",
            "direccion": "Calle 2",
            "descripcionServicio": "Instalacion",
        }
    )
    assert [d["id"] for d in view.items] == [newer["id"], older["id"]]

    await view.update(older["id"], {"direccion": "New Addr"})
    assert view.get(older["id"])["direccion"] == "New Addr"

    await view.remove(newer["id"])
    assert [d["id"] for d in view.items] == [older["id"]]


async def test_deal_view_create_failure_leaves_list_untouched(logged_in):
    view = DealContactsView(logged_in)

    with pytest.raises(ApiError) as exc_info:
        await view.create({"nombre": "Ana"})

    assert exc_info.value.status_code == 400
    assert view.items == []
    assert view.error
