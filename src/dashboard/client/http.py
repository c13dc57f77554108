"""Authenticated async HTTP client for the dashboard API.

Attaches the session's bearer token to every call. A 401 on an authenticated
call clears the session and fires the ``on_unauthorized`` callback. Every
failure surfaces as ``ApiError`` with one human-readable message. There are
no retries.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx
import structlog

from src.dashboard.client.session import SessionStore

logger = structlog.get_logger(__name__)

CONNECTION_ERROR_MESSAGE = "Could not connect to the server"
_MESSAGE_FIELDS = ("detail", "error", "message")


class ApiError(Exception):
    """A failed API call, normalized to a single message.

    Attributes:
        message: Human-readable reason.
        status_code: HTTP status, or None when no response was received.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _error_message(response: httpx.Response) -> str:
    """Pick the server's message from ``detail``/``error``/``message``."""
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        for field in _MESSAGE_FIELDS:
            value = body.get(field)
            if isinstance(value, str) and value:
                return value
    return f"Request failed with status {response.status_code}"


class DashboardClient:
    """Client for the dashboard REST API.

    Args:
        session: Session store providing (and cleared on rejection of) the token.
        base_url: API root, e.g. ``http://localhost:8000/api``.
        on_unauthorized: Called after the session is cleared by a 401.
        timeout: Per-request timeout in seconds.
        transport: Optional httpx transport (tests pass ``httpx.ASGITransport``).
    """

    def __init__(
        self,
        session: SessionStore,
        base_url: str,
        on_unauthorized: Callable[[], Any] | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._session = session
        self._base_url = base_url.rstrip("/")
        self._on_unauthorized = on_unauthorized
        self._timeout = timeout
        self._transport = transport

    @property
    def session(self) -> SessionStore:
        return self._session

    def _client(self) -> httpx.AsyncClient:
        """Create a new httpx client for one call."""
        return httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
            headers={"Content-Type": "application/json"},
        )

    async def request(self, method: str, path: str, json: Any = None) -> Any:
        """Send one request and return the decoded JSON body.

        Raises:
            ApiError: On transport failure or any non-2xx response.
        """
        headers = {}
        token = self._session.token
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            async with self._client() as client:
                response = await client.request(method, path, json=json, headers=headers)
        except httpx.HTTPError as exc:
            logger.warning("dashboard_client.transport_error", method=method, path=path, error=str(exc))
            raise ApiError(CONNECTION_ERROR_MESSAGE) from exc

        if response.status_code == 401 and token:
            self._session.clear()
            logger.info("dashboard_client.session_rejected", path=path)
            if self._on_unauthorized is not None:
                self._on_unauthorized()

        if response.is_error:
            raise ApiError(_error_message(response), response.status_code)

        if not response.content:
            return None
        return response.json()

    # ── Auth ────────────────────────────────────────────────────────────────

    async def login(self, email: str, password: str) -> dict:
        """Authenticate and store the resulting session.

        Raises:
            ApiError: On rejected credentials or a response missing token/user.
        """
        data = await self.request("POST", "/auth/login", json={"email": email, "password": password})
        data = data if isinstance(data, dict) else {}
        try:
            self._session.login(data.get("token"), data.get("user"))
        except ValueError as exc:
            raise ApiError(str(exc)) from exc
        return data

    # ── Contacts ────────────────────────────────────────────────────────────

    async def list_contacts(self) -> list[dict]:
        return await self.request("GET", "/contacts")

    async def delete_contact(self, contact_id: str) -> dict:
        return await self.request("DELETE", f"/contacts/{contact_id}")

    async def mark_contacted(self, contact_id: str, contacted: bool = True) -> dict:
        return await self.request(
            "PATCH", f"/contacts/{contact_id}/contacted", json={"contacted": contacted}
        )

    # ── Deal contacts ───────────────────────────────────────────────────────

    async def list_deal_contacts(self) -> list[dict]:
        return await self.request("GET", "/deal-contacts")

    async def create_deal_contact(self, payload: dict) -> dict:
        return await self.request("POST", "/deal-contacts", json=payload)

    async def update_deal_contact(self, deal_contact_id: str, patch: dict) -> dict:
        return await self.request("PATCH", f"/deal-contacts/{deal_contact_id}", json=patch)

    async def delete_deal_contact(self, deal_contact_id: str) -> dict:
        return await self.request("DELETE", f"/deal-contacts/{deal_contact_id}")
