"""Client session state: the signed-in administrator and their bearer token.

``SessionStore`` is an explicit object handed to the HTTP client and views.
A restored token is trusted until the backend rejects it; there is no
proactive expiry check.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import structlog

from src.dashboard.client.storage import SessionStorage

logger = structlog.get_logger(__name__)

_USER_KEYS = ("id", "name", "email")


@dataclass(frozen=True)
class SessionState:
    """Snapshot of the client session."""

    user: dict[str, Any] | None = None
    token: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)


def _valid_user(user: Any) -> bool:
    return isinstance(user, dict) and all(isinstance(user.get(k), str) for k in _USER_KEYS)


class SessionStore:
    """Holds and persists the session.

    Args:
        storage: Back-end persisting the session under the ``"auth"`` key.
    """

    def __init__(self, storage: SessionStorage) -> None:
        self._storage = storage
        self._state = SessionState()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def token(self) -> str | None:
        return self._state.token

    @property
    def user(self) -> dict[str, Any] | None:
        return self._state.user

    def hydrate(self) -> SessionState:
        """Restore the persisted session without contacting the server.

        A malformed persisted value is discarded and leaves the session empty.
        """
        stored = self._storage.load()
        if stored is None:
            self._state = SessionState()
            return self._state

        token = stored.get("token") if isinstance(stored, dict) else None
        user = stored.get("user") if isinstance(stored, dict) else None
        if not isinstance(token, str) or not token or not _valid_user(user):
            logger.warning("session.discarded_invalid_storage")
            self._storage.clear()
            self._state = SessionState()
            return self._state

        self._state = SessionState(user=dict(user), token=token)
        return self._state

    def login(self, token: Any, user: Any) -> SessionState:
        """Replace the session with a fresh login result and persist it.

        Raises:
            ValueError: If the login result lacks a token or a user.
        """
        if not isinstance(token, str) or not token or not _valid_user(user):
            raise ValueError("Invalid login response from server")

        self._state = SessionState(user={k: user[k] for k in _USER_KEYS}, token=token)
        self._storage.save({"user": self._state.user, "token": token})
        logger.info("session.logged_in", admin_id=user["id"])
        return self._state

    def logout(self) -> None:
        """Explicit sign-out."""
        self.clear()
        logger.info("session.logged_out")

    def clear(self) -> None:
        """Drop the session and its persisted copy unconditionally."""
        self._state = SessionState()
        self._storage.clear()
