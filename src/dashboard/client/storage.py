"""Persistence back-ends for the client session.

Both back-ends keep a single JSON object under the ``"auth"`` key holding
``{"user": {...}, "token": "..."}``.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Protocol

import structlog

logger = structlog.get_logger(__name__)

STORAGE_KEY = "auth"


class SessionStorage(Protocol):
    """Storage contract used by SessionStore."""

    def load(self) -> Any: ...

    def save(self, value: dict) -> None: ...

    def clear(self) -> None: ...


class MemorySessionStorage:
    """Process-local storage, used by tests and embedded clients."""

    def __init__(self, initial: Any = None) -> None:
        self._data: dict[str, Any] = {}
        if initial is not None:
            self._data[STORAGE_KEY] = initial

    def load(self) -> Any:
        return self._data.get(STORAGE_KEY)

    def save(self, value: dict) -> None:
        self._data[STORAGE_KEY] = value

    def clear(self) -> None:
        self._data.pop(STORAGE_KEY, None)


class FileSessionStorage:
    """JSON file storage (default ``~/.dashboard/session.json``).

    A missing or unreadable file loads as no session. The file is written
    with owner-only permissions since it holds a bearer token.

    Args:
        path: File location; ``~`` is expanded.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path).expanduser()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Any:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError:
            logger.warning("session_storage.read_failed", path=str(self._path), exc_info=True)
            return None

        try:
            document = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("session_storage.corrupt_file", path=str(self._path))
            return None

        if not isinstance(document, dict):
            return None
        return document.get(STORAGE_KEY)

    def save(self, value: dict) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps({STORAGE_KEY: value}), encoding="utf-8")
        os.chmod(self._path, 0o600)

    def clear(self) -> None:
        self._path.unlink(missing_ok=True)
