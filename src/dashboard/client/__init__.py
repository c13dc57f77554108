"""Python client for the dashboard API.

Session state (persisted bearer token and administrator), an authenticated
HTTP client, list views that reconcile local state after server confirmation,
and the ``dashboard`` terminal front-end built on them.
"""

from src.dashboard.client.http import ApiError, DashboardClient
from src.dashboard.client.session import SessionState, SessionStore
from src.dashboard.client.storage import FileSessionStorage, MemorySessionStorage
from src.dashboard.client.views import ContactsView, DealContactsView

__all__ = [
    "ApiError",
    "ContactsView",
    "DashboardClient",
    "DealContactsView",
    "FileSessionStorage",
    "MemorySessionStorage",
    "SessionState",
    "SessionStore",
]
