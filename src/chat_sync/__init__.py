"""chat-sync - client-side sync layer for remote chat collections."""

__version__ = "0.1.0"

from chat_sync.exceptions import (
    ChatSyncError,
    ItemNotFoundError,
    NotAuthenticatedError,
    NotLoadedError,
    ProfileError,
    RemoteFailureError,
    ResponseValidationError,
    StaleResponseError,
)

__all__ = [
    "__version__",
    "ChatSyncError",
    "ItemNotFoundError",
    "NotAuthenticatedError",
    "NotLoadedError",
    "ProfileError",
    "RemoteFailureError",
    "ResponseValidationError",
    "StaleResponseError",
]
