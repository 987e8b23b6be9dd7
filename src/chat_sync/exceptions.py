"""Custom exceptions for chat-sync."""


class ChatSyncError(Exception):
    """Base class for all chat-sync errors."""


class NotAuthenticatedError(ChatSyncError):
    """Raised when no credential can be resolved for a request."""

    def __init__(self, message: str = "No API key available for the active identity") -> None:
        super().__init__(message)


class NotLoadedError(ChatSyncError):
    """Raised when a mutation is attempted before the collection has loaded."""

    def __init__(self, message: str = "Collection has not been loaded yet") -> None:
        super().__init__(message)


class RemoteFailureError(ChatSyncError):
    """Raised when the remote service rejects a request or cannot be reached.

    ``status`` is the HTTP status code, or None when no response was received
    (timeout, connection error).
    """

    def __init__(self, status: int | None, message: str | None = None) -> None:
        self.status = status
        self.message = message
        if status is None:
            text = message or "Remote service unreachable"
        else:
            text = f"HTTP {status}: {message}" if message else f"HTTP {status}"
        super().__init__(text)


class ResponseValidationError(RemoteFailureError):
    """Raised when a successful response body does not match the expected schema."""

    def __init__(self, status: int, message: str) -> None:
        super().__init__(status, f"Invalid response body: {message}")


class StaleResponseError(ChatSyncError):
    """Raised internally when a load response arrives for a key no longer active."""

    def __init__(self, key: object) -> None:
        self.key = key
        super().__init__(f"Discarding stale response for {key}")


class ItemNotFoundError(ChatSyncError):
    """Raised when a mutation targets an item missing from the snapshot."""

    def __init__(self, item_id: str) -> None:
        self.item_id = item_id
        super().__init__(f"Item {item_id} is not in the current snapshot")


class ProfileError(ChatSyncError):
    """Raised for invalid profile operations (duplicates, unknown ids, empty fields)."""
