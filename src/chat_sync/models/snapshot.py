"""Collection snapshot models."""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from chat_sync.exceptions import ItemNotFoundError
from chat_sync.models.chat import ChatSummary


class CacheKey(BaseModel):
    """Identifies one cached collection: whose credential, which scope."""

    model_config = ConfigDict(frozen=True)

    identity: str  # API key fingerprint, never the raw key
    scope: str | None = None

    def __str__(self) -> str:
        return f"{self.identity}/{self.scope or '*'}"


class CollectionSnapshot(BaseModel):
    """Point-in-time materialization of the remote chat list for one key.

    Snapshots are immutable; every edit returns a new snapshot.
    """

    model_config = ConfigDict(frozen=True)

    key: CacheKey
    items: tuple[ChatSummary, ...] = ()
    fetched_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_validator("items")
    @classmethod
    def _ids_unique(cls, items: tuple[ChatSummary, ...]) -> tuple[ChatSummary, ...]:
        seen: set[str] = set()
        for item in items:
            if item.id in seen:
                raise ValueError(f"duplicate item id {item.id!r}")
            seen.add(item.id)
        return items

    def ids(self) -> list[str]:
        return [item.id for item in self.items]

    def get(self, item_id: str) -> ChatSummary | None:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def require(self, item_id: str) -> ChatSummary:
        item = self.get(item_id)
        if item is None:
            raise ItemNotFoundError(item_id)
        return item

    def without(self, item_id: str) -> "CollectionSnapshot":
        """Return a copy with the item removed (no-op if absent)."""
        return self.model_copy(
            update={"items": tuple(i for i in self.items if i.id != item_id)}
        )

    def replace_item(self, item_id: str, **changes) -> "CollectionSnapshot":
        """Return a copy with fields of one item replaced (no-op if absent)."""
        return self.model_copy(
            update={
                "items": tuple(
                    i.model_copy(update=changes) if i.id == item_id else i
                    for i in self.items
                )
            }
        )
