"""Display ordering for chat lists."""

from collections.abc import Iterable

from chat_sync.models.chat import ChatSummary


def _sort_key(item: ChatSummary) -> tuple[bool, bool, float]:
    updated = item.updated_at.timestamp() if item.updated_at else 0.0
    return (not item.favorite, item.updated_at is None, -updated)


def sort_for_display(items: Iterable[ChatSummary]) -> list[ChatSummary]:
    """Favorites first, then most recently updated; undated items last.

    Ties keep their original relative order.
    """
    return sorted(items, key=_sort_key)
