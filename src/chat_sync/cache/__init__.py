"""Optimistic collection cache and the mutations built on it."""

from chat_sync.cache.collection import RemoteCollectionCache
from chat_sync.cache.coordinator import MutationCoordinator
from chat_sync.cache.ordering import sort_for_display

__all__ = ["MutationCoordinator", "RemoteCollectionCache", "sort_for_display"]
