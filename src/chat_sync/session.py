"""Wiring of the sync components into one session object."""

import logging

from chat_sync.cache.collection import RemoteCollectionCache
from chat_sync.cache.coordinator import MutationCoordinator
from chat_sync.catalog.projects import ProjectCatalog
from chat_sync.catalog.scopes import ScopeCatalog
from chat_sync.models.snapshot import CollectionSnapshot
from chat_sync.profiles.manager import ProfileManager
from chat_sync.profiles.resolver import CredentialResolver
from chat_sync.profiles.store import ProfileStore
from chat_sync.transport import Transport

logger = logging.getLogger(__name__)

_profile_store: ProfileStore | None = None

# open() argument meaning "the identity's default scope"
DEFAULT_SCOPE = object()


def get_profile_store() -> ProfileStore:
    """Get or create the process-wide profile store, loading it on first use."""
    global _profile_store
    if _profile_store is None:
        _profile_store = ProfileStore()
        _profile_store.load()
    return _profile_store


class SyncSession:
    """Everything a presentation layer needs, built around one profile store."""

    def __init__(
        self,
        store: ProfileStore | None = None,
        transport: Transport | None = None,
    ) -> None:
        self.store = store or get_profile_store()
        self.transport = transport or Transport()
        self.profiles = ProfileManager(self.store)
        self.resolver = CredentialResolver(self.store)
        self.scopes = ScopeCatalog(self.transport)
        self.projects = ProjectCatalog(self.transport)
        self.chats = RemoteCollectionCache(self.transport)
        self.mutations = MutationCoordinator(self.chats, self.transport, self.projects)

    async def open(self, scope: str | None | object = DEFAULT_SCOPE) -> CollectionSnapshot | None:
        """Load chats for the active identity.

        Uses the identity's default scope unless a scope is given; pass None
        to load across all scopes. Returns None without any request while
        the store is still loading or no credential is available.
        """
        if not self.resolver.is_ready():
            return None
        identity = self.resolver.resolve()
        if not identity.is_authenticated:
            logger.info("No credential available; not loading chats")
            return None
        if scope is DEFAULT_SCOPE:
            scope = identity.default_scope
        return await self.chats.load(identity, scope)

    async def switch_profile(self, profile_id: str) -> CollectionSnapshot | None:
        """Activate another profile and reload chats under its default scope."""
        self.profiles.set_active(profile_id)
        return await self.open()

    async def switch_scope(self, scope: str | None) -> CollectionSnapshot | None:
        """Reload chats for the active identity under another scope.

        Raises:
            NotAuthenticatedError: If no credential is available
        """
        identity = self.resolver.require()
        return await self.chats.load(identity, scope)

    async def close(self) -> None:
        await self.transport.aclose()
