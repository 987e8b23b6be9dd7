"""Resolve which credential and default scope are in effect."""

import logging

from chat_sync.exceptions import NotAuthenticatedError
from chat_sync.models.profile import ActiveIdentity
from chat_sync.profiles.store import ProfileStore

logger = logging.getLogger(__name__)


class CredentialResolver:
    """Read-only view over a ProfileStore yielding the active identity.

    Precedence:
    1. The active profile, when its id is set and the profile exists.
    2. The legacy single credential. Its default scope only applies when no
       active profile id was ever set.
    3. Nothing: the identity is unauthenticated.
    """

    def __init__(self, store: ProfileStore) -> None:
        self._store = store

    def is_ready(self) -> bool:
        return self._store.is_loaded

    def resolve(self) -> ActiveIdentity:
        active_id = self._store.get_active_id()
        api_key: str | None = None
        default_scope: str | None = None

        if active_id:
            profile = next(
                (p for p in self._store.get() if p.id == active_id), None
            )
            if profile is not None and profile.api_key:
                api_key = profile.api_key
                default_scope = profile.default_scope or None
            else:
                logger.debug(f"Active profile {active_id} not usable, falling back")

        if api_key is None:
            api_key = self._store.legacy_api_key
            if not active_id:
                default_scope = self._store.legacy_default_scope

        return ActiveIdentity(api_key=api_key, default_scope=default_scope)

    def require(self) -> ActiveIdentity:
        """Resolve, raising if no credential is available."""
        identity = self.resolve()
        if not identity.is_authenticated:
            raise NotAuthenticatedError()
        return identity
