"""Profile management: add, switch, default scopes, first-run bootstrap."""

import logging
from uuid import uuid4

from chat_sync.exceptions import ProfileError
from chat_sync.models.profile import Profile
from chat_sync.profiles.store import ProfileStore

logger = logging.getLogger(__name__)

DEFAULT_PROFILE_ID = "default"
DEFAULT_PROFILE_NAME = "Default Profile"


class ProfileManager:
    """Write operations over a ProfileStore."""

    def __init__(self, store: ProfileStore) -> None:
        self._store = store

    def ensure_initialized(self) -> None:
        """Bring the store into a usable state on first use.

        With no profiles and a legacy credential, a "Default Profile" is
        created from that credential and made active. With profiles but no
        active id, the first profile becomes active.
        """
        if not self._store.is_loaded:
            self._store.load()

        profiles = self._store.get()
        if not profiles:
            api_key = self._store.legacy_api_key
            if api_key:
                profile = Profile(
                    id=DEFAULT_PROFILE_ID,
                    name=DEFAULT_PROFILE_NAME,
                    api_key=api_key,
                    default_scope=self._store.legacy_default_scope,
                )
                self._store.set([profile])
                self._store.set_active_id(profile.id)
                logger.info("Created default profile from legacy credential")
        elif self._store.get_active_id() is None:
            self._store.set_active_id(profiles[0].id)
            logger.info(f"Activated first profile {profiles[0].id}")

    def add_profile(self, name: str, api_key: str) -> Profile:
        """Add a new profile; it becomes active if none is.

        Raises:
            ProfileError: If name or api_key is empty
        """
        if not name or not name.strip() or not api_key or not api_key.strip():
            raise ProfileError("Name and API key are required")

        profile = Profile(id=str(uuid4()), name=name.strip(), api_key=api_key.strip())
        self._store.set([*self._store.get(), profile])
        if not self._store.get_active_id():
            self._store.set_active_id(profile.id)
        logger.info(f"Added profile {profile.id} ({profile.name})")
        return profile

    def set_active(self, profile_id: str) -> Profile:
        """Switch the active profile.

        Raises:
            ProfileError: If no profile has that id
        """
        profile = self._find(profile_id)
        self._store.set_active_id(profile.id)
        logger.info(f"Active profile switched to {profile.id}")
        return profile

    def set_default_scope(
        self,
        profile_id: str,
        scope_id: str | None,
        scope_name: str | None = None,
    ) -> Profile:
        """Set or clear (scope_id=None) a profile's default scope."""
        profile = self._find(profile_id)
        updated = profile.model_copy(
            update={
                "default_scope": scope_id or None,
                "default_scope_name": scope_name if scope_id else None,
            }
        )
        self._store.set(
            [updated if p.id == profile_id else p for p in self._store.get()]
        )
        if scope_id:
            logger.info(f"Default scope for {profile_id} set to {scope_id}")
        else:
            logger.info(f"Default scope for {profile_id} removed")
        return updated

    def _find(self, profile_id: str) -> Profile:
        for profile in self._store.get():
            if profile.id == profile_id:
                return profile
        raise ProfileError(f"Unknown profile: {profile_id}")
