"""Durable storage of credential profiles and the active profile id.

The store is process-wide state with an explicit lifecycle: call ``load()``
once at start-up, and every write is persisted immediately. The legacy
single credential (from settings) is exposed alongside but never written.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from pydantic import ValidationError

from chat_sync.config import Settings, get_settings
from chat_sync.exceptions import ProfileError
from chat_sync.models.profile import Profile

logger = logging.getLogger(__name__)


def _atomic_write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(f".{path.name}.tmp-{os.getpid()}")
    try:
        with open(tmp_path, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink()


class ProfileStore:
    """JSON-file backed profile list plus active profile id."""

    def __init__(
        self,
        path: Path | None = None,
        settings: Settings | None = None,
    ) -> None:
        settings = settings or get_settings()
        self._path = Path(path) if path is not None else settings.profile_store_path
        self._legacy_api_key = settings.api_key or None
        self._legacy_default_scope = settings.default_scope or None
        self._profiles: list[Profile] = []
        self._active_id: str | None = None
        self._loaded = False

    @property
    def path(self) -> Path:
        return self._path

    @property
    def is_loaded(self) -> bool:
        """Whether the initial load from disk has completed."""
        return self._loaded

    @property
    def legacy_api_key(self) -> str | None:
        return self._legacy_api_key

    @property
    def legacy_default_scope(self) -> str | None:
        return self._legacy_default_scope

    def load(self) -> None:
        """Read profiles from disk.

        A missing file is an empty store. A corrupt file is logged and
        treated as empty rather than aborting start-up.
        """
        self._profiles = []
        self._active_id = None

        if self._path.exists():
            try:
                raw = json.loads(self._path.read_text(encoding="utf-8"))
                self._profiles = [
                    Profile.model_validate(p) for p in raw.get("profiles", [])
                ]
                self._active_id = raw.get("activeProfileId") or None
            except (OSError, ValueError, AttributeError, ValidationError) as e:
                logger.error(f"Failed to parse profiles from {self._path}: {e}")
                self._profiles = []
                self._active_id = None

        self._loaded = True
        logger.debug(f"Loaded {len(self._profiles)} profiles from {self._path}")

    def get(self) -> list[Profile]:
        """Return a copy of the stored profile list."""
        return [p.model_copy() for p in self._profiles]

    def set(self, profiles: list[Profile]) -> None:
        """Replace the stored profile list and persist it.

        Raises:
            ProfileError: If two profiles share an id
        """
        ids = [p.id for p in profiles]
        duplicates = {i for i in ids if ids.count(i) > 1}
        if duplicates:
            raise ProfileError(f"Duplicate profile ids: {sorted(duplicates)}")
        self._profiles = [p.model_copy() for p in profiles]
        self._persist()

    def get_active_id(self) -> str | None:
        return self._active_id

    def set_active_id(self, profile_id: str | None) -> None:
        self._active_id = profile_id
        self._persist()

    def _persist(self) -> None:
        payload = {
            "profiles": [p.model_dump(by_alias=True) for p in self._profiles],
            "activeProfileId": self._active_id,
        }
        _atomic_write_text(self._path, json.dumps(payload, indent=2))
