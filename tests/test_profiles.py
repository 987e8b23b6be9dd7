"""Tests for profile storage, credential resolution and profile management."""

import json

import pytest

from chat_sync.config import Settings
from chat_sync.exceptions import NotAuthenticatedError, ProfileError
from chat_sync.models import ActiveIdentity, Profile
from chat_sync.profiles import CredentialResolver, ProfileManager, ProfileStore
from chat_sync.profiles.manager import DEFAULT_PROFILE_ID


def _make_store(tmp_path, api_key=None, default_scope=None) -> ProfileStore:
    settings = Settings(
        api_key=api_key,
        default_scope=default_scope,
        profile_store_path=tmp_path / "profiles.json",
    )
    store = ProfileStore(settings=settings)
    store.load()
    return store


def _profile(pid: str, api_key: str, scope: str | None = None) -> Profile:
    return Profile(id=pid, name=f"Profile {pid}", api_key=api_key, default_scope=scope)


class TestProfileStore:
    """Tests for ProfileStore persistence."""

    def test_missing_file_is_empty(self, tmp_path):
        store = _make_store(tmp_path)
        assert store.is_loaded is True
        assert store.get() == []
        assert store.get_active_id() is None

    def test_not_loaded_until_load(self, tmp_path):
        store = ProfileStore(path=tmp_path / "p.json")
        assert store.is_loaded is False

    def test_round_trip_through_disk(self, tmp_path):
        store = _make_store(tmp_path)
        store.set([_profile("p1", "k1", "s1")])
        store.set_active_id("p1")

        reopened = _make_store(tmp_path)
        assert reopened.get_active_id() == "p1"
        assert reopened.get()[0].api_key == "k1"
        assert reopened.get()[0].default_scope == "s1"

    def test_file_uses_camel_case(self, tmp_path):
        store = _make_store(tmp_path)
        store.set([_profile("p1", "k1")])
        raw = json.loads(store.path.read_text())
        assert raw["profiles"][0]["apiKey"] == "k1"
        assert "activeProfileId" in raw

    def test_duplicate_ids_rejected(self, tmp_path):
        store = _make_store(tmp_path)
        with pytest.raises(ProfileError):
            store.set([_profile("p1", "k1"), _profile("p1", "k2")])
        assert store.get() == []

    def test_corrupt_file_treated_as_empty(self, tmp_path):
        (tmp_path / "profiles.json").write_text("{not json")
        store = _make_store(tmp_path)
        assert store.is_loaded is True
        assert store.get() == []

    def test_get_returns_copies(self, tmp_path):
        store = _make_store(tmp_path)
        store.set([_profile("p1", "k1")])
        store.get()[0].name = "changed"
        assert store.get()[0].name == "Profile p1"

    def test_legacy_credential(self, tmp_path):
        store = _make_store(tmp_path, api_key="k0", default_scope="s0")
        assert store.legacy_api_key == "k0"
        assert store.legacy_default_scope == "s0"


class TestCredentialResolver:
    """Tests for the resolution precedence."""

    def test_active_profile_wins_over_legacy(self, tmp_path):
        store = _make_store(tmp_path, api_key="k0", default_scope="s0")
        store.set([_profile("p1", "k1", "s1")])
        store.set_active_id("p1")

        identity = CredentialResolver(store).resolve()
        assert identity == ActiveIdentity(api_key="k1", default_scope="s1")

    def test_legacy_fallback_with_no_profiles(self, tmp_path):
        store = _make_store(tmp_path, api_key="k0", default_scope="s0")

        identity = CredentialResolver(store).resolve()
        assert identity == ActiveIdentity(api_key="k0", default_scope="s0")

    def test_missing_active_profile_uses_legacy_key_without_scope(self, tmp_path):
        store = _make_store(tmp_path, api_key="k0", default_scope="s0")
        store.set([_profile("p1", "k1", "s1")])
        store.set_active_id("gone")

        identity = CredentialResolver(store).resolve()
        assert identity.api_key == "k0"
        assert identity.default_scope is None

    def test_active_profile_without_scope(self, tmp_path):
        store = _make_store(tmp_path, api_key="k0", default_scope="s0")
        store.set([_profile("p1", "k1")])
        store.set_active_id("p1")

        identity = CredentialResolver(store).resolve()
        assert identity == ActiveIdentity(api_key="k1", default_scope=None)

    def test_nothing_available(self, tmp_path):
        store = _make_store(tmp_path)
        resolver = CredentialResolver(store)

        identity = resolver.resolve()
        assert identity.api_key is None
        assert identity.is_authenticated is False
        with pytest.raises(NotAuthenticatedError):
            resolver.require()

    def test_is_ready_tracks_store_load(self, tmp_path):
        store = ProfileStore(path=tmp_path / "p.json")
        resolver = CredentialResolver(store)
        assert resolver.is_ready() is False
        store.load()
        assert resolver.is_ready() is True

    def test_resolution_follows_store_changes(self, tmp_path):
        store = _make_store(tmp_path)
        resolver = CredentialResolver(store)
        store.set([_profile("p1", "k1"), _profile("p2", "k2", "s2")])

        store.set_active_id("p1")
        assert resolver.resolve().api_key == "k1"
        store.set_active_id("p2")
        assert resolver.resolve() == ActiveIdentity(api_key="k2", default_scope="s2")


class TestProfileManager:
    """Tests for ProfileManager."""

    def test_bootstrap_from_legacy(self, tmp_path):
        store = _make_store(tmp_path, api_key="k0", default_scope="s0")
        ProfileManager(store).ensure_initialized()

        profiles = store.get()
        assert len(profiles) == 1
        assert profiles[0].id == DEFAULT_PROFILE_ID
        assert profiles[0].name == "Default Profile"
        assert profiles[0].default_scope == "s0"
        assert store.get_active_id() == DEFAULT_PROFILE_ID

    def test_bootstrap_without_legacy_does_nothing(self, tmp_path):
        store = _make_store(tmp_path)
        ProfileManager(store).ensure_initialized()
        assert store.get() == []
        assert store.get_active_id() is None

    def test_bootstrap_activates_first_profile(self, tmp_path):
        store = _make_store(tmp_path)
        store.set([_profile("p1", "k1"), _profile("p2", "k2")])
        ProfileManager(store).ensure_initialized()
        assert store.get_active_id() == "p1"

    def test_bootstrap_loads_store(self, tmp_path):
        store = ProfileStore(path=tmp_path / "p.json", settings=Settings(api_key="k0"))
        ProfileManager(store).ensure_initialized()
        assert store.is_loaded is True
        assert store.get_active_id() == DEFAULT_PROFILE_ID

    def test_add_profile(self, tmp_path):
        store = _make_store(tmp_path)
        manager = ProfileManager(store)

        first = manager.add_profile("Work", "k1")
        second = manager.add_profile("Personal", "k2")

        assert first.id != second.id
        assert [p.name for p in store.get()] == ["Work", "Personal"]
        assert store.get_active_id() == first.id

    @pytest.mark.parametrize("name,api_key", [("", "k1"), ("Work", ""), ("   ", "k1")])
    def test_add_profile_requires_fields(self, tmp_path, name, api_key):
        manager = ProfileManager(_make_store(tmp_path))
        with pytest.raises(ProfileError):
            manager.add_profile(name, api_key)

    def test_set_active(self, tmp_path):
        store = _make_store(tmp_path)
        manager = ProfileManager(store)
        manager.add_profile("Work", "k1")
        personal = manager.add_profile("Personal", "k2")

        manager.set_active(personal.id)
        assert CredentialResolver(store).resolve().api_key == "k2"

    def test_set_active_unknown(self, tmp_path):
        with pytest.raises(ProfileError):
            ProfileManager(_make_store(tmp_path)).set_active("nope")

    def test_set_and_clear_default_scope(self, tmp_path):
        store = _make_store(tmp_path)
        manager = ProfileManager(store)
        profile = manager.add_profile("Work", "k1")

        updated = manager.set_default_scope(profile.id, "team-1", "Team One")
        assert updated.default_scope == "team-1"
        assert store.get()[0].default_scope_name == "Team One"
        assert CredentialResolver(store).resolve().default_scope == "team-1"

        cleared = manager.set_default_scope(profile.id, None)
        assert cleared.default_scope is None
        assert cleared.default_scope_name is None
