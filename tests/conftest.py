"""Global test configuration for chat-sync."""

import os

import pytest


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch, tmp_path):
    """Strip CHAT_SYNC_* variables and point the profile store at tmp_path.

    Keeps tests independent of the developer's environment and real
    profile file. Clears the get_settings cache before and after.
    """
    for key in list(os.environ):
        if key.upper().startswith("CHAT_SYNC_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("CHAT_SYNC_PROFILE_STORE_PATH", str(tmp_path / "profiles.json"))

    from chat_sync import session
    from chat_sync.config import get_settings

    get_settings.cache_clear()
    monkeypatch.setattr(session, "_profile_store", None)

    yield

    get_settings.cache_clear()
