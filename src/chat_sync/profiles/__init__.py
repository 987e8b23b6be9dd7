"""Credential profiles: storage, resolution and management."""

from chat_sync.profiles.manager import ProfileManager
from chat_sync.profiles.resolver import CredentialResolver
from chat_sync.profiles.store import ProfileStore

__all__ = ["CredentialResolver", "ProfileManager", "ProfileStore"]
