"""Credential profile models."""

import hashlib

from pydantic import BaseModel, ConfigDict, Field


class Profile(BaseModel):
    """A stored credential identity the user can switch between."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    api_key: str = Field(alias="apiKey")
    default_scope: str | None = Field(default=None, alias="defaultScope")
    default_scope_name: str | None = Field(default=None, alias="defaultScopeName")


class ActiveIdentity(BaseModel):
    """The credential and default scope in effect for outgoing requests.

    Derived from the profile store on every resolution; never persisted.
    """

    model_config = ConfigDict(frozen=True)

    api_key: str | None = None
    default_scope: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.api_key is not None

    @property
    def fingerprint(self) -> str | None:
        """Short stable digest of the API key, safe to use in cache keys and logs."""
        if self.api_key is None:
            return None
        return hashlib.sha256(self.api_key.encode("utf-8")).hexdigest()[:12]
