"""Scope (sub-tenant) models."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class Scope(BaseModel):
    """A sub-tenant qualifier narrowing which remote resources a request sees."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    name: str | None = None

    @property
    def display_name(self) -> str:
        return self.name or "Untitled Scope"


class FindScopesResponse(BaseModel):
    """Wire shape of ``GET /user/scopes``."""

    model_config = ConfigDict(extra="ignore")

    object: Literal["list"] = "list"
    data: list[Scope] = Field(default_factory=list)


class ScopeListing(BaseModel):
    """Result of a scope catalog lookup.

    ``ready`` is False when no credential was available and nothing was fetched.
    """

    scopes: list[Scope] = Field(default_factory=list)
    ready: bool = True
