"""Project models."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class Project(BaseModel):
    """A remote project chats can be assigned to."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    id: str
    name: str
    vercel_project_id: str | None = Field(default=None, alias="vercelProjectId")


class FindProjectsResponse(BaseModel):
    """Wire shape of ``GET /projects``."""

    model_config = ConfigDict(extra="ignore")

    object: Literal["list"] = "list"
    data: list[Project] = Field(default_factory=list)


class AssignProjectResponse(BaseModel):
    """Wire shape of ``POST /projects/{id}/assign``."""

    model_config = ConfigDict(extra="ignore")

    id: str
    assigned: bool = False
