"""Chat models - the items held in a collection snapshot.

The remote service returns loosely-shaped chat objects (optional fields,
deprecated aliases, nested version info). These models validate that shape
once, at the transport boundary, so the rest of the package can rely on
plain typed attributes.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

MAX_MESSAGE_LENGTH = 10_000


class Privacy(str, Enum):
    """Visibility of a chat."""
    PUBLIC = "public"
    PRIVATE = "private"
    TEAM = "team"
    TEAM_EDIT = "team-edit"
    UNLISTED = "unlisted"


class VersionStatus(str, Enum):
    """Generation status of a chat's latest version."""
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class ChatSummary(BaseModel):
    """A chat as it appears in the collection list."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    id: str
    favorite: bool = False
    privacy: Privacy = Privacy.PRIVATE
    project_id: str | None = Field(default=None, alias="projectId")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")
    latest_version_status: VersionStatus | None = Field(
        default=None, alias="latestVersionStatus"
    )
    name: str | None = None
    author_id: str | None = Field(default=None, alias="authorId")

    @model_validator(mode="before")
    @classmethod
    def _normalize_wire_shape(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        # "title" is the deprecated spelling of "name"
        if data.get("name") is None and data.get("title") is not None:
            data["name"] = data["title"]
        latest = data.get("latestVersion")
        if isinstance(latest, dict) and "latestVersionStatus" not in data:
            data["latestVersionStatus"] = latest.get("status")
        return data

    @property
    def display_title(self) -> str:
        return self.name or "Untitled Chat"


class FindChatsResponse(BaseModel):
    """Wire shape of ``GET /chats``."""

    model_config = ConfigDict(extra="ignore")

    object: Literal["list"] = "list"
    data: list[ChatSummary] = Field(default_factory=list)


class ChatReference(BaseModel):
    """Wire shape of responses where only the returned chat id matters.

    Used for ``POST /chats/{id}/fork`` and ``POST /chats``.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    url: str | None = None


class DeleteChatResponse(BaseModel):
    """Wire shape of ``DELETE /chats/{id}``."""

    model_config = ConfigDict(extra="ignore")

    id: str
    deleted: bool = True


class ChatMessage(BaseModel):
    """One entry in a chat's message history."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    id: str
    content: str = ""
    created_at: datetime | None = Field(default=None, alias="createdAt")
    type: str = "message"

    @property
    def is_user_message(self) -> bool:
        # Only "message" entries are written by the user
        return self.type == "message"


class ChatDetail(ChatSummary):
    """Wire shape of ``GET /chats/{id}``: the summary plus its history."""

    url: str | None = None
    text: str | None = None
    messages: list[ChatMessage] = Field(default_factory=list)


class ModelConfiguration(BaseModel):
    """Optional generation settings sent with a message."""

    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    model_id: str | None = Field(default=None, alias="modelId")
    image_generations: bool | None = Field(default=None, alias="imageGenerations")
    thinking: bool | None = None


class CreateChatRequest(BaseModel):
    """Body of ``POST /chats``."""

    model_config = ConfigDict(populate_by_name=True)

    message: str = Field(min_length=1, max_length=MAX_MESSAGE_LENGTH)
    system: str | None = None
    chat_privacy: Privacy | None = Field(default=None, alias="chatPrivacy")
    project_id: str | None = Field(default=None, alias="projectId")


class CreateMessageRequest(BaseModel):
    """Body of ``POST /chats/{id}/messages``."""

    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    message: str = Field(min_length=1, max_length=MAX_MESSAGE_LENGTH)
    model_configuration: ModelConfiguration | None = Field(
        default=None, alias="modelConfiguration"
    )
