"""Pydantic models for chat-sync."""

from chat_sync.models.chat import (
    MAX_MESSAGE_LENGTH,
    ChatDetail,
    ChatMessage,
    ChatReference,
    ChatSummary,
    CreateChatRequest,
    CreateMessageRequest,
    DeleteChatResponse,
    FindChatsResponse,
    ModelConfiguration,
    Privacy,
    VersionStatus,
)
from chat_sync.models.outcome import MutationKind, MutationOutcome
from chat_sync.models.profile import ActiveIdentity, Profile
from chat_sync.models.project import (
    AssignProjectResponse,
    FindProjectsResponse,
    Project,
)
from chat_sync.models.scope import FindScopesResponse, Scope, ScopeListing
from chat_sync.models.snapshot import CacheKey, CollectionSnapshot

__all__ = [
    "MAX_MESSAGE_LENGTH",
    "ChatDetail",
    "ChatMessage",
    "ChatReference",
    "ChatSummary",
    "CreateChatRequest",
    "CreateMessageRequest",
    "DeleteChatResponse",
    "FindChatsResponse",
    "ModelConfiguration",
    "Privacy",
    "VersionStatus",
    "MutationKind",
    "MutationOutcome",
    "ActiveIdentity",
    "Profile",
    "AssignProjectResponse",
    "FindProjectsResponse",
    "Project",
    "FindScopesResponse",
    "Scope",
    "ScopeListing",
    "CacheKey",
    "CollectionSnapshot",
]
