"""Mutation outcome models."""

from enum import Enum

from pydantic import BaseModel


class MutationKind(str, Enum):
    """Named mutation operations."""
    DELETE = "delete"
    FAVORITE = "favorite"
    FORK = "fork"
    ASSIGN_PROJECT = "assign_project"
    SET_PRIVACY = "set_privacy"
    CREATE_CHAT = "create_chat"
    SEND_MESSAGE = "send_message"


class MutationOutcome(BaseModel):
    """Result of a coordinated mutation, for presentation."""

    operation: MutationKind
    item_id: str | None = None  # None when a create fails before an id exists
    success: bool
    error: str | None = None
    status: int | None = None  # HTTP status of a remote failure
    result_id: str | None = None  # e.g. the new chat id after a fork
