"""Named chat mutations built on the cache's optimistic-mutate primitive.

Each operation pairs a remote call with the local transform that predicts
its effect. Remote failures come back as unsuccessful outcomes (the cache
has already rolled the transform back); local precondition failures such
as NotLoadedError or NotAuthenticatedError are raised before any request.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable

from chat_sync.cache.collection import RemoteCollectionCache, Transform
from chat_sync.catalog.projects import ProjectCatalog
from chat_sync.exceptions import (
    NotAuthenticatedError,
    NotLoadedError,
    RemoteFailureError,
)
from chat_sync.models.chat import (
    ChatDetail,
    ChatReference,
    ChatSummary,
    CreateChatRequest,
    CreateMessageRequest,
    DeleteChatResponse,
    ModelConfiguration,
    Privacy,
)
from chat_sync.models.outcome import MutationKind, MutationOutcome
from chat_sync.models.profile import ActiveIdentity
from chat_sync.models.project import AssignProjectResponse
from chat_sync.models.snapshot import CollectionSnapshot
from chat_sync.transport import Transport, parse_response

logger = logging.getLogger(__name__)


class MutationCoordinator:
    """Writes against the chat collection, plus the single-chat detail read."""

    def __init__(
        self,
        cache: RemoteCollectionCache,
        transport: Transport,
        projects: ProjectCatalog | None = None,
    ) -> None:
        self._cache = cache
        self._transport = transport
        self._projects = projects

    async def delete(self, item_id: str) -> MutationOutcome:
        """Remove a chat; it disappears from the snapshot immediately."""
        identity = self._preflight(item_id)

        async def remote() -> Any:
            payload = await self._request(identity, "DELETE", f"/chats/{item_id}")
            if payload is None:
                return None
            response = parse_response(DeleteChatResponse, payload)
            if not response.deleted:
                raise RemoteFailureError(None, "Chat deletion was not confirmed")
            return response

        return await self._run(
            MutationKind.DELETE,
            item_id,
            remote,
            lambda snapshot: snapshot.without(item_id),
        )

    async def favorite(self, item_id: str, value: bool = True) -> MutationOutcome:
        """Set or clear a chat's favorite flag."""
        identity = self._preflight(item_id)

        async def remote() -> Any:
            return await self._request(
                identity,
                "PUT",
                f"/chats/{item_id}/favorite",
                json={"isFavorite": value},
            )

        return await self._run(
            MutationKind.FAVORITE,
            item_id,
            remote,
            lambda snapshot: snapshot.replace_item(item_id, favorite=value),
        )

    async def unfavorite(self, item_id: str) -> MutationOutcome:
        return await self.favorite(item_id, False)

    async def fork(self, item_id: str) -> MutationOutcome:
        """Fork a chat into a new one.

        The source collection is left untouched; on success ``result_id``
        holds the new chat's id.
        """
        identity = self._preflight(item_id)
        try:
            payload = await self._request(identity, "POST", f"/chats/{item_id}/fork")
            forked = parse_response(ChatReference, payload)
        except RemoteFailureError as e:
            logger.warning(f"Fork of chat {item_id} failed: {e}")
            return _failure(MutationKind.FORK, item_id, e)

        logger.info(f"Forked chat {item_id} -> {forked.id}")
        return MutationOutcome(
            operation=MutationKind.FORK,
            item_id=item_id,
            success=True,
            result_id=forked.id,
        )

    async def assign_project(self, item_id: str, project_id: str) -> MutationOutcome:
        """Assign a chat to a project.

        Raises:
            NotAuthenticatedError: If no identity is resolved
        """
        self._require_identity()
        identity = self._preflight(item_id)

        async def remote() -> Any:
            payload = await self._request(
                identity,
                "POST",
                f"/projects/{project_id}/assign",
                json={"chatId": item_id},
            )
            response = parse_response(AssignProjectResponse, payload)
            if not response.assigned:
                raise RemoteFailureError(None, "Project assignment was not confirmed")
            return response

        return await self._run(
            MutationKind.ASSIGN_PROJECT,
            item_id,
            remote,
            lambda snapshot: snapshot.replace_item(item_id, project_id=project_id),
            result_id=project_id,
        )

    async def create_project_and_assign(
        self,
        item_id: str,
        name: str,
        description: str | None = None,
    ) -> MutationOutcome:
        """Create a new project, then assign the chat to it."""
        if self._projects is None:
            raise RuntimeError("No project catalog configured")
        identity = self._preflight(item_id)
        try:
            project = await self._projects.create(
                identity, name, description, scope=self._cache.scope
            )
        except RemoteFailureError as e:
            logger.warning(f"Creating project {name!r} failed: {e}")
            return _failure(MutationKind.ASSIGN_PROJECT, item_id, e)
        return await self.assign_project(item_id, project.id)

    async def set_privacy(self, item_id: str, privacy: Privacy | str) -> MutationOutcome:
        """Change a chat's visibility; the server's copy is merged back."""
        privacy = Privacy(privacy)
        identity = self._preflight(item_id)

        async def remote() -> Any:
            payload = await self._request(
                identity,
                "PATCH",
                f"/chats/{item_id}",
                json={"privacy": privacy.value},
            )
            if isinstance(payload, dict) and payload.get("id") == item_id:
                return parse_response(ChatSummary, payload)
            return None

        def merge(snapshot: CollectionSnapshot, updated: ChatSummary | None) -> CollectionSnapshot:
            if updated is None:
                return snapshot
            changes: dict[str, Any] = {"privacy": updated.privacy}
            if updated.updated_at is not None:
                changes["updated_at"] = updated.updated_at
            return snapshot.replace_item(item_id, **changes)

        return await self._run(
            MutationKind.SET_PRIVACY,
            item_id,
            remote,
            lambda snapshot: snapshot.replace_item(item_id, privacy=privacy),
            merge_result=merge,
        )

    async def create_chat(
        self,
        message: str,
        privacy: Privacy | str | None = None,
        system: str | None = None,
        project_id: str | None = None,
    ) -> MutationOutcome:
        """Start a new chat from a first message, then reload the collection.

        The server assigns the id, name and timestamps, so nothing is applied
        optimistically; the chat appears once the reload lands. On success
        ``result_id`` holds the new chat's id.

        Raises:
            NotAuthenticatedError: If no identity is resolved
            ValueError: If the message is empty or too long, or the privacy
                value is unknown
        """
        identity = self._require_identity()
        body = CreateChatRequest(
            message=message,
            system=system or None,
            chat_privacy=Privacy(privacy) if privacy is not None else None,
            project_id=project_id,
        )
        try:
            payload = await self._request(
                identity,
                "POST",
                "/chats",
                json=body.model_dump(mode="json", by_alias=True, exclude_none=True),
            )
            created = parse_response(ChatReference, payload)
        except RemoteFailureError as e:
            logger.warning(f"Creating chat failed: {e}")
            return _failure(MutationKind.CREATE_CHAT, None, e)

        logger.info(f"Created chat {created.id}")
        await self._reload()
        return MutationOutcome(
            operation=MutationKind.CREATE_CHAT,
            item_id=created.id,
            success=True,
            result_id=created.id,
        )

    async def send_message(
        self,
        item_id: str,
        message: str,
        model_id: str | None = None,
        image_generations: bool | None = None,
        thinking: bool | None = None,
    ) -> MutationOutcome:
        """Send a follow-up message to a chat, then reload the collection.

        The reply changes the chat's timestamp and version status on the
        server, which the reload picks up.

        Raises:
            ValueError: If the message is empty or too long
        """
        identity = self._preflight(item_id)
        config = None
        if (model_id, image_generations, thinking) != (None, None, None):
            config = ModelConfiguration(
                model_id=model_id,
                image_generations=image_generations,
                thinking=thinking,
            )
        body = CreateMessageRequest(message=message, model_configuration=config)
        try:
            await self._request(
                identity,
                "POST",
                f"/chats/{item_id}/messages",
                json=body.model_dump(mode="json", by_alias=True, exclude_none=True),
            )
        except RemoteFailureError as e:
            logger.warning(f"Sending message to chat {item_id} failed: {e}")
            return _failure(MutationKind.SEND_MESSAGE, item_id, e)

        logger.info(f"Sent message to chat {item_id}")
        await self._reload()
        return MutationOutcome(
            operation=MutationKind.SEND_MESSAGE,
            item_id=item_id,
            success=True,
        )

    async def get_chat(self, item_id: str) -> ChatDetail:
        """Fetch one chat with its message history.

        Raises:
            NotAuthenticatedError: If no identity is resolved
            RemoteFailureError: If the fetch fails
        """
        identity = self._require_identity()
        payload = await self._request(identity, "GET", f"/chats/{item_id}")
        return parse_response(ChatDetail, payload)

    def _require_identity(self) -> ActiveIdentity:
        identity = self._cache.identity
        if identity is None or not identity.is_authenticated:
            raise NotAuthenticatedError()
        return identity

    async def _reload(self) -> None:
        # A failed reload does not undo a successful write
        try:
            await self._cache.refresh()
        except RemoteFailureError as e:
            logger.warning(f"Reload after write failed: {e}")

    def _preflight(self, item_id: str) -> ActiveIdentity:
        """Check local preconditions before any request is issued."""
        snapshot = self._cache.current()
        if snapshot is None or self._cache.identity is None:
            raise NotLoadedError()
        snapshot.require(item_id)
        return self._cache.identity

    async def _request(
        self,
        identity: ActiveIdentity,
        method: str,
        path: str,
        json: Any = None,
    ) -> Any:
        return await self._transport.request(
            method, path, identity.api_key, scope=self._cache.scope, json=json
        )

    async def _run(
        self,
        kind: MutationKind,
        item_id: str,
        remote: Callable[[], Awaitable[Any]],
        transform: Transform,
        merge_result: Callable[[CollectionSnapshot, Any], CollectionSnapshot] | None = None,
        result_id: str | None = None,
    ) -> MutationOutcome:
        try:
            await self._cache.mutate(remote, transform, merge_result=merge_result)
        except RemoteFailureError as e:
            return _failure(kind, item_id, e)

        logger.info(f"{kind.value} on chat {item_id} confirmed")
        return MutationOutcome(
            operation=kind,
            item_id=item_id,
            success=True,
            result_id=result_id,
        )


def _failure(
    kind: MutationKind,
    item_id: str | None,
    error: RemoteFailureError,
) -> MutationOutcome:
    return MutationOutcome(
        operation=kind,
        item_id=item_id,
        success=False,
        error=error.message or str(error),
        status=error.status,
    )
