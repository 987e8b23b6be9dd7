"""Remote collection cache with optimistic mutations.

Holds the snapshot of the remote chat list for the active (identity, scope)
key. The visible snapshot is always the last confirmed base with every
unresolved local transform replayed on top of it in call order:

- a new mutation appends its transform and publishes the result at once;
- a confirmed mutation is folded into the base once every mutation issued
  before it has resolved;
- a failed mutation is dropped and the view is rebuilt without it;
- a fetch that started before a mutation was confirmed replays that
  mutation over the fetched list, since the response may predate it.

So a failure undoes exactly its own edit, never another mutation's.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable

from pydantic import ValidationError

from chat_sync.exceptions import (
    NotAuthenticatedError,
    NotLoadedError,
    RemoteFailureError,
    ResponseValidationError,
    StaleResponseError,
)
from chat_sync.models.chat import FindChatsResponse
from chat_sync.models.profile import ActiveIdentity
from chat_sync.models.snapshot import CacheKey, CollectionSnapshot
from chat_sync.transport import Transport, parse_response

logger = logging.getLogger(__name__)

Transform = Callable[[CollectionSnapshot], CollectionSnapshot]
Listener = Callable[[CollectionSnapshot | None], None]

CHATS_PATH = "/chats"


class MutationState(str, Enum):
    """State of a locally applied mutation."""

    PENDING = "pending"  # Remote call in flight
    CONFIRMED = "confirmed"  # Remote call succeeded, waiting to fold into base


@dataclass
class PendingMutation:
    """A local transform awaiting its remote outcome."""

    seq: int
    transform: Transform
    generation: int
    state: MutationState = MutationState.PENDING
    confirmed_seq: int | None = None


class RemoteCollectionCache:
    """Sole owner of the cached chat list for the active key.

    All state changes happen synchronously between awaits, so on a single
    event loop the capture/transform/publish step of one mutation never
    interleaves with another.
    """

    def __init__(self, transport: Transport, path: str = CHATS_PATH) -> None:
        self._transport = transport
        self._path = path
        self._identity: ActiveIdentity | None = None
        self._key: CacheKey | None = None
        self._generation = 0
        self._base: CollectionSnapshot | None = None
        self._current: CollectionSnapshot | None = None
        self._pending: list[PendingMutation] = []
        self._recent: list[PendingMutation] = []  # folded while a fetch was in flight
        self._inflight: dict[CacheKey, asyncio.Task[CollectionSnapshot]] = {}
        self._listeners: list[Listener] = []
        self._seq = itertools.count(1)

    @property
    def key(self) -> CacheKey | None:
        return self._key

    @property
    def identity(self) -> ActiveIdentity | None:
        return self._identity

    @property
    def scope(self) -> str | None:
        return self._key.scope if self._key else None

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def current(self) -> CollectionSnapshot | None:
        """Latest known snapshot for the active key; None while pending."""
        return self._current

    def subscribe(self, listener: Listener) -> None:
        """Call ``listener`` with every newly published snapshot."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        """Remove a listener. Idempotent."""
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    async def load(
        self,
        identity: ActiveIdentity,
        scope: str | None = None,
    ) -> CollectionSnapshot | None:
        """Fetch the collection for (identity, scope) and make it active.

        Concurrent loads of the same key share one request. If the active
        key changes while a load is in flight, its response is discarded
        and this returns None.

        Raises:
            NotAuthenticatedError: If the identity has no API key
            RemoteFailureError: If the fetch fails (previous snapshot kept)
        """
        if not identity.is_authenticated:
            raise NotAuthenticatedError()

        key = CacheKey(identity=identity.fingerprint, scope=scope)
        if key != self._key:
            self._switch_key(key)
        self._identity = identity

        task = self._inflight.get(key)
        if task is None:
            started = next(self._seq)
            task = asyncio.ensure_future(
                self._fetch(key, identity, self._generation, started)
            )
            self._inflight[key] = task
            task.add_done_callback(lambda t, k=key: self._forget_inflight(k, t))
        else:
            logger.debug(f"Joining in-flight load for {key}")

        try:
            return await asyncio.shield(task)
        except StaleResponseError:
            logger.debug(f"Load for {key} superseded by {self._key}")
            return None

    async def refresh(self) -> CollectionSnapshot | None:
        """Reload the active key.

        Raises:
            NotLoadedError: If no key was ever loaded
        """
        if self._identity is None or self._key is None:
            raise NotLoadedError("Nothing to refresh; load a collection first")
        return await self.load(self._identity, self._key.scope)

    async def mutate(
        self,
        remote_operation: Callable[[], Awaitable[Any]],
        local_transform: Transform,
        rollback_on_error: bool = True,
        merge_result: Callable[[CollectionSnapshot, Any], CollectionSnapshot] | None = None,
    ) -> Any:
        """Apply a transform optimistically, then confirm it remotely.

        Args:
            remote_operation: Zero-argument coroutine factory issuing the call
            local_transform: Pure snapshot -> snapshot function
            rollback_on_error: Must be True; the only supported policy
            merge_result: Optional (snapshot, result) -> snapshot applied on
                success to fold authoritative remote values in

        Returns:
            Whatever remote_operation returned

        Raises:
            NotLoadedError: If the active key has no snapshot yet
            RemoteFailureError: If the remote call fails (after rollback)
        """
        if not rollback_on_error:
            raise ValueError("Only rollback-on-error is supported")
        if self._current is None:
            raise NotLoadedError()

        after = local_transform(self._current)
        entry = PendingMutation(
            seq=next(self._seq),
            transform=local_transform,
            generation=self._generation,
        )
        self._pending.append(entry)
        self._publish(after)
        logger.debug(f"Applied mutation #{entry.seq} locally ({len(self._pending)} pending)")

        try:
            result = await remote_operation()
        except (Exception, asyncio.CancelledError) as e:
            if entry.generation == self._generation:
                self._pending.remove(entry)
                self._settle()
                logger.warning(f"Mutation #{entry.seq} failed, rolled back: {e}")
            raise

        if entry.generation != self._generation:
            logger.debug(f"Mutation #{entry.seq} confirmed after key switch; ignoring")
            return result

        if merge_result is not None:
            entry.transform = _then(local_transform, lambda s: merge_result(s, result))
        entry.state = MutationState.CONFIRMED
        entry.confirmed_seq = next(self._seq)
        self._settle()
        logger.debug(f"Mutation #{entry.seq} confirmed")
        return result

    def _switch_key(self, key: CacheKey) -> None:
        logger.info(f"Switching collection key {self._key} -> {key}")
        self._generation += 1
        self._key = key
        self._base = None
        self._pending.clear()
        self._recent.clear()
        self._inflight.clear()
        self._publish(None)

    def _forget_inflight(self, key: CacheKey, task: asyncio.Task) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]

    async def _fetch(
        self,
        key: CacheKey,
        identity: ActiveIdentity,
        generation: int,
        started: int,
    ) -> CollectionSnapshot:
        try:
            payload = await self._transport.request(
                "GET", self._path, identity.api_key, scope=key.scope
            )
        except RemoteFailureError as e:
            if generation != self._generation:
                raise StaleResponseError(key) from e
            raise

        if generation != self._generation:
            raise StaleResponseError(key)

        response = parse_response(FindChatsResponse, payload)
        try:
            snapshot = CollectionSnapshot(key=key, items=tuple(response.data))
        except ValidationError as e:
            raise ResponseValidationError(200, str(e.errors()[0]["msg"])) from e

        # Mutations confirmed after this request went out may be missing from it
        for entry in self._recent:
            if entry.confirmed_seq > started:
                snapshot = entry.transform(snapshot)
        self._recent = []
        self._base = snapshot
        self._settle()
        logger.info(f"Loaded {len(self._base.items)} items for {key}")
        return self._current

    def _settle(self) -> None:
        """Fold confirmed leading mutations into the base and republish."""
        if self._base is None:
            return
        while self._pending and self._pending[0].state == MutationState.CONFIRMED:
            entry = self._pending.pop(0)
            self._base = entry.transform(self._base)
            if self._inflight:
                self._recent.append(entry)

        view = self._base
        for entry in self._pending:
            view = entry.transform(view)
        if view != self._current:
            self._publish(view)

    def _publish(self, snapshot: CollectionSnapshot | None) -> None:
        self._current = snapshot
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Snapshot listener raised")


def _then(first: Transform, second: Transform) -> Transform:
    return lambda snapshot: second(first(snapshot))
