"""Scope catalog: cached list of scopes visible to an API key."""

from __future__ import annotations

import asyncio
import logging

from chat_sync.models.scope import FindScopesResponse, Scope, ScopeListing
from chat_sync.transport import Transport, parse_response

logger = logging.getLogger(__name__)

SCOPES_PATH = "/user/scopes"


class ScopeCatalog:
    """Fetches and caches scopes per API key.

    There is no automatic retry: a failed fetch caches nothing and is
    raised to the caller, which decides whether to try again.
    """

    def __init__(self, transport: Transport) -> None:
        self._transport = transport
        self._cache: dict[str, list[Scope]] = {}
        self._inflight: dict[str, asyncio.Task[list[Scope]]] = {}

    async def list(self, api_key: str | None) -> ScopeListing:
        """List scopes for an API key.

        Returns an empty, not-ready listing without any request when
        api_key is None.

        Raises:
            RemoteFailureError: If the remote fetch fails
        """
        if api_key is None:
            return ScopeListing(scopes=[], ready=False)

        if api_key in self._cache:
            return ScopeListing(scopes=list(self._cache[api_key]))

        task = self._inflight.get(api_key)
        if task is None:
            task = asyncio.ensure_future(self._fetch(api_key))
            self._inflight[api_key] = task
            task.add_done_callback(lambda t: self._forget_inflight(api_key, t))

        scopes = await asyncio.shield(task)
        return ScopeListing(scopes=list(scopes))

    async def find(self, api_key: str | None, scope_id: str) -> Scope | None:
        """Look up one scope by id in the (cached) listing."""
        listing = await self.list(api_key)
        return next((s for s in listing.scopes if s.id == scope_id), None)

    def invalidate(self, api_key: str | None = None) -> None:
        """Drop cached scopes for one key, or all keys.

        A fetch already in flight keeps running for its callers but no
        longer fills the cache; the next list() starts a new request.
        """
        if api_key is None:
            self._cache.clear()
            self._inflight.clear()
        else:
            self._cache.pop(api_key, None)
            self._inflight.pop(api_key, None)

    def _forget_inflight(self, api_key: str, task: asyncio.Task) -> None:
        if self._inflight.get(api_key) is task:
            del self._inflight[api_key]

    async def _fetch(self, api_key: str) -> list[Scope]:
        payload = await self._transport.request("GET", SCOPES_PATH, api_key)
        scopes = parse_response(FindScopesResponse, payload).data
        if self._inflight.get(api_key) is asyncio.current_task():
            self._cache[api_key] = scopes
            logger.debug(f"Cached {len(scopes)} scopes")
        else:
            logger.debug("Scope listing invalidated while in flight; not cached")
        return scopes
