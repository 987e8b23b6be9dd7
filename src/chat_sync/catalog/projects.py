"""Project catalog: cached project listings and project creation."""

from __future__ import annotations

import logging

from chat_sync.exceptions import NotAuthenticatedError
from chat_sync.models.profile import ActiveIdentity
from chat_sync.models.project import FindProjectsResponse, Project
from chat_sync.transport import Transport, parse_response

logger = logging.getLogger(__name__)

PROJECTS_PATH = "/projects"


class ProjectCatalog:
    """Fetches and caches projects per (identity, scope)."""

    def __init__(self, transport: Transport) -> None:
        self._transport = transport
        self._cache: dict[tuple[str, str | None], list[Project]] = {}
        self._generation = 0  # bumped by invalidate()

    async def list(
        self,
        identity: ActiveIdentity,
        scope: str | None = None,
    ) -> list[Project]:
        """List projects visible to an identity within a scope.

        Returns an empty list without a request when unauthenticated.
        """
        if not identity.is_authenticated:
            return []

        key = (identity.fingerprint, scope)
        if key in self._cache:
            return list(self._cache[key])

        generation = self._generation
        payload = await self._transport.request(
            "GET", PROJECTS_PATH, identity.api_key, scope=scope
        )
        projects = parse_response(FindProjectsResponse, payload).data
        if generation == self._generation:
            self._cache[key] = projects
            logger.debug(f"Cached {len(projects)} projects for scope {scope or '*'}")
        return list(projects)

    async def create(
        self,
        identity: ActiveIdentity,
        name: str,
        description: str | None = None,
        scope: str | None = None,
    ) -> Project:
        """Create a project and invalidate the identity's cached listings.

        Raises:
            NotAuthenticatedError: If the identity has no API key
            ValueError: If name is blank
            RemoteFailureError: If the remote call fails
        """
        if not identity.is_authenticated:
            raise NotAuthenticatedError()
        if not name or not name.strip():
            raise ValueError("Project name cannot be empty")

        body: dict[str, str] = {"name": name.strip()}
        if description:
            body["description"] = description
        payload = await self._transport.request(
            "POST", PROJECTS_PATH, identity.api_key, scope=scope, json=body
        )
        project = parse_response(Project, payload)
        self.invalidate(identity)
        logger.info(f"Created project {project.id} ({project.name})")
        return project

    def invalidate(self, identity: ActiveIdentity | None = None) -> None:
        """Drop cached listings for one identity, or all.

        Listings still in flight are not cached when they land.
        """
        self._generation += 1
        if identity is None:
            self._cache.clear()
            return
        for key in [k for k in self._cache if k[0] == identity.fingerprint]:
            del self._cache[key]
