"""HTTP transport for the remote chat service.

Every request carries the bearer credential of the active identity and, when
one is selected, the scope qualifier header. Responses are returned as parsed
JSON; anything else becomes a RemoteFailureError so callers only deal with
one failure type.
"""

from __future__ import annotations

import logging
import time
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from chat_sync.config import get_settings
from chat_sync.exceptions import (
    NotAuthenticatedError,
    RemoteFailureError,
    ResponseValidationError,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_response(model: type[ModelT], payload: Any, status: int = 200) -> ModelT:
    """Validate a response body against its expected schema.

    Raises:
        ResponseValidationError: If the payload does not match
    """
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise ResponseValidationError(status, f"{model.__name__}: {e.error_count()} error(s)") from e


class Transport:
    """Executes HTTP requests against the remote service."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        scope_header: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            base_url: Service root, e.g. https://api.v0.dev/v1
            timeout: Request timeout in seconds
            scope_header: Header name carrying the scope qualifier
            client: Shared AsyncClient; a short-lived client is opened per
                request when omitted
        """
        settings = get_settings()
        self._base_url = (base_url or settings.api_base_url).rstrip("/")
        self._timeout = timeout if timeout is not None else settings.request_timeout
        self._scope_header = scope_header or settings.scope_header
        self._client = client

    def build_headers(self, api_key: str, scope: str | None = None) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        if scope:
            headers[self._scope_header] = scope
        return headers

    async def request(
        self,
        method: str,
        path: str,
        api_key: str | None,
        scope: str | None = None,
        json: Any = None,
    ) -> Any:
        """Send a request and return the parsed JSON body.

        Args:
            method: HTTP method
            path: Path relative to the base URL, starting with "/"
            api_key: Bearer credential; None means not authenticated
            scope: Optional scope qualifier
            json: Optional JSON body

        Returns:
            Parsed JSON body, or None for an empty response

        Raises:
            NotAuthenticatedError: If api_key is None (no request is sent)
            RemoteFailureError: On non-2xx status, timeout or connection error
        """
        if api_key is None:
            raise NotAuthenticatedError()

        url = f"{self._base_url}{path}"
        headers = self.build_headers(api_key, scope)
        start_time = time.time()

        try:
            if self._client is not None:
                resp = await self._client.request(method, url, headers=headers, json=json)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    resp = await client.request(method, url, headers=headers, json=json)
        except httpx.TimeoutException as e:
            latency_ms = int((time.time() - start_time) * 1000)
            logger.warning(f"Timeout on {method} {path} after {latency_ms}ms")
            raise RemoteFailureError(None, f"Timeout after {latency_ms}ms") from e
        except httpx.HTTPError as e:
            logger.warning(f"Connection error on {method} {path}: {e}")
            raise RemoteFailureError(None, f"Connection error: {e}") from e

        latency_ms = int((time.time() - start_time) * 1000)

        if not resp.is_success:
            message = self._error_message(resp)
            logger.warning(f"{method} {path} failed with HTTP {resp.status_code}: {message}")
            raise RemoteFailureError(resp.status_code, message)

        logger.debug(f"{method} {path} -> {resp.status_code} in {latency_ms}ms")

        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise ResponseValidationError(resp.status_code, "body is not JSON") from e

    @staticmethod
    def _error_message(resp: httpx.Response) -> str:
        """Extract the server-supplied message from an error response.

        The service reports errors as {"error": {"message": "..."}}; fall back
        to the reason phrase or a truncated body.
        """
        try:
            body = resp.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            error = body.get("error")
            if isinstance(error, dict) and error.get("message"):
                return str(error["message"])
            if isinstance(error, str) and error:
                return error
        return resp.reason_phrase or resp.text[:200]

    async def aclose(self) -> None:
        """Close the shared client, if one was supplied."""
        if self._client is not None:
            await self._client.aclose()
