# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Async GraphQL client used to fetch the introspection document.

A single POST per call, bearer authenticated. No retries: a failed fetch is
reported to the caller and the next file change starts a fresh attempt.

Example:
    ```python
    async with GraphQLIntrospectionClient(url, token) as client:
        payload = await client.fetch_introspection()
    ```
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, cast

import httpx

from relaywatcher.constants import INTROSPECTION_QUERY

if TYPE_CHECKING:
    from types import TracebackType

logger = logging.getLogger(__name__)


class GraphQLClientError(Exception):
    """Base exception for GraphQL transport errors."""


class GraphQLHTTPStatusError(GraphQLClientError):
    """Raised when the endpoint answers with a non-2xx status.

    Attributes:
        status_code: HTTP status returned by the endpoint.
        body: Response text, truncated.
    """

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"GraphQL endpoint returned HTTP {status_code}")
        self.status_code = status_code
        self.body = body


class GraphQLIntrospectionClient:
    """Posts the standard introspection query to a GraphQL endpoint.

    The httpx transport can be injected for tests (``httpx.MockTransport``).
    """

    def __init__(
        self,
        url: str,
        token: str,
        *,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = url
        self._token = token
        self._timeout_seconds = timeout_seconds
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def url(self) -> str:
        return self._url

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    async def connect(self) -> None:
        """Open the connection pool. Safe to call multiple times (idempotent)."""
        if self._client is not None:
            return
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self._timeout_seconds),
            transport=self._transport,
        )
        logger.debug("GraphQL client connected to %s", self._url)

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            await self.connect()
        return cast(httpx.AsyncClient, self._client)

    async def close(self) -> None:
        """Close the connection pool. Safe to call multiple times (idempotent)."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> GraphQLIntrospectionClient:
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def fetch_introspection(self) -> dict[str, Any]:
        """POST the introspection query and return the decoded JSON body.

        Returns:
            The response object, which may carry ``data`` and/or ``errors``.

        Raises:
            GraphQLHTTPStatusError: On a non-2xx response.
            GraphQLClientError: On transport failure or a non-JSON body.
        """
        client = await self._ensure_client()
        try:
            response = await client.post(
                self._url,
                json={"query": INTROSPECTION_QUERY},
                headers={
                    "Content-Type": "application/json",
                    "Authorization": f"Bearer {self._token}",
                },
            )
        except httpx.HTTPError as exc:
            raise GraphQLClientError(
                f"Request to {self._url} failed: {exc}"
            ) from exc

        if not response.is_success:
            raise GraphQLHTTPStatusError(response.status_code, response.text[:2000])

        try:
            body = response.json()
        except ValueError as exc:
            raise GraphQLClientError(
                f"GraphQL endpoint returned a non-JSON body: {exc}"
            ) from exc

        if not isinstance(body, dict):
            raise GraphQLClientError(
                f"Unexpected response format from GraphQL endpoint: {type(body)}"
            )
        return body


__all__ = [
    "GraphQLClientError",
    "GraphQLHTTPStatusError",
    "GraphQLIntrospectionClient",
]
