# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Unit tests for GraphQLIntrospectionClient using httpx.MockTransport."""

from __future__ import annotations

import json

import httpx
import pytest

from relaywatcher.clients.graphql_client import (
    GraphQLClientError,
    GraphQLHTTPStatusError,
    GraphQLIntrospectionClient,
)
from relaywatcher.constants import INTROSPECTION_QUERY

pytestmark = pytest.mark.unit

URL = "https://graphql.example.test/v1"


class TestFetchIntrospection:
    """Request shape and response classification."""

    @pytest.mark.asyncio
    async def test_posts_introspection_query_with_bearer_token(
        self, graphql_transport
    ) -> None:
        transport = graphql_transport(200, {"data": {"__schema": {}}})
        async with GraphQLIntrospectionClient(
            URL, "s3cret", transport=transport
        ) as client:
            body = await client.fetch_introspection()

        assert body == {"data": {"__schema": {}}}
        (request,) = transport.requests
        assert request.method == "POST"
        assert str(request.url) == URL
        assert request.headers["Authorization"] == "Bearer s3cret"
        assert request.headers["Content-Type"] == "application/json"
        assert json.loads(request.content) == {"query": INTROSPECTION_QUERY}

    @pytest.mark.asyncio
    async def test_errors_body_is_returned_to_caller(self, graphql_transport) -> None:
        transport = graphql_transport(200, {"errors": [{"message": "nope"}]})
        async with GraphQLIntrospectionClient(URL, "t", transport=transport) as client:
            body = await client.fetch_introspection()

        assert body["errors"] == [{"message": "nope"}]

    @pytest.mark.asyncio
    async def test_non_success_status_raises(self, graphql_transport) -> None:
        transport = graphql_transport(401, text="Unauthorized")
        async with GraphQLIntrospectionClient(URL, "t", transport=transport) as client:
            with pytest.raises(GraphQLHTTPStatusError) as exc_info:
                await client.fetch_introspection()

        assert exc_info.value.status_code == 401
        assert exc_info.value.body == "Unauthorized"

    @pytest.mark.asyncio
    async def test_transport_error_raises_client_error(self, graphql_transport) -> None:
        transport = graphql_transport(exc=httpx.ConnectError("refused"))
        async with GraphQLIntrospectionClient(URL, "t", transport=transport) as client:
            with pytest.raises(GraphQLClientError, match="refused"):
                await client.fetch_introspection()

    @pytest.mark.asyncio
    async def test_non_json_body_raises_client_error(self, graphql_transport) -> None:
        transport = graphql_transport(200, text="<html>maintenance</html>")
        async with GraphQLIntrospectionClient(URL, "t", transport=transport) as client:
            with pytest.raises(GraphQLClientError, match="non-JSON"):
                await client.fetch_introspection()


class TestLifecycle:
    """connect/close idempotence."""

    @pytest.mark.asyncio
    async def test_connect_and_close_are_idempotent(self, graphql_transport) -> None:
        client = GraphQLIntrospectionClient(URL, "t", transport=graphql_transport())
        await client.connect()
        await client.connect()
        assert client.is_connected

        await client.close()
        await client.close()
        assert not client.is_connected

    @pytest.mark.asyncio
    async def test_fetch_connects_lazily(self, graphql_transport) -> None:
        client = GraphQLIntrospectionClient(
            URL, "t", transport=graphql_transport(200, {"data": {}})
        )
        try:
            assert await client.fetch_introspection() == {"data": {}}
        finally:
            await client.close()
