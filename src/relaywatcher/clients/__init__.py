# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Transport clients for relay-watcher.

Components outside this package never import transport libraries directly;
they receive these clients via dependency injection.
"""

from relaywatcher.clients.graphql_client import (
    GraphQLClientError,
    GraphQLHTTPStatusError,
    GraphQLIntrospectionClient,
)
from relaywatcher.clients.watchman_client import WatchmanConnection, resolve_sockname

__all__ = [
    "GraphQLClientError",
    "GraphQLHTTPStatusError",
    "GraphQLIntrospectionClient",
    "WatchmanConnection",
    "resolve_sockname",
]
