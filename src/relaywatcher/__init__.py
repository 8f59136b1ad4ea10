# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""relay-watcher - development-time GraphQL schema and codegen coordinator.

Watches a schema-source tree and a frontend-source tree through watchman and
keeps two generated outputs current:

    - the GraphQL schema snapshot (introspection result) on disk
    - the artifacts produced by the code-generation compiler

Quick Start:
    >>> from relaywatcher.runtime.config import RelayWatcherSettings
    >>> from relaywatcher.runtime.application import run_application
    >>> settings = RelayWatcherSettings(graphql_token="...")
    >>> exit_code = asyncio.run(run_application(settings))
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
