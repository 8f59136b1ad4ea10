# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Schema synchronizer: refreshes the on-disk GraphQL schema snapshot.

Flow:
  1. POST the introspection query (bearer authenticated).
  2. Non-2xx status or transport error: log, raise, keep the old snapshot.
  3. Body with ``errors``: log the payload, raise, keep the old snapshot.
  4. Otherwise write ``{"data": ...}`` pretty printed, atomically, over the
     snapshot path.

The output is a pure function of ``data``, so an unchanged remote schema
produces a byte-identical file.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from relaywatcher.clients.graphql_client import (
    GraphQLClientError,
    GraphQLHTTPStatusError,
    GraphQLIntrospectionClient,
)
from relaywatcher.errors import SchemaSyncError


def render_snapshot(data: Any) -> str:
    """Serialize an introspection result into snapshot file content."""
    return json.dumps({"data": data}, indent=2, ensure_ascii=False) + "\n"


def write_atomic(path: Path, content: str) -> None:
    """Replace ``path`` with ``content`` via a temp file in the same directory."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class SchemaSynchronizer:
    """Fetches the introspection document and persists it to ``schema_path``."""

    def __init__(
        self,
        client: GraphQLIntrospectionClient,
        schema_path: str | Path,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self._client = client
        self._schema_path = Path(schema_path)
        self._logger = logger or logging.getLogger(__name__)

    @property
    def schema_path(self) -> Path:
        return self._schema_path

    async def sync(self) -> None:
        """Fetch and write the schema snapshot.

        Raises:
            SchemaSyncError: On HTTP, transport, or GraphQL-level errors. The
                previous snapshot is left untouched.
        """
        self._logger.info("Fetching GraphQL schema from %s", self._client.url)
        try:
            body = await self._client.fetch_introspection()
        except GraphQLHTTPStatusError as exc:
            self._logger.error(
                "Schema fetch failed with HTTP %d: %s", exc.status_code, exc.body
            )
            raise SchemaSyncError(str(exc)) from exc
        except GraphQLClientError as exc:
            self._logger.error("Schema fetch failed: %s", exc)
            raise SchemaSyncError(str(exc)) from exc

        if "errors" in body:
            self._logger.error(
                "Schema introspection returned errors: %s",
                json.dumps(body["errors"], indent=2),
            )
            raise SchemaSyncError("GraphQL introspection returned errors")

        if body.get("data") is None:
            self._logger.error("Schema introspection returned no data")
            raise SchemaSyncError("GraphQL introspection returned no data")

        try:
            write_atomic(self._schema_path, render_snapshot(body["data"]))
        except OSError as exc:
            self._logger.error(
                "Unable to write schema snapshot %s: %s", self._schema_path, exc
            )
            raise SchemaSyncError(str(exc)) from exc

        self._logger.info("Schema written to %s", self._schema_path)


__all__ = ["SchemaSynchronizer", "render_snapshot", "write_atomic"]
