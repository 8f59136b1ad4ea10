# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Idempotent registry of watchman watch roots.

One ``watch-project`` request is issued per distinct absolute path for the
lifetime of the process. Concurrent requests for the same path share the
in-flight request.
"""

from __future__ import annotations

import asyncio
import logging
import os

from relaywatcher.errors import (
    WatchEstablishError,
    WatchmanCommandError,
    WatchmanConnectionError,
)
from relaywatcher.models.model_watch_root import ModelWatchRoot
from relaywatcher.protocols import ProtocolWatchmanClient


class ProjectWatchRegistry:
    """Establishes and caches watch roots keyed by absolute path."""

    def __init__(
        self,
        client: ProtocolWatchmanClient,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self._client = client
        self._logger = logger or logging.getLogger(__name__)
        self._roots: dict[str, asyncio.Task[ModelWatchRoot]] = {}

    def cached(self, absolute_path: str) -> ModelWatchRoot | None:
        """Return the established root for ``absolute_path`` without a request."""
        task = self._roots.get(os.path.abspath(absolute_path))
        if task is None or not task.done() or task.cancelled():
            return None
        if task.exception() is not None:
            return None
        return task.result()

    async def watch(self, absolute_path: str) -> ModelWatchRoot:
        """Return the watch root for ``absolute_path``, establishing it once.

        Raises:
            WatchEstablishError: If watchman rejects the watch. The failed
                attempt is not cached.
        """
        key = os.path.abspath(absolute_path)
        task = self._roots.get(key)
        if task is None:
            task = asyncio.ensure_future(self._establish(key))
            self._roots[key] = task
        try:
            return await asyncio.shield(task)
        except WatchEstablishError:
            if self._roots.get(key) is task:
                del self._roots[key]
            raise

    async def _establish(self, path: str) -> ModelWatchRoot:
        try:
            response = await self._client.command("watch-project", path)
        except (WatchmanCommandError, WatchmanConnectionError) as exc:
            raise WatchEstablishError(f"Unable to watch {path}: {exc}") from exc

        warning = response.get("warning")
        if warning:
            self._logger.warning("watchman warning for %s: %s", path, warning)

        watch = response.get("watch")
        if not watch:
            raise WatchEstablishError(
                f"watch-project for {path} returned no watch: {response}"
            )

        root = ModelWatchRoot(
            path=path,
            watch=str(watch),
            relative_path=response.get("relative_path") or None,
        )
        if root.relative_path:
            self._logger.info(
                "Watch established on %s (relative path %s)",
                root.watch,
                root.relative_path,
            )
        else:
            self._logger.info("Watch established on %s", root.watch)
        return root


__all__ = ["ProjectWatchRegistry"]
