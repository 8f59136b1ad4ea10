# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Subscription coordinator: declares watchman subscriptions and routes pushes.

Algorithm for ``subscribe``:

  1. ``clock`` scoped to the watch root; the token anchors the subscription
     so nothing before it is delivered and nothing after it is missed.
  2. Merge the caller's expression/fields with the clock and the root's
     relative path, then ``subscribe`` under ``spec.id``.
  3. Log the established expression.
  4. Route every push whose ``subscription`` equals ``spec.id`` to the
     handler, in arrival order.

Routing is exact-match on the subscription id. Each subscription owns a FIFO
queue drained by its own worker task: batches for one subscription are
handled strictly in order, while a slow handler never delays delivery to
another subscription.

Clock/subscribe failures are logged and leave the subscription FAILED. There
is no retry; the process keeps running with the remaining subscriptions.
A push that cannot be parsed is logged and dropped; dispatch continues.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from relaywatcher.enums.enum_subscription_state import EnumSubscriptionState
from relaywatcher.errors import (
    RelayWatcherError,
    SubscriptionError,
    WatchEstablishError,
)
from relaywatcher.handlers.handler_watch_registry import ProjectWatchRegistry
from relaywatcher.models.model_change_event import ModelChangeEventBatch
from relaywatcher.models.model_subscription_spec import ModelSubscriptionSpec
from relaywatcher.models.model_watch_root import ModelWatchRoot
from relaywatcher.protocols import ChangeHandler, ProtocolWatchmanClient


class SubscriptionCoordinator:
    """Owns all subscriptions on one shared watchman connection."""

    def __init__(
        self,
        client: ProtocolWatchmanClient,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self._client = client
        self._logger = logger or logging.getLogger(__name__)
        self._states: dict[str, EnumSubscriptionState] = {}
        self._queues: dict[str, asyncio.Queue[ModelChangeEventBatch]] = {}
        self._workers: dict[str, asyncio.Task[None]] = {}

    @property
    def states(self) -> Mapping[str, EnumSubscriptionState]:
        """Snapshot of each known subscription's lifecycle state."""
        return dict(self._states)

    @property
    def active_ids(self) -> list[str]:
        return [
            sub_id
            for sub_id, state in self._states.items()
            if state is EnumSubscriptionState.ACTIVE
        ]

    async def subscribe_path(
        self,
        registry: ProjectWatchRegistry,
        absolute_path: str,
        spec: ModelSubscriptionSpec,
        handler: ChangeHandler,
    ) -> bool:
        """Watch ``absolute_path`` and subscribe ``spec`` on it.

        Returns:
            True when the subscription became ACTIVE.

        Raises:
            WatchEstablishError: Watch failures are fatal and propagate.
            SubscriptionError: If ``spec.id`` is already in use.
        """
        self._claim(spec.id)
        self._states[spec.id] = EnumSubscriptionState.WATCH_PENDING
        try:
            root = await registry.watch(absolute_path)
        except WatchEstablishError:
            self._states[spec.id] = EnumSubscriptionState.FAILED
            raise
        self._states[spec.id] = EnumSubscriptionState.WATCH_ESTABLISHED
        return await self._subscribe(root, spec, handler)

    async def subscribe(
        self,
        watch_root: ModelWatchRoot,
        spec: ModelSubscriptionSpec,
        handler: ChangeHandler,
    ) -> bool:
        """Subscribe ``spec`` on an already established watch root.

        Returns:
            True when the subscription became ACTIVE, False when the clock or
            subscribe request failed (already logged).

        Raises:
            SubscriptionError: If ``spec.id`` is already in use.
        """
        self._claim(spec.id)
        self._states[spec.id] = EnumSubscriptionState.WATCH_ESTABLISHED
        return await self._subscribe(watch_root, spec, handler)

    def _claim(self, sub_id: str) -> None:
        if sub_id in self._states:
            raise SubscriptionError(f"Subscription id already in use: {sub_id!r}")
        self._states[sub_id] = EnumSubscriptionState.UNESTABLISHED

    async def _subscribe(
        self,
        root: ModelWatchRoot,
        spec: ModelSubscriptionSpec,
        handler: ChangeHandler,
    ) -> bool:
        try:
            clock_response = await self._client.command("clock", root.watch)
        except RelayWatcherError as exc:
            self._fail(spec.id, "clock", exc)
            return False
        clock = clock_response.get("clock")
        self._states[spec.id] = EnumSubscriptionState.CLOCK_OBTAINED

        anchored = spec.model_copy(
            update={
                "since_clock": clock,
                "root_relative_path": root.relative_path,
            }
        )

        # Register before submitting: the first push may be routed before
        # this coroutine resumes after the acknowledgement.
        self._register(spec.id, handler)
        self._states[spec.id] = EnumSubscriptionState.SUBSCRIBE_PENDING
        try:
            await self._client.command(
                "subscribe", root.watch, spec.id, anchored.to_subscribe_params()
            )
        except RelayWatcherError as exc:
            await self._unregister(spec.id)
            self._fail(spec.id, "subscribe", exc)
            return False

        self._states[spec.id] = EnumSubscriptionState.ACTIVE
        self._logger.info(
            "Subscription %s established on %s: %s",
            spec.id,
            root.path,
            anchored.expression,
        )
        return True

    def _fail(self, sub_id: str, step: str, exc: Exception) -> None:
        self._states[sub_id] = EnumSubscriptionState.FAILED
        self._logger.error(
            "Subscription %s failed during %s, it will stay inactive: %s",
            sub_id,
            step,
            exc,
        )

    def _register(self, sub_id: str, handler: ChangeHandler) -> None:
        queue: asyncio.Queue[ModelChangeEventBatch] = asyncio.Queue()
        self._queues[sub_id] = queue
        self._workers[sub_id] = asyncio.create_task(
            self._worker(sub_id, queue, handler), name=f"subscription-{sub_id}"
        )

    async def _unregister(self, sub_id: str) -> None:
        self._queues.pop(sub_id, None)
        task = self._workers.pop(sub_id, None)
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

    async def _worker(
        self,
        sub_id: str,
        queue: asyncio.Queue[ModelChangeEventBatch],
        handler: ChangeHandler,
    ) -> None:
        while True:
            batch = await queue.get()
            try:
                await handler(batch.files)
            except Exception:
                self._logger.exception(
                    "Handler for subscription %s failed on a batch of %d files",
                    sub_id,
                    len(batch.files),
                )
            finally:
                queue.task_done()

    def route_push(self, payload: dict[str, Any]) -> bool:
        """Queue one raw push for the handler registered under its id.

        Returns:
            True if a handler received the batch.
        """
        sub_id = payload.get("subscription")
        if not isinstance(sub_id, str):
            self._logger.debug("Ignoring push without subscription id: %s", payload)
            return False

        if payload.get("canceled"):
            self._logger.warning(
                "watchman canceled subscription %s (root %s)",
                sub_id,
                payload.get("root"),
            )
            if sub_id in self._states:
                self._states[sub_id] = EnumSubscriptionState.FAILED
            return False

        if "state-enter" in payload or "state-leave" in payload:
            self._logger.debug("Ignoring state push for %s", sub_id)
            return False

        queue = self._queues.get(sub_id)
        if queue is None:
            self._logger.debug("No handler for subscription %s, batch dropped", sub_id)
            return False

        try:
            batch = ModelChangeEventBatch.from_push(payload)
        except (ValidationError, KeyError, TypeError) as exc:
            self._logger.error(
                "Dropping malformed push for subscription %s: %s", sub_id, exc
            )
            return False
        self._logger.debug(
            "Subscription %s: %d changed files", sub_id, len(batch.files)
        )
        queue.put_nowait(batch)
        return True

    async def dispatch(self) -> None:
        """Route pushes until the connection ends."""
        while True:
            payload = await self._client.receive_push()
            if payload is None:
                self._logger.debug("Push channel closed, dispatcher exiting")
                return
            self.route_push(payload)

    async def drain(self) -> None:
        """Wait until every queued batch has been handled."""
        for queue in list(self._queues.values()):
            await queue.join()

    async def stop(self) -> None:
        """Cancel the per-subscription workers. Queued batches are discarded."""
        for sub_id in list(self._workers):
            await self._unregister(sub_id)


__all__ = ["SubscriptionCoordinator"]
