# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Regeneration pipeline bound to the two subscriptions.

- schema-source change: schema sync, then codegen (codegen is skipped when
  the sync fails; the old snapshot would produce the same artifacts)
- frontend-source change: codegen only

A batch with no files (watchman sends one when a subscription starts from a
fresh instance) triggers nothing and is only logged at DEBUG.

Rapid successive batches can request overlapping runs. With
``serialize_runs=True`` runs queue behind a lock, so the schema snapshot and
generated artifacts always come from one complete run. With
``serialize_runs=False`` runs may interleave; every overlap is logged at
WARNING because the last writer then wins.
"""

from __future__ import annotations

import asyncio
import collections
import contextlib
import logging
from collections.abc import AsyncIterator, Sequence
from datetime import UTC, datetime

from relaywatcher.enums.enum_pipeline import (
    EnumPipelineOutcome,
    EnumPipelineStage,
    EnumPipelineTrigger,
)
from relaywatcher.errors import SchemaSyncError
from relaywatcher.models.model_change_event import ModelChangedFile
from relaywatcher.models.model_pipeline_run import ModelPipelineRun
from relaywatcher.protocols import ProtocolCodeGenInvoker, ProtocolSchemaSynchronizer

_MAX_LOGGED_NAMES = 10


def describe_files(files: Sequence[ModelChangedFile]) -> str:
    names = [f.name if f.exists else f"{f.name} (deleted)" for f in files]
    if len(names) > _MAX_LOGGED_NAMES:
        extra = len(names) - _MAX_LOGGED_NAMES
        names = [*names[:_MAX_LOGGED_NAMES], f"... {extra} more"]
    return ", ".join(names)


class RegenerationPipeline:
    """Runs schema sync and codegen and keeps a bounded history of runs."""

    def __init__(
        self,
        synchronizer: ProtocolSchemaSynchronizer,
        codegen: ProtocolCodeGenInvoker,
        *,
        serialize_runs: bool = True,
        history_size: int = 100,
        logger: logging.Logger | None = None,
    ) -> None:
        self._synchronizer = synchronizer
        self._codegen = codegen
        self._serialize_runs = serialize_runs
        self._lock = asyncio.Lock()
        self._in_flight = 0
        self._history: collections.deque[ModelPipelineRun] = collections.deque(
            maxlen=history_size
        )
        self._logger = logger or logging.getLogger(__name__)

    @property
    def history(self) -> list[ModelPipelineRun]:
        """Most recent runs, oldest first."""
        return list(self._history)

    @contextlib.asynccontextmanager
    async def _exclusive(self, label: str) -> AsyncIterator[None]:
        if self._serialize_runs:
            if self._lock.locked():
                self._logger.debug("%s queued behind a running pipeline", label)
            async with self._lock:
                yield
            return

        if self._in_flight:
            self._logger.warning(
                "%s overlaps %d running pipeline(s); the last writer wins",
                label,
                self._in_flight,
            )
        self._in_flight += 1
        try:
            yield
        finally:
            self._in_flight -= 1

    async def run_schema_and_codegen(self, trigger: EnumPipelineTrigger) -> bool:
        """Sync the schema, then run codegen if the sync succeeded.

        Returns:
            True when both stages succeeded.
        """
        async with self._exclusive(f"schema+codegen ({trigger})"):
            started_at = datetime.now(UTC)
            try:
                await self._synchronizer.sync()
            except SchemaSyncError as exc:
                self._history.append(
                    ModelPipelineRun(
                        stage=EnumPipelineStage.SCHEMA_SYNC,
                        trigger=trigger,
                        started_at=started_at,
                        finished_at=datetime.now(UTC),
                        outcome=EnumPipelineOutcome.FAILURE,
                        error=str(exc),
                    )
                )
                self._logger.error("Schema sync failed, skipping codegen: %s", exc)
                return False

            self._history.append(
                ModelPipelineRun(
                    stage=EnumPipelineStage.SCHEMA_SYNC,
                    trigger=trigger,
                    started_at=started_at,
                    finished_at=datetime.now(UTC),
                    outcome=EnumPipelineOutcome.SUCCESS,
                )
            )
            run = await self._codegen.run(trigger)
            self._history.append(run)
            return run.succeeded

    async def run_codegen(self, trigger: EnumPipelineTrigger) -> bool:
        """Run codegen alone. Returns True when the compiler succeeded."""
        async with self._exclusive(f"codegen ({trigger})"):
            run = await self._codegen.run(trigger)
            self._history.append(run)
            return run.succeeded

    async def on_schema_source_change(self, files: Sequence[ModelChangedFile]) -> None:
        """Handler for the schema-source subscription."""
        if not files:
            self._logger.debug("Empty schema-source batch, nothing to regenerate")
            return
        self._logger.info("Schema source changed: %s", describe_files(files))
        await self.run_schema_and_codegen(EnumPipelineTrigger.SCHEMA_SOURCE_CHANGE)

    async def on_frontend_source_change(
        self, files: Sequence[ModelChangedFile]
    ) -> None:
        """Handler for the frontend-source subscription."""
        if not files:
            self._logger.debug("Empty frontend-source batch, nothing to regenerate")
            return
        self._logger.info("Frontend source changed: %s", describe_files(files))
        await self.run_codegen(EnumPipelineTrigger.FRONTEND_SOURCE_CHANGE)


__all__ = ["RegenerationPipeline", "describe_files"]
