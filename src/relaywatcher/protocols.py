# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Protocols for the notification-service client and pipeline stages.

Components receive these via dependency injection so they can be tested
against in-memory fakes instead of a real watchman process.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from typing import Any, Protocol, runtime_checkable

from relaywatcher.enums.enum_pipeline import EnumPipelineTrigger
from relaywatcher.models.model_change_event import ModelChangedFile
from relaywatcher.models.model_pipeline_run import ModelPipelineRun

# Handler invoked with the file list of one change batch.
ChangeHandler = Callable[[Sequence[ModelChangedFile]], Awaitable[None]]


@runtime_checkable
class ProtocolWatchmanClient(Protocol):
    """Request/response plus push channel over one watchman connection.

    Responses are matched to commands in the order the commands were sent.
    Unilateral subscription pushes are delivered through ``receive_push``.
    """

    @property
    def is_closed(self) -> bool:
        """True once ``close`` has run or the connection was lost."""
        ...

    async def command(self, *args: Any) -> dict[str, Any]:
        """Send one command and return its response.

        Raises:
            WatchmanCommandError: If the response carries an ``error`` field.
            WatchmanConnectionError: If the connection is closed or lost.
        """
        ...

    async def receive_push(self) -> dict[str, Any] | None:
        """Return the next subscription push, or None once the connection ends."""
        ...

    async def close(self) -> None:
        """Close the connection. Safe to call multiple times."""
        ...


@runtime_checkable
class ProtocolSchemaSynchronizer(Protocol):
    """Refreshes the schema snapshot on disk."""

    async def sync(self) -> None:
        """Raises SchemaSyncError on failure, leaving the old snapshot intact."""
        ...


@runtime_checkable
class ProtocolCodeGenInvoker(Protocol):
    """Runs the code-generation compiler."""

    async def run(
        self, trigger: EnumPipelineTrigger = EnumPipelineTrigger.INITIAL
    ) -> ModelPipelineRun:
        """Never raises for compiler failures; the outcome is in the result."""
        ...


__all__ = [
    "ChangeHandler",
    "ProtocolCodeGenInvoker",
    "ProtocolSchemaSynchronizer",
    "ProtocolWatchmanClient",
]
