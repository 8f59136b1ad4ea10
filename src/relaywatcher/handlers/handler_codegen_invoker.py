# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Code-generation compiler invocation.

Compiler failures are logged and reported in the returned run; they are never
raised, so one bad input file cannot stop the watch loop.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from datetime import UTC, datetime

from relaywatcher.constants import (
    DEFAULT_CODEGEN_FOOTER_LINES,
    DEFAULT_CODEGEN_HEADER_LINES,
)
from relaywatcher.enums.enum_pipeline import (
    EnumPipelineOutcome,
    EnumPipelineStage,
    EnumPipelineTrigger,
)
from relaywatcher.handlers.handler_process_runner import (
    run_process,
    trim_compiler_output,
)
from relaywatcher.models.model_pipeline_run import ModelPipelineRun
from relaywatcher.models.model_process_result import ModelProcessResult

ProcessRunner = Callable[..., Awaitable[ModelProcessResult]]


class CodeGenInvoker:
    """Runs the configured compiler command and logs its trimmed stdout."""

    def __init__(
        self,
        command: Sequence[str],
        *,
        cwd: str | None = None,
        header_lines: int = DEFAULT_CODEGEN_HEADER_LINES,
        footer_lines: int = DEFAULT_CODEGEN_FOOTER_LINES,
        runner: ProcessRunner = run_process,
        logger: logging.Logger | None = None,
    ) -> None:
        if not command:
            raise ValueError("codegen command must not be empty")
        self._command = tuple(command)
        self._cwd = cwd
        self._header_lines = header_lines
        self._footer_lines = footer_lines
        self._runner = runner
        self._logger = logger or logging.getLogger(__name__)

    @property
    def command(self) -> tuple[str, ...]:
        return self._command

    async def run(
        self, trigger: EnumPipelineTrigger = EnumPipelineTrigger.INITIAL
    ) -> ModelPipelineRun:
        """Run the compiler once.

        Success: each trimmed stdout line is logged at INFO.
        Failure: each trimmed stdout line is logged at ERROR (plus stderr or
        the spawn error when stdout is empty) and the run is returned with
        outcome FAILURE.
        """
        started_at = datetime.now(UTC)
        result = await self._runner(self._command, cwd=self._cwd)
        lines = trim_compiler_output(
            result.stdout_lines,
            header_lines=self._header_lines,
            footer_lines=self._footer_lines,
        )

        if result.succeeded:
            for line in lines:
                self._logger.info("%s", line)
            return self._record(trigger, started_at, EnumPipelineOutcome.SUCCESS, lines)

        if result.spawn_error is not None:
            error = f"could not start {' '.join(self._command)}: {result.spawn_error}"
        else:
            error = f"{' '.join(self._command)} exited with status {result.exit_code}"
        self._logger.error("Code generation failed: %s", error)
        for line in lines:
            self._logger.error("%s", line)
        if not lines:
            for line in result.stderr_lines:
                self._logger.error("%s", line)
        return self._record(
            trigger, started_at, EnumPipelineOutcome.FAILURE, lines, error=error
        )

    def _record(
        self,
        trigger: EnumPipelineTrigger,
        started_at: datetime,
        outcome: EnumPipelineOutcome,
        lines: list[str],
        *,
        error: str | None = None,
    ) -> ModelPipelineRun:
        return ModelPipelineRun(
            stage=EnumPipelineStage.CODEGEN,
            trigger=trigger,
            started_at=started_at,
            finished_at=datetime.now(UTC),
            outcome=outcome,
            captured_output_lines=tuple(lines),
            error=error,
        )


__all__ = ["CodeGenInvoker", "ProcessRunner"]
