# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Unit tests for CodeGenInvoker.

The process runner is injected, so no compiler is needed except in the one
test that runs a real subprocess.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Sequence

import pytest

from relaywatcher.enums.enum_pipeline import (
    EnumPipelineOutcome,
    EnumPipelineStage,
    EnumPipelineTrigger,
)
from relaywatcher.handlers.handler_codegen_invoker import CodeGenInvoker
from relaywatcher.models.model_process_result import ModelProcessResult

pytestmark = pytest.mark.unit

COMPILER_OUTPUT = (
    "yarn run v1.22.19",
    "$ relay-compiler --src ./app --schema ./app/graph/schema.json",
    "HINT: pass --watch to keep watching for changes.",
    "Parsed default in 0.42s",
    "Writing default",
    "Created:",
    " - BuildQuery.graphql.js",
    "Done in 1.31s.",
)


def fake_runner(result: ModelProcessResult, calls: list[tuple[str, ...]]):
    async def _run(argv: Sequence[str], *, cwd: str | None = None) -> ModelProcessResult:
        calls.append(tuple(argv))
        return result

    return _run


def records_at(caplog: pytest.LogCaptureFixture, level: int) -> list[str]:
    return [r.getMessage() for r in caplog.records if r.levelno == level]


@pytest.mark.asyncio
async def test_success_logs_trimmed_output_at_info(
    caplog: pytest.LogCaptureFixture, test_logger: logging.Logger
) -> None:
    calls: list[tuple[str, ...]] = []
    invoker = CodeGenInvoker(
        ["yarn", "run", "relay"],
        runner=fake_runner(
            ModelProcessResult(
                argv=("yarn", "run", "relay"), exit_code=0, stdout_lines=COMPILER_OUTPUT
            ),
            calls,
        ),
        logger=test_logger,
    )

    with caplog.at_level(logging.DEBUG, logger=test_logger.name):
        run = await invoker.run(EnumPipelineTrigger.FRONTEND_SOURCE_CHANGE)

    assert calls == [("yarn", "run", "relay")]
    assert run.stage is EnumPipelineStage.CODEGEN
    assert run.trigger is EnumPipelineTrigger.FRONTEND_SOURCE_CHANGE
    assert run.outcome is EnumPipelineOutcome.SUCCESS
    assert run.captured_output_lines == (
        "Writing default",
        "Created:",
        " - BuildQuery.graphql.js",
    )
    assert records_at(caplog, logging.INFO) == list(run.captured_output_lines)
    assert records_at(caplog, logging.ERROR) == []


@pytest.mark.asyncio
async def test_failure_logs_trimmed_output_at_error_and_returns(
    caplog: pytest.LogCaptureFixture, test_logger: logging.Logger
) -> None:
    output = (*COMPILER_OUTPUT[:4], "Error: Unknown field `nmae` on type `User`", "")
    invoker = CodeGenInvoker(
        ["yarn", "run", "relay"],
        runner=fake_runner(
            ModelProcessResult(
                argv=("yarn", "run", "relay"), exit_code=1, stdout_lines=output
            ),
            [],
        ),
        logger=test_logger,
    )

    with caplog.at_level(logging.DEBUG, logger=test_logger.name):
        run = await invoker.run()

    assert run.outcome is EnumPipelineOutcome.FAILURE
    assert run.error is not None
    assert "status 1" in run.error
    errors = records_at(caplog, logging.ERROR)
    assert "Error: Unknown field `nmae` on type `User`" in errors
    assert records_at(caplog, logging.INFO) == []


@pytest.mark.asyncio
async def test_failure_without_stdout_logs_stderr(
    caplog: pytest.LogCaptureFixture, test_logger: logging.Logger
) -> None:
    invoker = CodeGenInvoker(
        ["relay-compiler"],
        runner=fake_runner(
            ModelProcessResult(
                argv=("relay-compiler",),
                exit_code=127,
                stderr_lines=("relay-compiler: command not found",),
            ),
            [],
        ),
        logger=test_logger,
    )

    with caplog.at_level(logging.DEBUG, logger=test_logger.name):
        run = await invoker.run()

    assert not run.succeeded
    assert "relay-compiler: command not found" in records_at(caplog, logging.ERROR)


@pytest.mark.asyncio
async def test_missing_compiler_is_tolerated(test_logger: logging.Logger) -> None:
    invoker = CodeGenInvoker(["relay-watcher-no-such-compiler"], logger=test_logger)

    run = await invoker.run()

    assert run.outcome is EnumPipelineOutcome.FAILURE
    assert run.error is not None
    assert "could not start" in run.error


@pytest.mark.asyncio
async def test_real_failing_compiler_does_not_raise(
    caplog: pytest.LogCaptureFixture, test_logger: logging.Logger
) -> None:
    script = (
        "for line in ['h1', 'h2', 'h3', 'h4', 'bad input in Foo.js', 'footer']:\n"
        "    print(line)\n"
        "raise SystemExit(2)\n"
    )
    invoker = CodeGenInvoker([sys.executable, "-c", script], logger=test_logger)

    with caplog.at_level(logging.DEBUG, logger=test_logger.name):
        first = await invoker.run()
        second = await invoker.run()

    assert first.captured_output_lines == ("bad input in Foo.js",)
    assert not first.succeeded and not second.succeeded
    assert records_at(caplog, logging.ERROR).count("bad input in Foo.js") == 2


def test_empty_command_is_rejected() -> None:
    with pytest.raises(ValueError):
        CodeGenInvoker([])
