# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Thin async subprocess wrapper plus compiler-output presentation helpers."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

from relaywatcher.models.model_process_result import ModelProcessResult


async def run_process(
    argv: Sequence[str],
    *,
    cwd: str | None = None,
) -> ModelProcessResult:
    """Run ``argv`` with stdin closed and capture both output streams.

    Output is decoded as UTF-8 (undecodable bytes replaced). A process that
    cannot be started is reported through ``spawn_error`` rather than raised.
    Cancelling the call kills the child.
    """
    argv = tuple(argv)
    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            cwd=cwd,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        return ModelProcessResult(argv=argv, spawn_error=str(exc))

    try:
        stdout, stderr = await proc.communicate()
    except asyncio.CancelledError:
        # Shutdown does not wait for the child.
        if proc.returncode is None:
            proc.kill()
        raise
    return ModelProcessResult(
        argv=argv,
        exit_code=proc.returncode,
        stdout_lines=tuple(stdout.decode("utf-8", errors="replace").splitlines()),
        stderr_lines=tuple(stderr.decode("utf-8", errors="replace").splitlines()),
    )


def trim_compiler_output(
    lines: Sequence[str],
    *,
    header_lines: int = 4,
    footer_lines: int = 1,
) -> list[str]:
    """Drop the compiler's banner header and trailing footer lines.

    Returns an empty list when the output is no longer than the framing.
    """
    end = len(lines) - footer_lines if footer_lines > 0 else len(lines)
    return list(lines[header_lines:end])


__all__ = ["run_process", "trim_compiler_output"]
