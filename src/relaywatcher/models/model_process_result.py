# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Structured result of a subprocess invocation."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ModelProcessResult(BaseModel):
    """Exit status and captured output lines of one subprocess run.

    ``exit_code`` is None when the process could not be started at all; the
    reason is then carried in ``spawn_error``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    argv: tuple[str, ...]
    exit_code: int | None = None
    stdout_lines: tuple[str, ...] = Field(default_factory=tuple)
    stderr_lines: tuple[str, ...] = Field(default_factory=tuple)
    spawn_error: str | None = None

    @property
    def succeeded(self) -> bool:
        """True when the process started and exited with status 0."""
        return self.exit_code == 0


__all__ = ["ModelProcessResult"]
