# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Transient record of one pipeline stage execution."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from relaywatcher.enums.enum_pipeline import (
    EnumPipelineOutcome,
    EnumPipelineStage,
    EnumPipelineTrigger,
)


class ModelPipelineRun(BaseModel):
    """One execution of schema sync or codegen.

    Never persisted; kept for logging and for inspection in tests.

    Attributes:
        stage: Which stage ran.
        trigger: What caused the run.
        started_at: UTC start time.
        finished_at: UTC end time.
        outcome: SUCCESS or FAILURE.
        captured_output_lines: Output lines that were logged.
        error: Failure description, if any.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    stage: EnumPipelineStage
    trigger: EnumPipelineTrigger
    started_at: datetime
    finished_at: datetime
    outcome: EnumPipelineOutcome
    captured_output_lines: tuple[str, ...] = Field(default_factory=tuple)
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.outcome is EnumPipelineOutcome.SUCCESS

    @property
    def duration_seconds(self) -> float:
        return (self.finished_at - self.started_at).total_seconds()


__all__ = ["ModelPipelineRun"]
