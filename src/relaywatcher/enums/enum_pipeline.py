# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Enums describing regeneration pipeline runs."""

from enum import StrEnum


class EnumPipelineTrigger(StrEnum):
    """What caused a pipeline run."""

    INITIAL = "initial"
    SCHEMA_SOURCE_CHANGE = "schema_source_change"
    FRONTEND_SOURCE_CHANGE = "frontend_source_change"


class EnumPipelineStage(StrEnum):
    """A single stage of the regeneration pipeline."""

    SCHEMA_SYNC = "schema_sync"
    CODEGEN = "codegen"


class EnumPipelineOutcome(StrEnum):
    """Terminal outcome of a pipeline stage."""

    SUCCESS = "success"
    FAILURE = "failure"


__all__ = ["EnumPipelineOutcome", "EnumPipelineStage", "EnumPipelineTrigger"]
