# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Enums for relay-watcher."""

from relaywatcher.enums.enum_log_level import EnumLogLevel
from relaywatcher.enums.enum_pipeline import (
    EnumPipelineOutcome,
    EnumPipelineStage,
    EnumPipelineTrigger,
)
from relaywatcher.enums.enum_subscription_state import EnumSubscriptionState

__all__ = [
    "EnumLogLevel",
    "EnumPipelineOutcome",
    "EnumPipelineStage",
    "EnumPipelineTrigger",
    "EnumSubscriptionState",
]
