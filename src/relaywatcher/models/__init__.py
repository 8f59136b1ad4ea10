# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Data models for relay-watcher."""

from relaywatcher.models.model_change_event import (
    ModelChangedFile,
    ModelChangeEventBatch,
)
from relaywatcher.models.model_pipeline_run import ModelPipelineRun
from relaywatcher.models.model_process_result import ModelProcessResult
from relaywatcher.models.model_service_info import ModelServiceInfo
from relaywatcher.models.model_subscription_spec import ModelSubscriptionSpec
from relaywatcher.models.model_watch_root import ModelWatchRoot

__all__ = [
    "ModelChangeEventBatch",
    "ModelChangedFile",
    "ModelPipelineRun",
    "ModelProcessResult",
    "ModelServiceInfo",
    "ModelSubscriptionSpec",
    "ModelWatchRoot",
]
