# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Coordinator components: probe, watch registry, subscriptions, pipeline."""

from relaywatcher.handlers.handler_capability_probe import CapabilityProbe
from relaywatcher.handlers.handler_codegen_invoker import CodeGenInvoker
from relaywatcher.handlers.handler_process_runner import (
    run_process,
    trim_compiler_output,
)
from relaywatcher.handlers.handler_regeneration_pipeline import (
    RegenerationPipeline,
    describe_files,
)
from relaywatcher.handlers.handler_schema_synchronizer import (
    SchemaSynchronizer,
    render_snapshot,
    write_atomic,
)
from relaywatcher.handlers.handler_subscription_coordinator import (
    SubscriptionCoordinator,
)
from relaywatcher.handlers.handler_watch_registry import ProjectWatchRegistry

__all__ = [
    "CapabilityProbe",
    "CodeGenInvoker",
    "ProjectWatchRegistry",
    "RegenerationPipeline",
    "SchemaSynchronizer",
    "SubscriptionCoordinator",
    "describe_files",
    "render_snapshot",
    "run_process",
    "trim_compiler_output",
    "write_atomic",
]
