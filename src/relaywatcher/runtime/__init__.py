# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""
relay-watcher runtime package.

Provides configuration, logging setup, process lifecycle and the application
that wires the coordinator components together.

Usage:
    from relaywatcher.runtime import RelayWatcherSettings, run_application

    settings = RelayWatcherSettings.from_yaml("relay-watcher.yaml")
    exit_code = asyncio.run(run_application(settings))
"""

from relaywatcher.runtime.application import (
    RelayWatcherApplication,
    build_pipeline,
    run_application,
)
from relaywatcher.runtime.config import RelayWatcherSettings
from relaywatcher.runtime.lifecycle import HANDLED_SIGNALS, ProcessLifecycle
from relaywatcher.runtime.logging_config import LOG_FORMAT, configure_logging

__all__ = [
    "HANDLED_SIGNALS",
    "LOG_FORMAT",
    "ProcessLifecycle",
    "RelayWatcherApplication",
    "RelayWatcherSettings",
    "build_pipeline",
    "configure_logging",
    "run_application",
]
