# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Testing utilities for relay-watcher.

Mock implementations of the watchman client and pipeline stage protocols,
importable from the test suite without a running watchman or compiler.

Modules:
    mock_watchman: In-memory ProtocolWatchmanClient
    mock_pipeline: Recording schema synchronizer and codegen invoker
"""

from relaywatcher.testing.mock_pipeline import (
    MockCodeGenInvoker,
    MockSchemaSynchronizer,
)
from relaywatcher.testing.mock_watchman import MockWatchmanClient, make_file

__all__ = [
    "MockCodeGenInvoker",
    "MockSchemaSynchronizer",
    "MockWatchmanClient",
    "make_file",
]
