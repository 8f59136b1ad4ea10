# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Logging setup for the relay-watcher process."""

from __future__ import annotations

import logging

from relaywatcher.enums.enum_log_level import EnumLogLevel

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Libraries that log every request at INFO.
_NOISY_LOGGERS = ("httpx", "httpcore")


def configure_logging(level: EnumLogLevel | str = EnumLogLevel.INFO) -> None:
    """Configure the root logger once for the whole process."""
    numeric = EnumLogLevel.parse(level).numeric
    logging.basicConfig(level=numeric, format=LOG_FORMAT, force=True)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric, logging.WARNING))


__all__ = ["LOG_FORMAT", "configure_logging"]
