# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Verbosity accepted by ``--log-level`` and ``RELAY_WATCHER_LOG_LEVEL``."""

from __future__ import annotations

import logging
from enum import StrEnum


class EnumLogLevel(StrEnum):
    """Process verbosity; DEBUG also shows every routed push."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    @property
    def numeric(self) -> int:
        """The matching ``logging`` module level."""
        return logging.getLevelNamesMapping()[self.value]

    @classmethod
    def parse(cls, value: EnumLogLevel | str) -> EnumLogLevel:
        """Case-insensitive lookup; unknown names fall back to INFO."""
        try:
            return cls(str(value).upper())
        except ValueError:
            return cls.INFO


__all__ = ["EnumLogLevel"]
