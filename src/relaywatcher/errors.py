# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Exception hierarchy for relay-watcher.

Only ``FatalServiceError`` subclasses cross into the application layer and
end the process with a non-zero status. Every other error is contained by the
component that detected it and surfaced through logging.
"""

from __future__ import annotations


class RelayWatcherError(Exception):
    """Base exception for relay-watcher errors."""


class FatalServiceError(RelayWatcherError):
    """Raised when the notification service cannot be used at all."""


class WatchmanConnectionError(FatalServiceError):
    """Raised when the watchman socket cannot be located or connected to."""


class CapabilityCheckError(FatalServiceError):
    """Raised when watchman lacks a required capability or the check fails."""


class WatchEstablishError(FatalServiceError):
    """Raised when a watch-project request fails."""


class WatchmanCommandError(RelayWatcherError):
    """Raised when watchman answers a command with an ``error`` field.

    Attributes:
        command: The command name that failed (e.g. ``"clock"``).
    """

    def __init__(self, command: str, message: str) -> None:
        super().__init__(f"watchman {command} failed: {message}")
        self.command = command


class SubscriptionError(RelayWatcherError):
    """Raised for invalid subscription registrations (e.g. duplicate ids)."""


class SchemaSyncError(RelayWatcherError):
    """Raised when the schema snapshot could not be refreshed.

    The previous snapshot on disk is always left untouched when this is raised.
    """


__all__ = [
    "CapabilityCheckError",
    "FatalServiceError",
    "RelayWatcherError",
    "SchemaSyncError",
    "SubscriptionError",
    "WatchEstablishError",
    "WatchmanCommandError",
    "WatchmanConnectionError",
]
