# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Process lifecycle: termination signals and the single connection close.

SIGINT and SIGTERM are turned into a shutdown request on an ``asyncio.Event``
that the application awaits, so shutdown is ordinary data flow rather than an
interrupt. ``close`` is the only place the shared watchman connection is
closed, and it runs at most once.
"""

from __future__ import annotations

import asyncio
import logging
import signal

from relaywatcher.protocols import ProtocolWatchmanClient

HANDLED_SIGNALS: tuple[signal.Signals, ...] = (signal.SIGINT, signal.SIGTERM)


class ProcessLifecycle:
    """Owns shutdown of the coordinator process."""

    def __init__(
        self,
        client: ProtocolWatchmanClient,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self._client = client
        self._logger = logger or logging.getLogger(__name__)
        self._shutdown = asyncio.Event()
        self._exit_code = 0
        self._reason: str | None = None
        self._closed = False
        self._installed: list[signal.Signals] = []

    @property
    def exit_code(self) -> int:
        return self._exit_code

    @property
    def reason(self) -> str | None:
        return self._reason

    @property
    def shutdown_requested(self) -> bool:
        return self._shutdown.is_set()

    @property
    def is_closed(self) -> bool:
        return self._closed

    def install_signal_handlers(self) -> None:
        """Route SIGINT/SIGTERM into ``request_shutdown``."""
        loop = asyncio.get_running_loop()
        for sig in HANDLED_SIGNALS:
            try:
                loop.add_signal_handler(sig, self._on_signal, sig)
            except NotImplementedError:
                signal.signal(
                    sig,
                    lambda signum, _frame: loop.call_soon_threadsafe(
                        self._on_signal, signal.Signals(signum)
                    ),
                )
            self._installed.append(sig)

    def remove_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()
        for sig in self._installed:
            try:
                loop.remove_signal_handler(sig)
            except NotImplementedError:
                signal.signal(sig, signal.SIG_DFL)
        self._installed.clear()

    def _on_signal(self, sig: signal.Signals) -> None:
        self._logger.info("Received %s, shutting down", sig.name)
        self.request_shutdown(sig.name, exit_code=0)

    def request_shutdown(self, reason: str, *, exit_code: int = 0) -> None:
        """Ask the application to stop. The first request decides the exit code."""
        if self._shutdown.is_set():
            return
        self._reason = reason
        self._exit_code = exit_code
        self._shutdown.set()

    async def wait(self) -> None:
        """Block until shutdown is requested."""
        await self._shutdown.wait()

    async def close(self) -> None:
        """Close the watchman connection once and log the farewell."""
        if self._closed:
            return
        self._closed = True
        await self._client.close()
        self._logger.info("relay-watcher stopped, goodbye")


__all__ = ["HANDLED_SIGNALS", "ProcessLifecycle"]
