# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Async watchman client speaking the JSON protocol over a Unix socket.

watchman answers commands strictly in the order they were sent, so responses
are paired with requests through a FIFO of pending futures. Messages that are
not responses (``unilateral`` pushes: subscription batches and log lines) are
routed out of band: subscription pushes go into a single inbound queue read
via ``receive_push``; log pushes are written to the logger.

Socket discovery order:
    1. ``WATCHMAN_SOCK`` environment variable
    2. the ``sockname`` passed to the constructor
    3. ``watchman get-sockname``

Example:
    ```python
    async with WatchmanConnection() as conn:
        info = await conn.command("version", {"required": ["relative_root"]})
        push = await conn.receive_push()
    ```
"""

from __future__ import annotations

import asyncio
import collections
import contextlib
import json
import logging
import os
from typing import TYPE_CHECKING, Any

from relaywatcher.errors import WatchmanCommandError, WatchmanConnectionError

if TYPE_CHECKING:
    from types import TracebackType

# Subscription pushes for large trees can be several MiB on one line.
_STREAM_LIMIT_BYTES = 16 * 1024 * 1024


def _is_unilateral(message: dict[str, Any]) -> bool:
    return bool(message.get("unilateral")) or "subscription" in message or (
        "log" in message
    )


async def resolve_sockname(binary: str = "watchman") -> str:
    """Ask the watchman binary for its socket path.

    Raises:
        WatchmanConnectionError: If the binary is missing, fails, or answers
            without a socket name.
    """
    try:
        proc = await asyncio.create_subprocess_exec(
            binary,
            "--output-encoding=json",
            "--no-pretty",
            "get-sockname",
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        raise WatchmanConnectionError(
            f"Unable to run {binary!r} to locate the watchman socket: {exc}"
        ) from exc

    stdout, stderr = await proc.communicate()
    if proc.returncode != 0:
        raise WatchmanConnectionError(
            f"{binary} get-sockname failed (rc={proc.returncode}): "
            f"{stderr.decode('utf-8', errors='replace').strip()}"
        )
    try:
        payload = json.loads(stdout)
    except ValueError as exc:
        raise WatchmanConnectionError(
            f"{binary} get-sockname returned invalid JSON: {exc}"
        ) from exc

    sockname = payload.get("sockname") or payload.get("unix_domain")
    if not sockname:
        raise WatchmanConnectionError(
            f"{binary} get-sockname returned no socket: {payload.get('error')}"
        )
    return str(sockname)


class WatchmanConnection:
    """One shared connection to the watchman service.

    Supports both context manager and manual lifecycle management. ``close``
    is idempotent; the connection is never reopened after closing.
    """

    def __init__(
        self,
        sockname: str | None = None,
        *,
        binary: str = "watchman",
        command_timeout_seconds: float | None = 30.0,
        logger: logging.Logger | None = None,
    ) -> None:
        self._sockname = sockname
        self._binary = binary
        self._command_timeout = command_timeout_seconds
        self._logger = logger or logging.getLogger(__name__)
        self._reader: asyncio.StreamReader | None = None
        self._writer: asyncio.StreamWriter | None = None
        self._reader_task: asyncio.Task[None] | None = None
        self._pending: collections.deque[asyncio.Future[dict[str, Any]]] = (
            collections.deque()
        )
        self._pushes: asyncio.Queue[dict[str, Any] | None] = asyncio.Queue()
        self._send_lock = asyncio.Lock()
        self._closed = False
        self._close_called = False

    @property
    def is_connected(self) -> bool:
        return self._writer is not None and not self._closed

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def sockname(self) -> str | None:
        return self._sockname

    async def connect(self) -> None:
        """Open the socket and start the reader. Safe to call multiple times."""
        if self._closed:
            raise WatchmanConnectionError("Connection already closed")
        if self._writer is not None:
            return

        sockname = os.environ.get("WATCHMAN_SOCK") or self._sockname
        if not sockname:
            sockname = await resolve_sockname(self._binary)
        self._sockname = sockname

        try:
            reader, writer = await asyncio.open_unix_connection(
                sockname, limit=_STREAM_LIMIT_BYTES
            )
        except OSError as exc:
            raise WatchmanConnectionError(
                f"Unable to connect to watchman at {sockname}: {exc}"
            ) from exc
        self._reader, self._writer = reader, writer

        self._reader_task = asyncio.create_task(
            self._read_loop(reader), name="watchman-reader"
        )
        self._logger.debug("Connected to watchman at %s", sockname)

    async def close(self) -> None:
        """Close the connection. Only the first call has any effect."""
        if self._close_called:
            return
        self._close_called = True
        self._closed = True

        if self._reader_task is not None:
            self._reader_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._reader_task
            self._reader_task = None

        if self._writer is not None:
            self._writer.close()
            with contextlib.suppress(ConnectionError, OSError):
                await self._writer.wait_closed()
            self._writer = None

        self._fail_pending(WatchmanConnectionError("watchman connection closed"))
        self._pushes.put_nowait(None)
        self._logger.debug("watchman connection closed")

    async def __aenter__(self) -> WatchmanConnection:
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def command(self, *args: Any) -> dict[str, Any]:
        """Send one command (e.g. ``"clock", "/repo"``) and await its response.

        Raises:
            WatchmanCommandError: If watchman answers with an ``error`` field.
            WatchmanConnectionError: If the connection is closed, lost, or the
                response does not arrive within the command timeout.
        """
        if self._closed:
            raise WatchmanConnectionError("watchman connection is closed")
        if self._writer is None:
            await self.connect()
        writer = self._writer
        if writer is None:
            raise WatchmanConnectionError("watchman connection is not open")

        name = str(args[0]) if args else "<empty>"
        loop = asyncio.get_running_loop()
        future: asyncio.Future[dict[str, Any]] = loop.create_future()
        line = json.dumps(list(args), separators=(",", ":")) + "\n"

        async with self._send_lock:
            self._pending.append(future)
            try:
                writer.write(line.encode("utf-8"))
                await writer.drain()
            except (ConnectionError, OSError) as exc:
                raise WatchmanConnectionError(
                    f"Failed to send watchman {name}: {exc}"
                ) from exc

        try:
            # shield: a timed-out future stays queued so later responses
            # still line up with their requests.
            response = await asyncio.wait_for(
                asyncio.shield(future), timeout=self._command_timeout
            )
        except TimeoutError as exc:
            raise WatchmanConnectionError(
                f"watchman {name} timed out after {self._command_timeout}s"
            ) from exc

        if "error" in response:
            raise WatchmanCommandError(name, str(response["error"]))
        return response

    async def receive_push(self) -> dict[str, Any] | None:
        """Return the next subscription push; None once the connection ended."""
        message = await self._pushes.get()
        if message is None:
            # Keep the sentinel for any other reader.
            self._pushes.put_nowait(None)
        return message

    async def _read_loop(self, reader: asyncio.StreamReader) -> None:
        try:
            while True:
                raw = await reader.readline()
                if not raw:
                    break
                try:
                    message = json.loads(raw)
                except ValueError:
                    self._logger.warning(
                        "Discarding undecodable watchman message: %r", raw[:200]
                    )
                    continue
                if not isinstance(message, dict):
                    self._logger.warning("Discarding non-object message: %r", message)
                    continue
                self._route(message)
        except (ConnectionError, OSError, ValueError) as exc:
            self._logger.error("watchman connection failed: %s", exc)

        if not self._closed:
            self._logger.error("watchman connection lost")
            self._closed = True
            self._fail_pending(WatchmanConnectionError("watchman connection lost"))
            self._pushes.put_nowait(None)

    def _route(self, message: dict[str, Any]) -> None:
        if _is_unilateral(message):
            if "subscription" in message:
                self._pushes.put_nowait(message)
            elif "log" in message:
                self._logger.info("watchman: %s", str(message["log"]).rstrip())
            return

        if not self._pending:
            self._logger.warning("Unexpected watchman response: %s", message)
            return
        future = self._pending.popleft()
        if not future.done():
            future.set_result(message)

    def _fail_pending(self, exc: Exception) -> None:
        while self._pending:
            future = self._pending.popleft()
            if not future.done():
                future.set_exception(exc)


__all__ = ["WatchmanConnection", "resolve_sockname"]
