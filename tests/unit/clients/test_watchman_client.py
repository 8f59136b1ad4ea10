# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Unit tests for WatchmanConnection against a scripted Unix-socket server.

Validates:
    - newline-delimited JSON framing of commands
    - FIFO pairing of responses with commands
    - unilateral pushes routed to receive_push, never to a command
    - ``error`` responses raised as WatchmanCommandError
    - idempotent close and the end-of-stream sentinel
    - pending commands failed when the server goes away
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator, Awaitable, Callable
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio

from relaywatcher.clients.watchman_client import WatchmanConnection, resolve_sockname
from relaywatcher.errors import WatchmanCommandError, WatchmanConnectionError

pytestmark = pytest.mark.unit

Responder = Callable[
    [list[Any], asyncio.StreamWriter], Awaitable[None]
]


class ScriptedServer:
    """Unix socket server that hands each decoded command to a responder."""

    def __init__(self, path: Path, responder: Responder) -> None:
        self.path = path
        self.responder = responder
        self.received: list[list[Any]] = []
        self.writers: list[asyncio.StreamWriter] = []
        self._server: asyncio.AbstractServer | None = None

    async def start(self) -> None:
        self._server = await asyncio.start_unix_server(self._handle, path=str(self.path))

    async def stop(self) -> None:
        for writer in self.writers:
            writer.close()
        if self._server is not None:
            self._server.close()
            await self._server.wait_closed()

    async def _handle(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        self.writers.append(writer)
        while True:
            line = await reader.readline()
            if not line:
                break
            command = json.loads(line)
            self.received.append(command)
            await self.responder(command, writer)


def send(writer: asyncio.StreamWriter, message: dict[str, Any]) -> None:
    writer.write(json.dumps(message).encode() + b"\n")


async def echo_responder(command: list[Any], writer: asyncio.StreamWriter) -> None:
    name = command[0]
    if name == "clock":
        send(writer, {"version": "1", "clock": f"c:{command[1]}"})
    elif name == "fail":
        send(writer, {"version": "1", "error": "unable to resolve root"})
    elif name == "push-then-answer":
        send(
            writer,
            {"unilateral": True, "subscription": "web", "files": [{"name": "a.js"}]},
        )
        send(writer, {"unilateral": True, "log": "hello from watchman"})
        send(writer, {"version": "1", "answered": True})
    elif name == "hang":
        return
    else:
        send(writer, {"version": "1", "echo": command})
    await writer.drain()


@pytest_asyncio.fixture
async def server_factory(
    tmp_path: Path,
) -> AsyncIterator[Callable[[Responder], Awaitable[ScriptedServer]]]:
    servers: list[ScriptedServer] = []

    async def _factory(responder: Responder = echo_responder) -> ScriptedServer:
        server = ScriptedServer(tmp_path / f"w{len(servers)}.sock", responder)
        await server.start()
        servers.append(server)
        return server

    yield _factory
    for server in servers:
        await server.stop()


# =============================================================================
# Command / response
# =============================================================================


class TestCommands:
    """Request/response behaviour."""

    @pytest.mark.asyncio
    async def test_command_is_sent_as_one_json_line(self, server_factory) -> None:
        server = await server_factory()
        async with WatchmanConnection(str(server.path)) as conn:
            response = await conn.command("watch-project", "/repo")

        assert server.received == [["watch-project", "/repo"]]
        assert response["echo"] == ["watch-project", "/repo"]

    @pytest.mark.asyncio
    async def test_concurrent_commands_are_paired_in_order(
        self, server_factory
    ) -> None:
        server = await server_factory()
        async with WatchmanConnection(str(server.path)) as conn:
            results = await asyncio.gather(
                *(conn.command("clock", f"/root{i}") for i in range(5))
            )

        assert [r["clock"] for r in results] == [f"c:/root{i}" for i in range(5)]

    @pytest.mark.asyncio
    async def test_error_field_raises_command_error(self, server_factory) -> None:
        server = await server_factory()
        async with WatchmanConnection(str(server.path)) as conn:
            with pytest.raises(WatchmanCommandError) as exc_info:
                await conn.command("fail")
            # the connection remains usable afterwards
            response = await conn.command("clock", "/r")

        assert exc_info.value.command == "fail"
        assert "unable to resolve root" in str(exc_info.value)
        assert response["clock"] == "c:/r"

    @pytest.mark.asyncio
    async def test_first_command_connects_lazily(self, server_factory) -> None:
        server = await server_factory()
        conn = WatchmanConnection(str(server.path))
        try:
            assert not conn.is_connected
            response = await conn.command("clock", "/r")
            assert conn.is_connected
        finally:
            await conn.close()

        assert response["clock"] == "c:/r"

    @pytest.mark.asyncio
    async def test_timeout_raises_connection_error(self, server_factory) -> None:
        server = await server_factory()
        conn = WatchmanConnection(str(server.path), command_timeout_seconds=0.05)
        await conn.connect()
        try:
            with pytest.raises(WatchmanConnectionError, match="timed out"):
                await conn.command("hang")
        finally:
            await conn.close()

    @pytest.mark.asyncio
    async def test_connect_failure_raises_connection_error(
        self, tmp_path: Path
    ) -> None:
        conn = WatchmanConnection(str(tmp_path / "missing.sock"))
        with pytest.raises(WatchmanConnectionError):
            await conn.connect()

    @pytest.mark.asyncio
    async def test_watchman_sock_env_takes_precedence(
        self, server_factory, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        server = await server_factory()
        monkeypatch.setenv("WATCHMAN_SOCK", str(server.path))
        async with WatchmanConnection(str(tmp_path / "ignored.sock")) as conn:
            await conn.command("clock", "/r")
            assert conn.sockname == str(server.path)


# =============================================================================
# Unilateral pushes
# =============================================================================


class TestPushes:
    """Subscription pushes bypass command pairing."""

    @pytest.mark.asyncio
    async def test_push_is_not_mistaken_for_a_response(self, server_factory) -> None:
        server = await server_factory()
        async with WatchmanConnection(str(server.path)) as conn:
            response = await conn.command("push-then-answer")
            push = await asyncio.wait_for(conn.receive_push(), timeout=1)

        assert response == {"version": "1", "answered": True}
        assert push is not None
        assert push["subscription"] == "web"
        assert push["files"] == [{"name": "a.js"}]

    @pytest.mark.asyncio
    async def test_receive_push_returns_none_after_close(self, server_factory) -> None:
        server = await server_factory()
        conn = WatchmanConnection(str(server.path))
        await conn.connect()
        await conn.close()

        assert await conn.receive_push() is None
        assert await conn.receive_push() is None


# =============================================================================
# Lifecycle
# =============================================================================


class TestLifecycle:
    """close() semantics and connection loss."""

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self, server_factory) -> None:
        server = await server_factory()
        conn = WatchmanConnection(str(server.path))
        await conn.connect()

        await conn.close()
        await conn.close()

        assert conn.is_closed
        with pytest.raises(WatchmanConnectionError):
            await conn.command("clock", "/r")

    @pytest.mark.asyncio
    async def test_server_disconnect_fails_pending_and_ends_pushes(
        self, server_factory
    ) -> None:
        async def hang_up(command: list[Any], writer: asyncio.StreamWriter) -> None:
            writer.close()

        server = await server_factory(hang_up)
        conn = WatchmanConnection(str(server.path))
        await conn.connect()
        try:
            with pytest.raises(WatchmanConnectionError):
                await conn.command("clock", "/r")
            assert await asyncio.wait_for(conn.receive_push(), timeout=1) is None
            assert conn.is_closed
        finally:
            await conn.close()


# =============================================================================
# Socket discovery
# =============================================================================


class TestResolveSockname:
    """watchman get-sockname handling."""

    @pytest.mark.asyncio
    async def test_missing_binary_raises_connection_error(self) -> None:
        with pytest.raises(WatchmanConnectionError):
            await resolve_sockname("definitely-not-a-watchman-binary")

    @pytest.mark.asyncio
    async def test_reads_sockname_from_binary_output(self, tmp_path: Path) -> None:
        fake = tmp_path / "watchman"
        fake.write_text(
            "#!/bin/sh\n"
            'echo \'{"version": "2024.01.22.00", "sockname": "/tmp/w.sock"}\'\n'
        )
        fake.chmod(0o755)

        assert await resolve_sockname(str(fake)) == "/tmp/w.sock"
