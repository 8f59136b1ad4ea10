"""
Pytest configuration and fixtures for relay-watcher tests.

Shared fixtures for the coordinator components.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

import httpx
import pytest

from relaywatcher.testing import (
    MockCodeGenInvoker,
    MockSchemaSynchronizer,
    MockWatchmanClient,
)

# =========================================================================
# Core Pytest Configuration
# =========================================================================


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer environment variables out of the tests."""
    monkeypatch.delenv("WATCHMAN_SOCK", raising=False)
    monkeypatch.delenv("RELAY_WATCHER_GRAPHQL_TOKEN", raising=False)


@pytest.fixture
def test_logger() -> logging.Logger:
    """Logger injected into components under test."""
    logger = logging.getLogger("relaywatcher.tests")
    logger.setLevel(logging.DEBUG)
    return logger


# =========================================================================
# Notification service and pipeline fakes
# =========================================================================


@pytest.fixture
def watchman() -> MockWatchmanClient:
    """In-memory watchman client supporting relative_root."""
    return MockWatchmanClient()


@pytest.fixture
def call_log() -> list[str]:
    """Shared, ordered record of pipeline stage calls."""
    return []


@pytest.fixture
def synchronizer(call_log: list[str]) -> MockSchemaSynchronizer:
    return MockSchemaSynchronizer(call_log)


@pytest.fixture
def codegen(call_log: list[str]) -> MockCodeGenInvoker:
    return MockCodeGenInvoker(call_log)


# =========================================================================
# HTTP
# =========================================================================


@pytest.fixture
def graphql_transport() -> Callable[..., httpx.MockTransport]:
    """Factory for a MockTransport answering every request the same way.

    Requests are appended to ``transport.requests`` for inspection.
    """

    def _factory(
        status_code: int = 200,
        json_body: object | None = None,
        *,
        text: str | None = None,
        exc: Exception | None = None,
    ) -> httpx.MockTransport:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            if exc is not None:
                raise exc
            if text is not None:
                return httpx.Response(status_code, text=text)
            return httpx.Response(status_code, json=json_body)

        transport = httpx.MockTransport(handler)
        transport.requests = requests  # type: ignore[attr-defined]
        return transport

    return _factory
