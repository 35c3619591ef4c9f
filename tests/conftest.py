"""
Shared pytest fixtures for client-spine tests.

This module provides:
- A scripted in-memory transport (no sockets)
- A recording notification sink
- Cleanup of the cached settings and the process-wide default client

Usage:
    async def test_retries(fake_transport, notifier):
        fake_transport.queue(json_response(503, {"message": "busy"}))
        ...
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock

import pytest
import structlog

from client_spine.core.notifications import RecordingNotifier
from client_spine.core.settings import clear_settings_cache
from client_spine.http.client import ApiClient, set_default_client
from client_spine.http.transport import PreparedRequest, TransportResponse


def json_response(status: int, body: Any = None, reason: str = "") -> TransportResponse:
    """Build a JSON TransportResponse."""
    content = b"" if body is None else json.dumps(body).encode()
    return TransportResponse(
        status=status,
        headers={"content-type": "application/json"},
        content=content,
        reason=reason,
    )


def text_response(status: int, text: str, content_type: str = "text/plain") -> TransportResponse:
    """Build a text TransportResponse."""
    return TransportResponse(status=status, headers={"content-type": content_type}, content=text.encode())


class FakeTransport:
    """Replays queued responses or errors, recording every request it sees.

    A queued item may be a TransportResponse, a CallError/Exception to raise,
    or a callable taking the request (for slow or custom behaviour).
    """

    def __init__(self) -> None:
        self.requests: list[PreparedRequest] = []
        self._script: list[Any] = []
        self.closed = False

    def queue(self, *items: Any) -> FakeTransport:
        self._script.extend(items)
        return self

    async def send(self, request: PreparedRequest) -> TransportResponse:
        self.requests.append(request)
        if not self._script:
            raise AssertionError(f"unexpected request: {request.method} {request.url}")
        item = self._script.pop(0) if len(self._script) > 1 else self._script[0]
        if isinstance(item, BaseException):
            raise item
        if callable(item):
            result = item(request)
            if asyncio.iscoroutine(result):
                result = await result
            return result
        return item

    def reset(self) -> None:
        self.requests.clear()
        self._script.clear()

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture(name="json_response")
def json_response_factory() -> Callable[..., TransportResponse]:
    return json_response


@pytest.fixture(name="text_response")
def text_response_factory() -> Callable[..., TransportResponse]:
    return text_response


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def no_sleep() -> AsyncMock:
    """Backoff sleep that returns immediately and records delays."""
    return AsyncMock(return_value=None)


@pytest.fixture
def make_client(fake_transport, notifier, no_sleep) -> Callable[..., ApiClient]:
    """Factory for an ApiClient wired to the fake transport."""

    def _make(**kwargs: Any) -> ApiClient:
        kwargs.setdefault("transport", fake_transport)
        kwargs.setdefault("notifier", notifier)
        kwargs.setdefault("sleep", no_sleep)
        return ApiClient("http://api.test/api", **kwargs)

    return _make


@pytest.fixture(autouse=True)
def _reset_globals(monkeypatch):
    """Isolate tests from the environment and from each other."""
    for key in [
        "CLIENT_SPINE_BASE_URL",
        "CLIENT_SPINE_AUTH_TOKEN",
        "CLIENT_SPINE_TIMEOUT",
        "CLIENT_SPINE_MAX_RETRIES",
        "CLIENT_SPINE_BASE_DELAY",
        "CLIENT_SPINE_MAX_DELAY",
        "CLIENT_SPINE_SHOW_NOTIFICATION",
        "CLIENT_SPINE_LOG_LEVEL",
        "CLIENT_SPINE_LOG_FORMAT",
    ]:
        monkeypatch.delenv(key, raising=False)
    clear_settings_cache()
    set_default_client(None)
    yield
    clear_settings_cache()
    set_default_client(None)
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()

