# ruff: noqa: D100,D101,D102,D103,D105,D107,INP001
from __future__ import annotations

import asyncio
import base64
import gzip
import inspect
from typing import Any, Callable

import pytest

from rapidbus.backend import feed_ws


def pytest_configure(config: pytest.Config) -> None:
    """Register custom pytest markers used across the suite."""

    if not config.pluginmanager.hasplugin("pytest_asyncio"):
        config.addinivalue_line(
            "markers", "asyncio: mark test as requiring asyncio event loop support."
        )


def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    """Execute async tests when pytest-asyncio is unavailable."""

    if pyfuncitem.config.pluginmanager.hasplugin("pytest_asyncio"):
        return None

    testfunction = pyfuncitem.obj
    if not inspect.iscoroutinefunction(testfunction):
        return None

    marker = pyfuncitem.get_closest_marker("asyncio")
    if marker is None:
        return None

    with asyncio.Runner(debug=False) as runner:
        runner.run(testfunction(**pyfuncitem.funcargs))
    return True


def gzip_b64(text: str) -> str:
    """Encode ``text`` the way the feed backend does."""

    return base64.b64encode(gzip.compress(text.encode("utf-8"))).decode("ascii")


@pytest.fixture
def encode_blob() -> Callable[[str], str]:
    """Return the base64(gzip(text)) encoder."""

    return gzip_b64


class FakeHTTPResponse:
    def __init__(self, status: int, body: Any, *, headers: dict[str, Any] | None = None) -> None:
        self.status = status
        self._body = body
        self.headers = headers or {}

    async def text(self) -> str:
        body = self._body
        if isinstance(body, BaseException):
            raise body
        if isinstance(body, bytes):
            return body.decode("utf-8", "ignore")
        return str(body or "")


class FakeGetContext:
    def __init__(self, response: FakeHTTPResponse) -> None:
        self._response = response

    async def __aenter__(self) -> FakeHTTPResponse:
        return self._response

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        return False


class FakeHTTPSession:
    """Minimal ``aiohttp.ClientSession`` double recording GET requests."""

    def __init__(self, response: FakeHTTPResponse | BaseException) -> None:
        self._response = response
        self.requests: list[tuple[str, dict[str, Any]]] = []
        self.closed = False

    def get(self, url: str, **kwargs: Any) -> FakeGetContext:
        self.requests.append((url, kwargs))
        if isinstance(self._response, BaseException):
            raise self._response
        return FakeGetContext(self._response)

    async def close(self) -> None:
        self.closed = True

    async def __aenter__(self) -> FakeHTTPSession:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        await self.close()
        return False


@pytest.fixture
def http_session_factory() -> Callable[..., FakeHTTPSession]:
    """Build fake HTTP sessions returning a fixed body or raising."""

    def _factory(
        body: Any = "",
        *,
        status: int = 200,
        error: BaseException | None = None,
    ) -> FakeHTTPSession:
        if error is not None:
            return FakeHTTPSession(error)
        return FakeHTTPSession(FakeHTTPResponse(status, body))

    return _factory


class StubAsyncClient:
    """Controllable stand-in for ``socketio.AsyncClient``."""

    instances: list[StubAsyncClient] = []

    def __init__(self, **kwargs: Any) -> None:
        self.kwargs = kwargs
        self.handlers: dict[str, Any] = {}
        self.connected = False
        self.connect_calls: list[tuple[str, dict[str, Any]]] = []
        self.emitted: list[tuple[str, Any]] = []
        self.connect_error: BaseException | None = None
        self.emit_error: BaseException | None = None
        self.disconnect_calls = 0
        StubAsyncClient.instances.append(self)

    def on(self, event: str, *, handler: Any, namespace: str | None = None) -> None:
        self.handlers[event] = handler

    async def connect(self, url: str, **kwargs: Any) -> None:
        self.connect_calls.append((url, kwargs))
        if self.connect_error is not None:
            raise self.connect_error
        self.connected = True
        await self.trigger("connect")

    async def emit(
        self,
        event: str,
        data: Any | None = None,
        *,
        namespace: str | None = None,
        callback: Any | None = None,
    ) -> None:
        if self.emit_error is not None:
            raise self.emit_error
        self.emitted.append((event, data))

    async def disconnect(self) -> None:
        self.disconnect_calls += 1
        was_connected = self.connected
        self.connected = False
        if was_connected:
            await self.trigger("disconnect", "client disconnect")

    async def trigger(self, event: str, *args: Any) -> None:
        """Deliver ``event`` the way the transport would."""

        handler = self.handlers.get(event)
        if handler is not None:
            await handler(*args)
        elif "*" in self.handlers:
            await self.handlers["*"](event, *args)


@pytest.fixture(autouse=True)
def sio_stub(monkeypatch: pytest.MonkeyPatch) -> type[StubAsyncClient]:
    """Patch ``socketio.AsyncClient`` with :class:`StubAsyncClient`."""

    StubAsyncClient.instances = []
    monkeypatch.setattr(feed_ws.socketio, "AsyncClient", StubAsyncClient)
    return StubAsyncClient


class RecordingReporter:
    """Reporter double collecting every notification in order."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, Any]] = []

    def message(self, decoded: Any) -> None:
        self.calls.append(("message", decoded))

    def binary(self, length: int) -> None:
        self.calls.append(("binary", length))

    def unrecognized(self, item: Any) -> None:
        self.calls.append(("unrecognized", item))

    def decode_failed(self, failure: Any) -> None:
        self.calls.append(("decode_failed", failure))

    def error(self, detail: Any) -> None:
        self.calls.append(("error", detail))

    def connect_failed(self, error: Exception) -> None:
        self.calls.append(("connect_failed", error))

    def emit_failed(self, error: Exception) -> None:
        self.calls.append(("emit_failed", error))

    def of(self, kind: str) -> list[Any]:
        return [value for name, value in self.calls if name == kind]


@pytest.fixture
def reporter() -> RecordingReporter:
    """Provide a fresh recording reporter."""

    return RecordingReporter()
