"""Socket.IO connection to the RapidBus position feed."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Mapping
from enum import StrEnum
import logging
from typing import Any

import aiohttp
import socketio

from ..codecs.feed_models import (
    BinaryItem,
    DecodeFailure,
    RefreshRequest,
    Session,
    StructuredMessage,
    TextItem,
)
from ..codecs.payload_codec import PayloadDecoder
from ..const import (
    ACCEPT_LANGUAGE,
    EVENT_ERROR,
    EVENT_FEED,
    EVENT_REFRESH,
    SOCKETIO_PATH,
    USER_AGENT,
)
from ..reporter import Reporter
from .sanitize import mask_identifier
from .ws_health import FeedHealthTracker

_LOGGER = logging.getLogger(__name__)

_EventHandler = Callable[..., Awaitable[None]]


class ConnectionState(StrEnum):
    """Lifecycle of a feed connection; ``terminated`` is final."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    TERMINATED = "terminated"


class ConnectError(RuntimeError):
    """Raised when the Socket.IO transport cannot be established."""

    def __init__(self, url: str, detail: str) -> None:
        super().__init__(f"connect to {url} failed: {detail}")
        self.url = url
        self.detail = detail


class EmitError(RuntimeError):
    """Raised when an outbound event could not be sent."""

    def __init__(self, event: str, reason: str) -> None:
        super().__init__(f"emit {event} failed: {reason}")
        self.event = event
        self.reason = reason


class FeedConnection:
    """Own one Socket.IO connection and route its events.

    Inbound events reach :meth:`handle_event`, which dispatches through a
    fixed table. All handler-visible state lives on the instance.
    """

    def __init__(
        self,
        session: Session,
        reporter: Reporter,
        *,
        decoder: PayloadDecoder | None = None,
        user_agent: str = USER_AGENT,
        socketio_path: str = SOCKETIO_PATH,
        http_session: aiohttp.ClientSession | None = None,
    ) -> None:
        """Initialise the connection container without connecting."""
        self.session = session
        self._reporter = reporter
        self._decoder = decoder or PayloadDecoder()
        self._user_agent = user_agent or USER_AGENT
        self._socketio_path = socketio_path or SOCKETIO_PATH
        self._state = ConnectionState.DISCONNECTED
        self._health = FeedHealthTracker()
        self._url: str | None = None

        self._sio = socketio.AsyncClient(
            reconnection=False,
            logger=_LOGGER.getChild("socketio"),
            engineio_logger=_LOGGER.getChild("engineio"),
            http_session=http_session,
        )
        self._handlers: Mapping[str, _EventHandler] = {
            "connect": self._on_connect,
            "disconnect": self._on_disconnect,
            "connect_error": self._on_connect_error,
            EVENT_ERROR: self._on_error,
            EVENT_FEED: self._on_feed,
        }
        for event in self._handlers:
            self._sio.on(event, handler=self._route(event))
        self._sio.on("*", handler=self.handle_event)

    def _route(self, event: str) -> _EventHandler:
        """Return a transport callback forwarding ``event`` to the dispatcher."""

        async def _forward(*args: Any) -> None:
            await self.handle_event(event, *args)

        return _forward

    @property
    def state(self) -> ConnectionState:
        """Return the current lifecycle state."""

        return self._state

    @property
    def connected(self) -> bool:
        """Return True while the connection can carry emissions."""

        return self._state is ConnectionState.CONNECTED and bool(self._sio.connected)

    def _headers(self) -> dict[str, str]:
        return {
            "User-Agent": self._user_agent,
            "Accept-Language": ACCEPT_LANGUAGE,
        }

    def _set_state(self, state: ConnectionState) -> bool:
        """Move to ``state`` unless already terminated."""

        if self._state is state:
            return False
        if self._state is ConnectionState.TERMINATED:
            return False
        _LOGGER.debug("WS: state %s -> %s", self._state, state)
        self._state = state
        self._health.update_status(str(state))
        return True

    # ------------------------------------------------------------------
    # Public control
    # ------------------------------------------------------------------
    async def connect(self, server_url: str) -> FeedConnection:
        """Open the transport and send the initial subscription request."""

        if self._state is not ConnectionState.DISCONNECTED:
            raise ConnectError(server_url, f"connection is {self._state}")
        self._url = server_url
        self._set_state(ConnectionState.CONNECTING)
        _LOGGER.info("WS: connecting to %s", server_url)
        try:
            await self._sio.connect(
                server_url,
                headers=self._headers(),
                transports=["websocket"],
                socketio_path=self._socketio_path,
                wait=True,
                wait_timeout=15,
            )
        except asyncio.CancelledError:
            self._set_state(ConnectionState.TERMINATED)
            raise
        except Exception as err:
            self._set_state(ConnectionState.TERMINATED)
            _LOGGER.debug("WS: connection error details", exc_info=True)
            raise ConnectError(server_url, str(err) or type(err).__name__) from err

        self._set_state(ConnectionState.CONNECTED)
        await self.send_refresh(RefreshRequest.from_session(self.session), reason="handshake")
        return self

    async def send_refresh(
        self, request: RefreshRequest, *, reason: str = "keep-alive"
    ) -> None:
        """Emit an ``onFts-reload`` request on the live connection."""

        if self._state is not ConnectionState.CONNECTED:
            raise EmitError(EVENT_REFRESH, f"connection is {self._state}")
        if not self.connected:
            self._set_state(ConnectionState.TERMINATED)
            raise EmitError(EVENT_REFRESH, "websocket not connected")
        try:
            await self._sio.emit(EVENT_REFRESH, request.as_payload())
        except asyncio.CancelledError:
            raise
        except Exception as err:
            self._set_state(ConnectionState.TERMINATED)
            raise EmitError(EVENT_REFRESH, f"{type(err).__name__}: {err}") from err
        self._health.mark_refresh()
        if _LOGGER.isEnabledFor(logging.DEBUG):
            _LOGGER.debug(
                "WS: %s emitted (%s) sid=%s provider=%s route=%s",
                EVENT_REFRESH,
                reason,
                mask_identifier(request.sid) or "<empty>",
                request.provider,
                request.route,
            )

    async def close(self) -> None:
        """Disconnect the transport; safe to call repeatedly."""

        if self._sio.connected:
            try:
                await self._sio.disconnect()
            except Exception:
                _LOGGER.debug("WS: disconnect failed", exc_info=True)
        self._set_state(ConnectionState.TERMINATED)

    def snapshot(self) -> dict[str, Any]:
        """Return connection health and counters."""

        data = self._health.snapshot()
        data["url"] = self._url
        data["sid"] = mask_identifier(self.session.sid)
        data["provider"] = self.session.provider
        data["route"] = self.session.route
        return data

    # ------------------------------------------------------------------
    # Event dispatch
    # ------------------------------------------------------------------
    async def handle_event(self, event: str, *args: Any) -> None:
        """Dispatch an inbound transport event."""

        handler = self._handlers.get(event)
        if handler is None:
            if _LOGGER.isEnabledFor(logging.DEBUG):
                _LOGGER.debug("WS: ignoring event %s args=%s", event, args)
            return
        await handler(*args)

    async def _on_connect(self, *_: Any) -> None:
        _LOGGER.info("WS: connected")
        self._set_state(ConnectionState.CONNECTED)

    async def _on_disconnect(self, reason: Any | None = None, *_: Any) -> None:
        _LOGGER.info("WS: disconnected (%s)", reason or "no reason given")
        self._set_state(ConnectionState.TERMINATED)

    async def _on_connect_error(self, data: Any | None = None, *_: Any) -> None:
        self._health.mark_error(data)
        self._notify("error", data)

    async def _on_error(self, data: Any | None = None, *rest: Any) -> None:
        detail = (data, *rest) if rest else data
        if _LOGGER.isEnabledFor(logging.DEBUG):
            _LOGGER.debug("WS: error event payload: %s", detail)
        self._health.mark_error(detail)
        self._notify("error", detail)

    async def _on_feed(self, *items: Any) -> None:
        self._health.mark_event(len(items))
        for item in items:
            try:
                self._handle_item(item)
            except asyncio.CancelledError:
                raise
            except Exception:
                self._health.stats.item_failures += 1
                _LOGGER.warning(
                    "WS: failed to handle %s item", type(item).__name__, exc_info=True
                )

    def _handle_item(self, item: Any) -> None:
        """Decode or summarise a single inbound item for the reporter."""

        stats = self._health.stats
        inbound = self._decoder.classify(item)
        if isinstance(inbound, TextItem):
            result = self._decoder.decode(inbound.text)
            if isinstance(result, DecodeFailure):
                stats.decode_failures += 1
                self._notify("decode_failed", result)
                return
            if isinstance(result, StructuredMessage):
                stats.structured_total += 1
            else:
                stats.raw_total += 1
            self._notify("message", result)
        elif isinstance(inbound, BinaryItem):
            stats.binary_total += 1
            self._notify("binary", inbound.length)
        else:
            stats.unrecognized_total += 1
            self._notify("unrecognized", inbound.value)

    def _notify(self, method: str, value: Any) -> None:
        """Call a reporter hook without letting it break the connection."""

        try:
            getattr(self._reporter, method)(value)
        except Exception:
            _LOGGER.warning("WS: reporter %s hook failed", method, exc_info=True)


async def connect(
    server_url: str,
    session: Session,
    reporter: Reporter,
    **kwargs: Any,
) -> FeedConnection:
    """Create a :class:`FeedConnection` and connect it to ``server_url``."""

    connection = FeedConnection(session, reporter, **kwargs)
    try:
        await connection.connect(server_url)
    except EmitError:
        await connection.close()
        raise
    return connection


__all__ = [
    "ConnectError",
    "ConnectionState",
    "EmitError",
    "FeedConnection",
    "connect",
]
