"""Live-phase orchestration: resolve, connect, keep alive."""

from __future__ import annotations

import logging

import aiohttp

from .api import SessionResolver
from .backend.feed_ws import ConnectError, ConnectionState, EmitError, FeedConnection
from .backend.keepalive import KeepAliveLoop
from .config import FeedSettings
from .reporter import LoggingReporter, Reporter

_LOGGER = logging.getLogger(__name__)


def _report(reporter: Reporter, method: str, error: Exception) -> None:
    try:
        getattr(reporter, method)(error)
    except Exception:
        _LOGGER.warning("WS: reporter %s hook failed for %s", method, error, exc_info=True)


async def run_live_feed(
    settings: FeedSettings | None = None,
    reporter: Reporter | None = None,
    *,
    http_session: aiohttp.ClientSession | None = None,
) -> ConnectionState:
    """Run one live phase and return the final connection state.

    The session is resolved once and shared by the handshake and every
    keep-alive refresh. The phase ends when an emission fails; nothing is
    retried, so a supervisor must call this again to restart.
    """

    settings = settings or FeedSettings()
    reporter = reporter or LoggingReporter()

    resolver = SessionResolver(
        http_session,
        dashboard_base=settings.dashboard_base,
        user_agent=settings.user_agent,
    )
    session = await resolver.resolve(settings.route_id)

    connection = FeedConnection(
        session,
        reporter,
        user_agent=settings.user_agent,
        socketio_path=settings.socketio_path,
    )
    try:
        try:
            await connection.connect(settings.feed_url)
        except ConnectError as err:
            _report(reporter, "connect_failed", err)
            return connection.state
        except EmitError as err:
            _report(reporter, "emit_failed", err)
            return connection.state

        keepalive = KeepAliveLoop(
            connection, session, reporter, interval=settings.refresh_interval
        )
        try:
            await keepalive.run()
        finally:
            await keepalive.stop()
    finally:
        await connection.close()
        if _LOGGER.isEnabledFor(logging.DEBUG):
            _LOGGER.debug("WS: live phase ended: %s", connection.snapshot())
    return connection.state


__all__ = ["run_live_feed"]
