"""Periodic subscription refresh for a live feed connection."""

from __future__ import annotations

import asyncio
from contextlib import suppress
import logging

from ..codecs.feed_models import RefreshRequest, Session
from ..const import REFRESH_INTERVAL
from ..reporter import Reporter
from .feed_ws import EmitError, FeedConnection

_LOGGER = logging.getLogger(__name__)


class KeepAliveLoop:
    """Re-emit the subscription request until an emission fails.

    The refresh doubles as a liveness probe: the first failed emission stops
    the loop for good and is reported once. The loop never reconnects.
    """

    def __init__(
        self,
        connection: FeedConnection,
        session: Session,
        reporter: Reporter,
        *,
        interval: float = REFRESH_INTERVAL,
    ) -> None:
        self._connection = connection
        self._request = RefreshRequest.from_session(session)
        self._reporter = reporter
        self._interval = interval
        self._stopped = False
        self._task: asyncio.Task | None = None
        self.ticks = 0
        self.last_error: EmitError | None = None

    @property
    def stopped(self) -> bool:
        """Return True once the loop has terminated."""

        return self._stopped

    async def run(self) -> None:
        """Emit one refresh per interval until stopped."""

        _LOGGER.debug("WS: keep-alive started (every %.1f s)", self._interval)
        while not self._stopped:
            await asyncio.sleep(self._interval)
            if self._stopped:
                break
            try:
                await self._connection.send_refresh(self._request)
            except EmitError as err:
                self._fail(err)
                break
            self.ticks += 1

    def _fail(self, err: EmitError) -> None:
        """Stop permanently, reporting only the first failure."""

        if self._stopped:
            return
        self._stopped = True
        self.last_error = err
        _LOGGER.info("WS: keep-alive stopped after %d refreshes (%s)", self.ticks, err)
        try:
            self._reporter.emit_failed(err)
        except Exception:
            _LOGGER.warning("WS: reporter emit_failed hook failed", exc_info=True)

    def start(self) -> asyncio.Task:
        """Run the loop as a background task."""

        if self._task and not self._task.done():
            return self._task
        self._task = asyncio.get_running_loop().create_task(
            self.run(), name="rapidbus-keepalive"
        )
        return self._task

    async def stop(self) -> None:
        """Cancel the background task without reporting a failure."""

        self._stopped = True
        if self._task:
            self._task.cancel()
            with suppress(asyncio.CancelledError):
                await self._task
            self._task = None


__all__ = ["KeepAliveLoop"]
