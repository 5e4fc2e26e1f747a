"""Backend package exports."""
from __future__ import annotations

from typing import Any

from .ws_health import FeedHealthTracker, FeedStats

__all__ = [
    "ConnectError",
    "ConnectionState",
    "EmitError",
    "FeedConnection",
    "FeedHealthTracker",
    "FeedStats",
    "KeepAliveLoop",
]


def __getattr__(name: str) -> Any:
    """Lazily import connection classes to avoid circular imports."""

    if name in {"ConnectError", "ConnectionState", "EmitError", "FeedConnection"}:
        from . import feed_ws

        value = getattr(feed_ws, name)
        globals()[name] = value
        return value
    if name == "KeepAliveLoop":
        from .keepalive import KeepAliveLoop

        globals()[name] = KeepAliveLoop
        return KeepAliveLoop
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
