"""Feed connection health tracking primitives."""

from __future__ import annotations

from dataclasses import dataclass, field
import time
from typing import Any


@dataclass
class FeedStats:
    """Track inbound event and item counts."""

    events_total: int = 0
    items_total: int = 0
    structured_total: int = 0
    raw_total: int = 0
    binary_total: int = 0
    unrecognized_total: int = 0
    decode_failures: int = 0
    item_failures: int = 0
    refreshes_total: int = 0
    errors_total: int = 0


@dataclass
class FeedHealthTracker:
    """Track connection status, payload freshness and refresh timestamps."""

    status: str = "disconnected"
    connected_since: float | None = None
    last_status_at: float | None = None
    last_payload_at: float | None = None
    last_refresh_at: float | None = None
    last_error: str | None = None
    stats: FeedStats = field(default_factory=FeedStats)

    def update_status(self, status: str, *, timestamp: float | None = None) -> bool:
        """Update the tracked status and return True if it changed."""

        now = timestamp or time.time()
        if status == self.status:
            return False
        self.status = status
        self.last_status_at = now
        if status == "connected":
            self.connected_since = now
        return True

    def mark_event(self, item_count: int, *, timestamp: float | None = None) -> None:
        """Record an inbound feed event carrying ``item_count`` items."""

        self.stats.events_total += 1
        self.stats.items_total += item_count
        self.last_payload_at = timestamp or time.time()

    def mark_refresh(self, *, timestamp: float | None = None) -> None:
        """Record a successful subscription refresh emission."""

        self.stats.refreshes_total += 1
        self.last_refresh_at = timestamp or time.time()

    def mark_error(self, detail: Any) -> None:
        """Record an error reported by the transport."""

        self.stats.errors_total += 1
        self.last_error = str(detail)

    def connected_seconds(self, *, now: float | None = None) -> float:
        """Return the number of seconds since the connection was established."""

        if self.connected_since is None or self.status != "connected":
            return 0.0
        current = now or time.time()
        return max(0.0, current - self.connected_since)

    def snapshot(self, *, now: float | None = None) -> dict[str, Any]:
        """Return a serializable snapshot of the tracker state."""

        current = now or time.time()
        stats = self.stats
        return {
            "status": self.status,
            "connected_since": self.connected_since,
            "connected_seconds": self.connected_seconds(now=current),
            "last_status_at": self.last_status_at,
            "last_payload_at": self.last_payload_at,
            "last_refresh_at": self.last_refresh_at,
            "last_error": self.last_error,
            "events_total": stats.events_total,
            "items_total": stats.items_total,
            "structured_total": stats.structured_total,
            "raw_total": stats.raw_total,
            "binary_total": stats.binary_total,
            "unrecognized_total": stats.unrecognized_total,
            "decode_failures": stats.decode_failures,
            "item_failures": stats.item_failures,
            "refreshes_total": stats.refreshes_total,
            "errors_total": stats.errors_total,
        }


__all__ = ["FeedHealthTracker", "FeedStats"]
