"""Constants for the RapidBus live feed client."""

from __future__ import annotations

from typing import Final

# Dashboard (kiosk page) used to scrape the viewer session
DASHBOARD_BASE: Final = "https://myrapidbus.prasarana.com.my"
KIOSK_PATH_FMT: Final = "/kiosk/{route_id}"

# Socket.IO feed backend
FEED_URL: Final = "https://rapidbus-socketio-avl.prasarana.com.my"
SOCKETIO_PATH: Final = "socket.io"

# Socket.IO event names
EVENT_REFRESH: Final = "onFts-reload"
EVENT_FEED: Final = "onFts-client"
EVENT_ERROR: Final = "error"

# Session defaults applied when the kiosk page does not provide a field
DEFAULT_SID: Final = ""
DEFAULT_PROVIDER: Final = "rapidkl"
DEFAULT_ROUTE: Final = "300"

# The kiosk page only serves the session script to browser-looking clients
USER_AGENT: Final = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36"
)
ACCEPT_LANGUAGE: Final = "en-US,en;q=0.8"

# Keep-alive cadence (seconds)
REFRESH_INTERVAL: Final = 5.0

# Length of blob excerpts included in failure reports
EXCERPT_LENGTH: Final = 80


def kiosk_url(route_id: str, *, base: str = DASHBOARD_BASE) -> str:
    """Return the kiosk page URL for ``route_id``."""

    return f"{base.rstrip('/')}{KIOSK_PATH_FMT.format(route_id=route_id)}"
