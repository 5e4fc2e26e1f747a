"""Live vehicle-position feed client for the RapidKL bus dashboard."""

from __future__ import annotations

from .api import SessionResolver, extract_session
from .backend.feed_ws import (
    ConnectError,
    ConnectionState,
    EmitError,
    FeedConnection,
    connect,
)
from .backend.keepalive import KeepAliveLoop
from .codecs.feed_models import RefreshRequest, Session
from .codecs.payload_codec import PayloadDecoder, decode_payload
from .config import FeedSettings
from .reporter import LoggingReporter, Reporter
from .runtime import run_live_feed

__all__ = [
    "ConnectError",
    "ConnectionState",
    "EmitError",
    "FeedConnection",
    "FeedSettings",
    "KeepAliveLoop",
    "LoggingReporter",
    "PayloadDecoder",
    "RefreshRequest",
    "Reporter",
    "Session",
    "SessionResolver",
    "connect",
    "decode_payload",
    "extract_session",
    "run_live_feed",
]
