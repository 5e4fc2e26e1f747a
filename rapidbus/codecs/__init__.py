"""Codecs for RapidBus feed payloads."""

from __future__ import annotations

from .feed_models import (
    BinaryItem,
    DecodeFailure,
    DecodeStage,
    RawMessage,
    RefreshRequest,
    Session,
    StructuredMessage,
    TextItem,
    UnrecognizedItem,
)
from .payload_codec import PayloadDecodeError, PayloadDecoder, decode_payload

__all__ = [
    "BinaryItem",
    "DecodeFailure",
    "DecodeStage",
    "PayloadDecodeError",
    "PayloadDecoder",
    "RawMessage",
    "RefreshRequest",
    "Session",
    "StructuredMessage",
    "TextItem",
    "UnrecognizedItem",
    "decode_payload",
]
