"""Codec for inbound ``onFts-client`` payload items."""

from __future__ import annotations

import base64
import binascii
import gzip
import json
import logging
from typing import Any
import zlib

from ..const import EXCERPT_LENGTH
from .feed_models import (
    BinaryItem,
    DecodeFailure,
    DecodeResult,
    DecodeStage,
    InboundItem,
    RawMessage,
    StructuredMessage,
    TextItem,
    UnrecognizedItem,
)

_LOGGER = logging.getLogger(__name__)


class PayloadDecodeError(ValueError):
    """Raised by a decode stage that rejected its input."""

    def __init__(self, stage: DecodeStage, detail: str) -> None:
        super().__init__(f"{stage} decode failed: {detail}")
        self.stage = stage
        self.detail = detail


def excerpt(text: str, limit: int = EXCERPT_LENGTH) -> str:
    """Return ``text`` shortened to ``limit`` characters for reports."""

    if len(text) <= limit:
        return text
    return f"{text[:limit]}..."


def decode_base64(blob: str) -> bytes:
    """Reverse a standard, padded base64 encoding."""

    try:
        return base64.b64decode(blob, validate=True)
    except (binascii.Error, ValueError) as err:
        raise PayloadDecodeError(DecodeStage.BASE64, str(err)) from err


def decompress_text(data: bytes) -> str:
    """Gunzip ``data`` and return it as UTF-8 text."""

    if not data:
        raise PayloadDecodeError(DecodeStage.GZIP, "empty gzip stream")
    try:
        raw = gzip.decompress(data)
    except (OSError, EOFError, zlib.error) as err:
        raise PayloadDecodeError(DecodeStage.GZIP, str(err)) from err
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as err:
        raise PayloadDecodeError(DecodeStage.GZIP, f"invalid UTF-8: {err}") from err


def parse_text(text: str) -> StructuredMessage | RawMessage:
    """Return the JSON value of ``text`` or the text itself."""

    try:
        return StructuredMessage(json.loads(text))
    except (ValueError, RecursionError):
        return RawMessage(text)


def decode_payload(blob: str) -> DecodeResult:
    """Decode a base64(gzip(text)) blob.

    Never raises for malformed input: base64 and gzip failures are returned
    as :class:`DecodeFailure`, text that is not JSON as :class:`RawMessage`.
    """

    try:
        return parse_text(decompress_text(decode_base64(blob)))
    except PayloadDecodeError as err:
        if _LOGGER.isEnabledFor(logging.DEBUG):
            _LOGGER.debug("Payload rejected at %s stage: %s", err.stage, err.detail)
        return DecodeFailure(
            stage=err.stage,
            excerpt=excerpt(blob),
            detail=err.detail,
            length=len(blob),
        )


def classify_item(item: Any) -> InboundItem:
    """Map a raw inbound item onto its tagged variant."""

    if isinstance(item, str):
        return TextItem(item)
    if isinstance(item, memoryview):
        return BinaryItem(item.nbytes)
    if isinstance(item, (bytes, bytearray)):
        return BinaryItem(len(item))
    return UnrecognizedItem(item)


class PayloadDecoder:
    """Stateless decoder owned by a feed connection."""

    def decode(self, blob: str) -> DecodeResult:
        """Decode a single text blob."""

        return decode_payload(blob)

    def classify(self, item: Any) -> InboundItem:
        """Classify a single inbound item."""

        return classify_item(item)


__all__ = [
    "PayloadDecodeError",
    "PayloadDecoder",
    "classify_item",
    "decode_base64",
    "decode_payload",
    "decompress_text",
    "excerpt",
    "parse_text",
]
