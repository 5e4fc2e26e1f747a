"""Consumers of decoded feed messages and failures."""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol, runtime_checkable

from .backend.sanitize import redact_text
from .codecs.feed_models import (
    DecodedMessage,
    DecodeFailure,
    RawMessage,
    StructuredMessage,
)

_LOGGER = logging.getLogger(__name__)


@runtime_checkable
class Reporter(Protocol):
    """Receive everything the live feed produces."""

    def message(self, decoded: DecodedMessage) -> None:
        """Handle a decoded feed message."""

    def binary(self, length: int) -> None:
        """Handle a binary item; only its length is known."""

    def unrecognized(self, item: Any) -> None:
        """Handle an inbound item of unexpected shape."""

    def decode_failed(self, failure: DecodeFailure) -> None:
        """Handle a blob dropped by the decoder."""

    def error(self, detail: Any) -> None:
        """Handle an error event reported by the transport."""

    def connect_failed(self, error: Exception) -> None:
        """Handle a failed connection attempt."""

    def emit_failed(self, error: Exception) -> None:
        """Handle a failed subscription emission."""


class LoggingReporter:
    """Write feed output to a logger."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or _LOGGER

    def message(self, decoded: DecodedMessage) -> None:
        if isinstance(decoded, StructuredMessage):
            try:
                text = json.dumps(decoded.value, indent=2, ensure_ascii=False)
            except (TypeError, ValueError):
                text = repr(decoded.value)
            self._logger.info("Live bus data:\n%s", text)
        elif isinstance(decoded, RawMessage):
            self._logger.info("Raw data:\n%s", decoded.text)

    def binary(self, length: int) -> None:
        self._logger.info("Binary data: %d bytes", length)

    def unrecognized(self, item: Any) -> None:
        try:
            text = json.dumps(item, indent=2, ensure_ascii=False)
        except (TypeError, ValueError):
            text = repr(item)
        self._logger.info("Non-string data (%s): %s", type(item).__name__, text)

    def decode_failed(self, failure: DecodeFailure) -> None:
        self._logger.warning(
            "Failed to decode %d-char payload at %s stage (%s): %s",
            failure.length,
            failure.stage,
            failure.detail,
            failure.excerpt,
        )

    def error(self, detail: Any) -> None:
        self._logger.error("Feed error: %s", redact_text(str(detail)))

    def connect_failed(self, error: Exception) -> None:
        self._logger.error("Failed to connect: %s", redact_text(str(error)))

    def emit_failed(self, error: Exception) -> None:
        self._logger.error("Failed to emit: %s", error)


__all__ = ["LoggingReporter", "Reporter"]
