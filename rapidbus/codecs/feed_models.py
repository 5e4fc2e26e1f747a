"""Models for the RapidBus feed session, requests and decoded payloads."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from ..const import DEFAULT_PROVIDER, DEFAULT_ROUTE, DEFAULT_SID


class Session(BaseModel):
    """Viewer session scraped from the kiosk page.

    ``sid`` identifies the dashboard visit; ``provider`` and ``route`` select
    the operator and line the feed backend should push.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    sid: str = DEFAULT_SID
    provider: str = DEFAULT_PROVIDER
    route: str = DEFAULT_ROUTE

    @field_validator("sid", "provider", "route", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        """Convert numeric fields to strings for consistency."""

        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class RefreshRequest(BaseModel):
    """Payload of the ``onFts-reload`` subscription request."""

    model_config = ConfigDict(frozen=True)

    sid: str
    uid: str = ""
    provider: str
    route: str

    @classmethod
    def from_session(cls, session: Session) -> RefreshRequest:
        """Build the request for ``session``."""

        return cls(sid=session.sid, provider=session.provider, route=session.route)

    def as_payload(self) -> dict[str, str]:
        """Return the JSON object sent on the wire."""

        return self.model_dump()


class DecodeStage(StrEnum):
    """Pipeline stage at which an inbound blob was rejected."""

    BASE64 = "base64"
    GZIP = "gzip"


@dataclass(frozen=True, slots=True)
class StructuredMessage:
    """Decoded payload whose text parsed as JSON."""

    value: Any


@dataclass(frozen=True, slots=True)
class RawMessage:
    """Decoded payload that is plain text."""

    text: str


@dataclass(frozen=True, slots=True)
class DecodeFailure:
    """A single blob that could not be decoded."""

    stage: DecodeStage
    excerpt: str
    detail: str = ""
    length: int = 0


DecodedMessage = StructuredMessage | RawMessage
DecodeResult = StructuredMessage | RawMessage | DecodeFailure


@dataclass(frozen=True, slots=True)
class TextItem:
    """Inbound item carrying a base64(gzip(text)) blob."""

    text: str


@dataclass(frozen=True, slots=True)
class BinaryItem:
    """Inbound binary attachment; only its size is used."""

    length: int


@dataclass(frozen=True, slots=True)
class UnrecognizedItem:
    """Inbound item of any other shape."""

    value: Any = field(repr=False)

    @property
    def type_name(self) -> str:
        return type(self.value).__name__


InboundItem = TextItem | BinaryItem | UnrecognizedItem


__all__ = [
    "BinaryItem",
    "DecodeFailure",
    "DecodeResult",
    "DecodeStage",
    "DecodedMessage",
    "InboundItem",
    "RawMessage",
    "RefreshRequest",
    "Session",
    "StructuredMessage",
    "TextItem",
    "UnrecognizedItem",
]
