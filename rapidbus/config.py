"""Runtime configuration for the live feed client."""

from __future__ import annotations

from collections.abc import Mapping
import os
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .const import (
    DASHBOARD_BASE,
    DEFAULT_ROUTE,
    FEED_URL,
    REFRESH_INTERVAL,
    SOCKETIO_PATH,
    USER_AGENT,
    kiosk_url,
)

ENV_PREFIX = "RAPIDBUS_"


class FeedSettings(BaseModel):
    """Hosts, route and cadence used by one live-feed run."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    dashboard_base: str = DASHBOARD_BASE
    route_id: str = DEFAULT_ROUTE
    feed_url: str = FEED_URL
    socketio_path: str = SOCKETIO_PATH
    refresh_interval: float = Field(default=REFRESH_INTERVAL, gt=0)
    user_agent: str = USER_AGENT

    @field_validator("dashboard_base", "feed_url", mode="before")
    @classmethod
    def _strip_trailing_slash(cls, value: Any) -> Any:
        """Normalise base URLs so paths can be appended directly."""

        if isinstance(value, str):
            stripped = value.strip().rstrip("/")
            if not stripped:
                raise ValueError("URL must not be empty")
            return stripped
        return value

    @field_validator("route_id", mode="before")
    @classmethod
    def _stringify_route(cls, value: Any) -> Any:
        """Accept numeric route identifiers."""

        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped:
                raise ValueError("route_id must not be empty")
            return stripped
        return value

    @field_validator("socketio_path", mode="before")
    @classmethod
    def _strip_path(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().strip("/") or SOCKETIO_PATH
        return value

    @property
    def kiosk_url(self) -> str:
        """Return the kiosk page scraped for the session."""

        return kiosk_url(self.route_id, base=self.dashboard_base)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> FeedSettings:
        """Build settings from a mapping, ignoring blank values."""

        if not data:
            return cls()
        cleaned = {
            key: value
            for key, value in data.items()
            if value is not None and not (isinstance(value, str) and not value.strip())
        }
        return cls.model_validate(cleaned)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> FeedSettings:
        """Build settings from ``RAPIDBUS_*`` environment variables."""

        source = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        for name in cls.model_fields:
            key = f"{ENV_PREFIX}{name.upper()}"
            if key in source:
                values[name] = source[key]
        return cls.from_mapping(values)


__all__ = ["ENV_PREFIX", "FeedSettings"]
