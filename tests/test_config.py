"""Tests for :class:`FeedSettings`."""

from __future__ import annotations

from pydantic import ValidationError
import pytest

from rapidbus import const
from rapidbus.config import FeedSettings


def test_defaults_match_constants() -> None:
    settings = FeedSettings()

    assert settings.dashboard_base == const.DASHBOARD_BASE
    assert settings.feed_url == const.FEED_URL
    assert settings.route_id == "300"
    assert settings.refresh_interval == 5.0
    assert settings.kiosk_url == "https://myrapidbus.prasarana.com.my/kiosk/300"


def test_urls_are_normalised() -> None:
    settings = FeedSettings(dashboard_base=" https://kiosk.test/ ", feed_url="https://f.test/")

    assert settings.dashboard_base == "https://kiosk.test"
    assert settings.feed_url == "https://f.test"
    assert settings.kiosk_url == "https://kiosk.test/kiosk/300"


def test_numeric_route_is_stringified() -> None:
    assert FeedSettings(route_id=402).route_id == "402"


@pytest.mark.parametrize(
    "overrides",
    [
        {"refresh_interval": 0},
        {"refresh_interval": -1},
        {"route_id": "  "},
        {"feed_url": "/"},
    ],
)
def test_invalid_values_are_rejected(overrides) -> None:
    with pytest.raises(ValidationError):
        FeedSettings(**overrides)


def test_settings_are_frozen() -> None:
    settings = FeedSettings()

    with pytest.raises(ValidationError):
        settings.route_id = "T789"


def test_from_mapping_skips_blank_values() -> None:
    settings = FeedSettings.from_mapping(
        {"route_id": "T789", "feed_url": "", "user_agent": None, "unknown": "x"}
    )

    assert settings.route_id == "T789"
    assert settings.feed_url == const.FEED_URL
    assert settings.user_agent == const.USER_AGENT


def test_from_mapping_none_returns_defaults() -> None:
    assert FeedSettings.from_mapping(None) == FeedSettings()


def test_from_env_reads_prefixed_variables() -> None:
    settings = FeedSettings.from_env(
        {
            "RAPIDBUS_ROUTE_ID": "T789",
            "RAPIDBUS_REFRESH_INTERVAL": "2.5",
            "RAPIDBUS_SOCKETIO_PATH": "/socket.io/",
            "ROUTE_ID": "ignored",
        }
    )

    assert settings.route_id == "T789"
    assert settings.refresh_interval == 2.5
    assert settings.socketio_path == "socket.io"


def test_from_env_uses_process_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RAPIDBUS_FEED_URL", "https://env.test/")

    assert FeedSettings.from_env().feed_url == "https://env.test"
