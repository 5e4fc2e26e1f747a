"""Kiosk page scraping for the feed session."""

from __future__ import annotations

import asyncio
import logging
import re

import aiohttp

from .backend.sanitize import mask_identifier, redact_text, sanitise_headers
from .codecs.feed_models import Session
from .const import (
    ACCEPT_LANGUAGE,
    DASHBOARD_BASE,
    DEFAULT_PROVIDER,
    DEFAULT_ROUTE,
    DEFAULT_SID,
    USER_AGENT,
    kiosk_url,
)

_LOGGER = logging.getLogger(__name__)

# Toggle to preview page bodies in debug logs (redacted). Leave False by default.
API_LOG_PREVIEW = False

_SID_RE = re.compile(r"var\s+sid\s*=\s*'([^']+)'")
_PROVIDER_RE = re.compile(r"var\s+prm\s*=\s*'([^']*)'")
_ROUTE_RE = re.compile(r"var\s+no_route\s*=\s*'([^']*)'")


def _search(pattern: re.Pattern[str], html: str) -> str | None:
    match = pattern.search(html)
    if match is None:
        return None
    return match.group(1)


def extract_session(html: str | None) -> Session:
    """Extract the session fields from a kiosk page body.

    Each field is matched independently; a missing assignment falls back to
    its default without affecting the others. An assignment present with an
    empty value is kept as an empty string.
    """

    body = html or ""
    sid = _search(_SID_RE, body)
    provider = _search(_PROVIDER_RE, body)
    route = _search(_ROUTE_RE, body)
    return Session(
        sid=DEFAULT_SID if sid is None else sid,
        provider=DEFAULT_PROVIDER if provider is None else provider,
        route=DEFAULT_ROUTE if route is None else route,
    )


class SessionResolver:
    """Resolve the viewer session from the per-route kiosk page."""

    def __init__(
        self,
        session: aiohttp.ClientSession | None = None,
        *,
        dashboard_base: str = DASHBOARD_BASE,
        user_agent: str = USER_AGENT,
    ) -> None:
        """Initialise the resolver.

        When ``session`` is omitted a short-lived client with its own cookie
        jar is created for each resolution and closed afterwards.
        """
        self._session = session
        self._dashboard_base = dashboard_base.rstrip("/") if dashboard_base else DASHBOARD_BASE
        self._user_agent = user_agent or USER_AGENT

    @property
    def headers(self) -> dict[str, str]:
        """Return the browser-like request headers."""

        return {
            "User-Agent": self._user_agent,
            "Accept-Language": ACCEPT_LANGUAGE,
        }

    def _new_client(self) -> aiohttp.ClientSession:
        return aiohttp.ClientSession(
            cookie_jar=aiohttp.CookieJar(),
            headers=self.headers,
        )

    async def resolve(self, route_id: str) -> Session:
        """Return the session for ``route_id``, degrading to defaults."""

        url = kiosk_url(route_id, base=self._dashboard_base)
        try:
            html = await self.fetch_page(url)
        except asyncio.CancelledError:
            raise
        except Exception as err:
            _LOGGER.warning(
                "HTTP GET %s failed (%s: %s); using default session",
                url,
                type(err).__name__,
                redact_text(str(err)),
            )
            _LOGGER.debug("HTTP kiosk fetch error details", exc_info=True)
            html = ""

        session = extract_session(html)
        _LOGGER.info(
            "Resolved session sid=%s provider=%s route=%s",
            mask_identifier(session.sid) or "<empty>",
            session.provider,
            session.route,
        )
        return session

    async def fetch_page(self, url: str) -> str:
        """Fetch the kiosk page body."""

        if self._session is not None:
            return await self._get_text(self._session, url)
        async with self._new_client() as client:
            return await self._get_text(client, url)

    async def _get_text(self, client: aiohttp.ClientSession, url: str) -> str:
        _LOGGER.debug("HTTP GET %s", url)
        async with client.get(url, headers=self.headers) as resp:
            body = await resp.text()
            if resp.status >= 400:
                _LOGGER.warning(
                    "HTTP error GET %s -> %s; scanning body anyway", url, resp.status
                )
            elif API_LOG_PREVIEW:
                _LOGGER.debug(
                    "HTTP %s -> %s, headers=%s, body[0:200]=%r",
                    url,
                    resp.status,
                    sanitise_headers(resp.headers),
                    redact_text(body)[:200],
                )
            else:
                _LOGGER.debug("HTTP %s -> %s", url, resp.status)
            return body


__all__ = ["SessionResolver", "extract_session"]
