"""Shared sanitisation helpers for log output."""

from __future__ import annotations

from collections.abc import Mapping
import re
from typing import Any

_SID_ASSIGN_RE = re.compile(r"(var\s+sid\s*=\s*')([^']+)(')")
_QUERY_SECRET_RE = re.compile(r"(?i)\b(sid|token|session)=([^&\s;]+)")
_EMAIL_RE = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")
_COOKIE_ATTRS = frozenset({"path", "domain", "expires", "max-age", "samesite"})


def redact_text(value: str | None) -> str:
    """Return ``value`` with session ids, query secrets and emails removed."""

    if not value:
        return ""
    text = str(value)
    redacted = _SID_ASSIGN_RE.sub(lambda match: f"{match.group(1)}***{match.group(3)}", text)
    redacted = _QUERY_SECRET_RE.sub(lambda match: f"{match.group(1)}=***", redacted)
    return _EMAIL_RE.sub("***@***", redacted)


def redact_cookie(value: str | None) -> str:
    """Return a cookie header with every cookie value replaced by ``***``.

    Cookie names and attributes such as ``path`` or ``HttpOnly`` are kept.
    """

    if not value:
        return ""
    parts = []
    for index, part in enumerate(str(value).split(";")):
        name, sep, _ = part.partition("=")
        if sep and (index == 0 or name.strip().lower() not in _COOKIE_ATTRS):
            parts.append(f"{name}=***")
        else:
            parts.append(part)
    return ";".join(parts)


def mask_identifier(value: str | None) -> str:
    """Return a masked identifier suitable for log output."""

    if value is None:
        return ""
    trimmed = str(value).strip()
    if not trimmed:
        return ""
    if len(trimmed) <= 4:
        return "***"
    if len(trimmed) <= 8:
        return f"{trimmed[:2]}...{trimmed[-2:]}"
    return f"{trimmed[:6]}...{trimmed[-4:]}"


def sanitise_headers(headers: Mapping[str, Any]) -> dict[str, str]:
    """Redact cookie headers for logging."""

    sanitised: dict[str, str] = {}
    for key, value in headers.items():
        text = value.decode(errors="ignore") if isinstance(value, bytes) else str(value)
        if key.lower() in {"cookie", "set-cookie"}:
            text = redact_cookie(text)
        sanitised[key] = text
    return sanitised


__all__ = [
    "mask_identifier",
    "redact_cookie",
    "redact_text",
    "sanitise_headers",
]
