"""Header redaction, base URL validation and Retry-After parsing."""

from __future__ import annotations

import datetime as _dt
from email.utils import parsedate_to_datetime
from typing import Mapping
from urllib.parse import urlparse


SENSITIVE_HEADERS = {
    "authorization",
    "cookie",
    "proxy-authorization",
    "x-api-key",
}

LOCAL_HOSTS = {"localhost", "127.0.0.1", "::1"}


def sanitize_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Return headers with sensitive values redacted for logging."""
    redacted: dict[str, str] = {}
    for key, value in headers.items():
        if key.lower() in SENSITIVE_HEADERS:
            redacted[key] = "[REDACTED]"
        else:
            redacted[key] = value
    return redacted


def validate_base_url(url: str, *, allow_http: bool = False) -> None:
    """Reject API base URLs without scheme and host, or plain http to remote hosts."""
    if "\x00" in url:
        raise ValueError("Invalid api_url")
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        raise ValueError("api_url must include scheme and host")
    if parsed.scheme not in {"http", "https"}:
        raise ValueError(f"Unsupported api_url scheme: {parsed.scheme}")
    if parsed.scheme == "http" and not allow_http:
        host = (parsed.hostname or "").lower()
        if host not in LOCAL_HOSTS:
            raise ValueError("Non-HTTPS api_url is not allowed without allow_http=True")


def parse_retry_after(raw: str | None) -> float | None:
    """Parse Retry-After header values into seconds."""
    if raw is None:
        return None

    raw = raw.strip()
    if not raw:
        return None

    try:
        return max(0.0, float(raw))
    except ValueError:
        pass

    try:
        parsed = parsedate_to_datetime(raw)
    except (ValueError, TypeError, OverflowError):
        return None

    if parsed.utcoffset() is None:
        parsed = parsed.replace(tzinfo=_dt.timezone.utc)

    delta = (parsed - _dt.datetime.now(_dt.timezone.utc)).total_seconds()
    return max(0.0, delta)
