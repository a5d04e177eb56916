from __future__ import annotations

import datetime as dt
from email.utils import format_datetime

import pytest

from apichain.security import parse_retry_after, sanitize_headers, validate_base_url


def test_sanitize_headers_redacts_credentials() -> None:
    headers = {"Authorization": "key", "x-api-key": "k", "accept": "application/json"}

    assert sanitize_headers(headers) == {
        "Authorization": "[REDACTED]",
        "x-api-key": "[REDACTED]",
        "accept": "application/json",
    }


@pytest.mark.parametrize(
    "url",
    ["https://api.evrythng.com", "http://localhost:3000", "http://127.0.0.1"],
)
def test_validate_base_url_accepts(url) -> None:
    validate_base_url(url)


@pytest.mark.parametrize(
    ("url", "message"),
    [
        ("api.evrythng.com", "scheme and host"),
        ("ws://api.evrythng.com", "Unsupported"),
        ("http://api.evrythng.com", "Non-HTTPS"),
        ("https://api.evrythng.com\x00", "Invalid"),
    ],
)
def test_validate_base_url_rejects(url, message) -> None:
    with pytest.raises(ValueError, match=message):
        validate_base_url(url)


def test_parse_retry_after_seconds_and_dates() -> None:
    assert parse_retry_after(None) is None
    assert parse_retry_after(" ") is None
    assert parse_retry_after("5") == 5.0
    assert parse_retry_after("-2") == 0.0
    assert parse_retry_after("soon") is None

    future = dt.datetime.now(dt.timezone.utc) + dt.timedelta(seconds=120)
    delay = parse_retry_after(format_datetime(future, usegmt=True))
    assert delay is not None
    assert 100 < delay <= 120
