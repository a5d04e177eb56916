"""Final request URL construction."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping

import httpx


def _coerce_query_params(params: Mapping[str, Any]) -> dict[str, Any]:
    normalized: dict[str, Any] = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            normalized[key] = ["" if v is None else v for v in value]
            continue
        if isinstance(value, datetime):
            normalized[key] = value.isoformat()
            continue
        normalized[key] = value
    return normalized


def resolve_url(api_url: str, url: str = "", params: Mapping[str, Any] | None = None) -> str:
    """Join ``api_url`` and ``url`` verbatim and append the encoded query string.

    No separator is inserted between the two parts; callers pass paths with a
    leading slash.
    """
    resolved = f"{api_url}{url}"
    if not params:
        return resolved
    query = str(httpx.QueryParams(_coerce_query_params(params)))
    if not query:
        return resolved
    return f"{resolved}?{query}"
