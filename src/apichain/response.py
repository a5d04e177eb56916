"""Full response object handed to callers in ``full_response`` mode."""

from __future__ import annotations

from typing import Any, Callable

import httpx


class Response:
    """Thin view over :class:`httpx.Response`.

    ``json`` may be wrapped by response interceptors, either through
    :meth:`with_json` or by assigning a new callable to the instance attribute.
    """

    def __init__(self, raw: httpx.Response, json_loader: Callable[[], Any] | None = None) -> None:
        self.raw = raw
        self._json_loader = json_loader

    def __repr__(self) -> str:
        return f"<Response [{self.status_code}]>"

    @property
    def ok(self) -> bool:
        return 200 <= self.raw.status_code < 400

    @property
    def status_code(self) -> int:
        return self.raw.status_code

    @property
    def headers(self) -> httpx.Headers:
        return self.raw.headers

    @property
    def url(self) -> str:
        return str(self.raw.url)

    @property
    def text(self) -> str:
        return self.raw.text

    @property
    def content(self) -> bytes:
        return self.raw.content

    def json(self) -> Any:
        if self._json_loader is not None:
            return self._json_loader()
        return self.raw.json()

    def with_json(self, transform: Callable[[Any], Any]) -> "Response":
        """Return a new response whose ``json()`` feeds this one's result through ``transform``."""
        previous = self.json
        return Response(self.raw, json_loader=lambda: transform(previous()))


def parse_body(response: Response) -> Any:
    """Decode the body the way callers receive it by default.

    Empty and 204 bodies decode to ``None``; non-JSON content is returned as text.
    """
    if response.status_code == 204 or not response.content:
        return None
    content_type = response.headers.get("content-type", "")
    if "json" not in content_type.lower():
        return response.text
    return response.json()
