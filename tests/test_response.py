from __future__ import annotations

import httpx

from apichain import Response
from apichain.response import parse_body


def test_ok_covers_2xx_and_3xx() -> None:
    assert Response(httpx.Response(200)).ok is True
    assert Response(httpx.Response(302)).ok is True
    assert Response(httpx.Response(400)).ok is False
    assert Response(httpx.Response(503)).ok is False


def test_parse_body_variants() -> None:
    assert parse_body(Response(httpx.Response(204))) is None
    assert parse_body(Response(httpx.Response(200, content=b""))) is None
    assert parse_body(Response(httpx.Response(200, text="plain"))) == "plain"
    assert parse_body(Response(httpx.Response(200, json={"a": 1}))) == {"a": 1}


def test_with_json_leaves_original_untouched() -> None:
    original = Response(httpx.Response(200, json={"a": 1}))

    patched = original.with_json(lambda body: {**body, "b": 2})

    assert patched.json() == {"a": 1, "b": 2}
    assert patched.json() == {"a": 1, "b": 2}
    assert original.json() == {"a": 1}
    assert patched.status_code == 200
