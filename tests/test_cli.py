from __future__ import annotations

import json

import httpx
import pytest

import apichain.cli as cli
from apichain import AsyncApiClient, set_default_client


@pytest.fixture
def recorded():
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if request.url.path == "/missing":
            return httpx.Response(404, json={"message": "Not found"})
        return httpx.Response(200, json={"id": "thng_1"})

    set_default_client(AsyncApiClient(httpx_client=httpx.AsyncClient(transport=httpx.MockTransport(handler))))
    return requests


def test_cli_prints_json_result(recorded, capsys) -> None:
    exit_code = cli._main(
        [
            "POST",
            "/thngs",
            "--api-url",
            "https://api-test.evrythng.net",
            "--api-key",
            "key",
            "-H",
            "accept: application/json",
            "-p",
            "project=p1",
            "--data",
            '{"name": "lamp"}',
        ]
    )

    assert exit_code == 0
    assert json.loads(capsys.readouterr().out) == {"id": "thng_1"}
    request = recorded[-1]
    assert request.method == "POST"
    assert request.url.path == "/thngs"
    assert request.url.params["project"] == "p1"
    assert request.headers["authorization"] == "key"
    assert request.headers["accept"] == "application/json"
    assert json.loads(request.content) == {"name": "lamp"}


def test_cli_reports_http_errors(recorded, capsys) -> None:
    assert cli._main(["get", "/missing"]) == 1

    assert json.loads(capsys.readouterr().err) == {"message": "Not found"}


def test_cli_rejects_malformed_header(recorded) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli._main(["get", "/thngs", "-H", "no-separator"])

    assert excinfo.value.code == 2
