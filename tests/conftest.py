from __future__ import annotations

import httpx
import pytest
import structlog

from apichain import AsyncApiClient, reset_settings, set_default_client
from apichain.settings import API_KEY_ENV_VAR, API_URL_ENV_VAR
from payloads import ERROR_BODY, RESPONSE_BODY


class Recorder:
    """MockTransport handler answering /error with 400 and everything else with 200."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path == "/error":
            return httpx.Response(400, json=ERROR_BODY, request=request)
        return httpx.Response(200, json=RESPONSE_BODY, request=request)

    @property
    def called(self) -> bool:
        return bool(self.requests)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    monkeypatch.delenv(API_URL_ENV_VAR, raising=False)
    monkeypatch.delenv(API_KEY_ENV_VAR, raising=False)
    reset_settings()
    yield
    reset_settings()
    set_default_client(None)
    structlog.reset_defaults()


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def client(recorder) -> AsyncApiClient:
    api_client = AsyncApiClient(httpx_client=httpx.AsyncClient(transport=httpx.MockTransport(recorder)))
    set_default_client(api_client)
    return api_client
