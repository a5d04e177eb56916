"""Asynchronous API client running interceptor chains around each call."""

from __future__ import annotations

import inspect
import logging
from types import MappingProxyType
from typing import Any, Callable, Mapping

import httpx
import structlog

from .exceptions import (
    ApiAuthError,
    ApiChainError,
    ApiHTTPError,
    ApiNetworkError,
    ApiRateLimitError,
    ApiTimeoutError,
    ApiValidationError,
    RequestCancelledError,
)
from .interceptors import CancellationToken, run_request_interceptors, run_response_interceptors
from .request_options import FormData, RequestOptions, merge_options
from .response import Response, parse_body
from .security import parse_retry_after, sanitize_headers
from .settings import Settings, get_settings
from .urls import resolve_url

logger = structlog.wrap_logger(logging.getLogger(__name__))

Callback = Callable[..., Any]


def _body_kwargs(body: Any, headers: dict[str, str]) -> dict[str, Any]:
    if body is None:
        return {}
    if isinstance(body, FormData):
        # httpx writes the multipart content-type with its boundary.
        if headers.get("content-type", "").startswith("application/json"):
            headers.pop("content-type")
        return {"files": body.as_files()}
    if isinstance(body, (bytes, bytearray, str)):
        return {"content": body}
    if isinstance(body, (Mapping, list, tuple, int, float, bool)):
        return {"json": body}
    return {"content": body}


def _error_message(body: Any, status_code: int) -> str:
    if isinstance(body, Mapping):
        for key in ("message", "error", "moreInfo"):
            if isinstance(body.get(key), str):
                return body[key]
        errors = body.get("errors")
        if isinstance(errors, list) and errors:
            return "; ".join(str(error) for error in errors)
    if isinstance(body, str) and body:
        return body
    return f"HTTP {status_code}"


class AsyncApiClient:
    """Runs merged, intercepted requests over an :class:`httpx.AsyncClient`.

    Without explicit ``settings`` the client reads the process-wide settings at
    the start of every call, so :func:`apichain.setup` applies to later calls.
    """

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        httpx_client: httpx.AsyncClient | None = None,
        follow_redirects: bool = True,
    ) -> None:
        self._settings = settings
        self._owns_httpx = httpx_client is None
        self._httpx = httpx_client or httpx.AsyncClient(follow_redirects=follow_redirects, trust_env=False)

    async def __aenter__(self) -> "AsyncApiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_httpx:
            await self._httpx.aclose()

    @property
    def settings(self) -> Settings:
        return self._settings if self._settings is not None else get_settings()

    async def request(
        self,
        options: Mapping[str, Any] | RequestOptions | None = None,
        callback: Callback | None = None,
        **overrides: Any,
    ) -> Any:
        """Perform one call.

        Returns the parsed JSON body, or the :class:`Response` when
        ``full_response`` is set. When ``callback`` is given it is also invoked
        Node-style: ``callback(None, result)`` or ``callback(error)``.
        """
        try:
            result = await self._execute(options, overrides)
        except Exception as exc:
            await self._notify(callback, exc)
            raise
        await self._notify(callback, None, result)
        return result

    async def _execute(self, options: Mapping[str, Any] | RequestOptions | None, overrides: Mapping[str, Any]) -> Any:
        merged = merge_options(self.settings, options, **overrides)
        interceptors = list(merged.interceptors)
        log = logger.bind(method=merged.method, url=merged.url)

        token = CancellationToken()
        try:
            final = await run_request_interceptors(interceptors, merged, token)
        except RequestCancelledError:
            log.info("request_cancelled")
            raise
        if not isinstance(final, RequestOptions):
            raise ApiValidationError(
                f"request interceptors must return RequestOptions, a mapping or None, got {type(final).__name__}"
            )

        response = await self._send(final)
        if not response.ok:
            error = self._http_error(response, final.full_response)
            log.info("http_error", status_code=response.status_code)
            raise error

        value = response if final.full_response else self._decode(response)
        return await run_response_interceptors(interceptors, value)

    async def _send(self, options: RequestOptions) -> Response:
        url = resolve_url(options.api_url, options.url, options.params)
        headers = dict(options.headers)
        body_kwargs = _body_kwargs(options.body, headers)
        method = options.method.upper()
        logger.debug("request_sent", method=method, url=url, headers=sanitize_headers(headers))
        try:
            raw = await self._httpx.request(
                method,
                url,
                headers=headers,
                timeout=options.timeout,
                **body_kwargs,
            )
        except httpx.TimeoutException as exc:
            raise ApiTimeoutError("Request timed out", cause=exc) from exc
        except httpx.TransportError as exc:
            raise ApiNetworkError("Network error", cause=exc) from exc
        logger.debug("response_received", method=method, url=url, status_code=raw.status_code)
        return Response(raw)

    @staticmethod
    def _decode(response: Response) -> Any:
        try:
            return parse_body(response)
        except ValueError as exc:
            raise ApiChainError(
                "Response body is not valid JSON",
                status_code=response.status_code,
                body=response.text,
                cause=exc,
            ) from exc

    @staticmethod
    def _http_error(response: Response, full_response: bool) -> ApiHTTPError:
        try:
            body = parse_body(response)
        except ValueError:
            body = response.text

        kwargs: dict[str, Any] = {
            "response": response,
            "full_response": full_response,
            "status_code": response.status_code,
            "body": body,
            "headers": MappingProxyType(dict(response.headers)),
            "request_id": response.headers.get("x-request-id"),
            "retry_after": parse_retry_after(response.headers.get("Retry-After")),
        }
        message = _error_message(body, response.status_code)
        if response.status_code in {401, 403}:
            return ApiAuthError(message, **kwargs)
        if response.status_code == 429:
            return ApiRateLimitError(message, **kwargs)
        return ApiHTTPError(message, **kwargs)

    @staticmethod
    async def _notify(callback: Callback | None, *args: Any) -> None:
        if callback is None:
            return
        try:
            result = callback(*args)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception("callback_failed")


_default_client: AsyncApiClient | None = None


def set_default_client(client: AsyncApiClient | None) -> None:
    """Route module-level :func:`api` calls through ``client``; ``None`` restores per-call clients."""
    global _default_client
    _default_client = client


async def api(
    options: Mapping[str, Any] | RequestOptions | None = None,
    callback: Callback | None = None,
    **overrides: Any,
) -> Any:
    """Perform one call using the process-wide settings."""
    if _default_client is not None:
        return await _default_client.request(options, callback, **overrides)
    async with AsyncApiClient() as client:
        return await client.request(options, callback, **overrides)
