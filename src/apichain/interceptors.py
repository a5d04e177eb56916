"""Request and response interceptor chains.

An interceptor is any object, or mapping, exposing optional ``request`` and
``response`` callables::

    request(options, cancel) -> options | Awaitable[options] | None
    response(value) -> value | Awaitable[value] | None

Both sides run in list order. Returning ``None`` keeps the previous value.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Sequence

import structlog

from .exceptions import RequestCancelledError
from .request_options import RequestOptions, apply_options_update
from .security import sanitize_headers

logger = structlog.wrap_logger(logging.getLogger(__name__))


@dataclass(frozen=True)
class Interceptor:
    request: Callable[..., Any] | None = None
    response: Callable[[Any], Any] | None = None


class CancellationToken:
    """Per-call flag that only ever moves from live to cancelled."""

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True


def get_capability(interceptor: Any, name: str) -> Callable[..., Any] | None:
    if isinstance(interceptor, Mapping):
        hook = interceptor.get(name)
    else:
        hook = getattr(interceptor, name, None)
    if hook is not None and not callable(hook):
        raise TypeError(f"interceptor {name!r} must be callable, got {type(hook).__name__}")
    return hook


async def _settle(result: Any) -> Any:
    if inspect.isawaitable(result):
        return await result
    return result


async def run_request_interceptors(
    interceptors: Sequence[Any],
    options: Any,
    token: CancellationToken,
) -> Any:
    """Feed ``options`` through each interceptor's ``request`` hook in order.

    Raises :class:`RequestCancelledError` as soon as the token is cancelled,
    before or during a step; remaining hooks are skipped. A mapping returned
    in place of ``RequestOptions`` replaces the fields it names. Exceptions
    raised by a hook propagate unchanged.
    """
    current = options
    for index, interceptor in enumerate(interceptors):
        if token.cancelled:
            raise RequestCancelledError()
        hook = get_capability(interceptor, "request")
        if hook is None:
            continue
        result = await _settle(hook(current, token.cancel))
        if token.cancelled:
            logger.debug("request_interceptor_cancelled", index=index)
            raise RequestCancelledError()
        if isinstance(result, Mapping) and isinstance(current, RequestOptions):
            current = apply_options_update(current, result)
        elif result is not None:
            current = result
    return current


async def run_response_interceptors(interceptors: Sequence[Any], value: Any) -> Any:
    """Feed a response value through each interceptor's ``response`` hook in order."""
    current = value
    for interceptor in interceptors:
        hook = get_capability(interceptor, "response")
        if hook is None:
            continue
        result = await _settle(hook(current))
        if result is not None:
            current = result
    return current


class LoggingInterceptor:
    """Logs outgoing requests and incoming responses without changing them."""

    def __init__(self, logger_name: str = "apichain.http") -> None:
        self._log = structlog.wrap_logger(logging.getLogger(logger_name))

    def request(self, options: Any, cancel: Callable[[], None]) -> None:
        self._log.info(
            "http_request",
            method=getattr(options, "method", None),
            api_url=getattr(options, "api_url", None),
            url=getattr(options, "url", None),
            headers=sanitize_headers(getattr(options, "headers", None) or {}),
        )

    def response(self, value: Any) -> None:
        status_code = getattr(value, "status_code", None)
        self._log.info("http_response", status_code=status_code, payload_type=type(value).__name__)
