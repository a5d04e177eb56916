"""Per-call request options and the merge of global and per-call layers."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field, fields, replace
from typing import Any, Mapping, Sequence

from .exceptions import ApiValidationError
from .security import validate_base_url
from .settings import Settings

DEFAULT_METHOD = "get"
DEFAULT_HEADERS = {"content-type": "application/json"}
HTTP_METHODS = {"get", "post", "put", "patch", "delete", "head", "options"}

# camelCase spellings accepted in option mappings.
OPTION_ALIASES = {
    "apiUrl": "api_url",
    "apiKey": "api_key",
    "fullResponse": "full_response",
}
OPTION_KEYS = {
    "url",
    "method",
    "headers",
    "body",
    "params",
    "api_url",
    "api_key",
    "interceptors",
    "full_response",
    "timeout",
}


@dataclass
class FormData:
    """Multipart form body. Passed to the transport untouched."""

    parts: list[tuple[str, tuple[str | None, Any, str | None]]] = field(default_factory=list)

    def append(
        self,
        name: str,
        value: Any,
        filename: str | None = None,
        content_type: str | None = None,
    ) -> None:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            value = str(value)
        self.parts.append((name, (filename, value, content_type)))

    def as_files(self) -> list[tuple[str, tuple[str | None, Any, str | None]]]:
        return list(self.parts)


@dataclass
class RequestOptions:
    """Fully merged options for one call. Interceptors may mutate or replace it."""

    api_url: str
    url: str = ""
    method: str = DEFAULT_METHOD
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None
    params: dict[str, Any] | None = None
    api_key: str | None = None
    interceptors: list[Any] = field(default_factory=list)
    full_response: bool = False
    timeout: float | None = None


def _normalize_headers(headers: Mapping[str, str] | None) -> dict[str, str]:
    if not headers:
        return {}
    clean: dict[str, str] = {}
    for key, value in headers.items():
        clean[str(key).lower()] = str(value)
    return clean


def _copy_body(body: Any) -> Any:
    if isinstance(body, (Mapping, list)):
        return copy.deepcopy(body)
    return body


def normalize_call_options(options: Mapping[str, Any] | RequestOptions | None, **overrides: Any) -> dict[str, Any]:
    """Flatten a per-call options mapping and keyword overrides into snake_case keys.

    ``None`` values count as "not given" so they never shadow a global default.
    """
    normalized: dict[str, Any] = {}
    for source in (options, overrides):
        if isinstance(source, RequestOptions):
            source = {item.name: getattr(source, item.name) for item in fields(source)}
        if not source:
            continue
        if not isinstance(source, Mapping):
            raise ApiValidationError(f"Request options must be a mapping, got {type(source).__name__}")
        for key, value in source.items():
            name = OPTION_ALIASES.get(key, key)
            if name not in OPTION_KEYS:
                raise ApiValidationError(f"Unknown request option: {key}")
            if value is None:
                continue
            normalized[name] = value
    return normalized


def _build_method(method: Any) -> str:
    if not isinstance(method, str) or method.lower() not in HTTP_METHODS:
        raise ApiValidationError(f"Unsupported HTTP method: {method!r}")
    return method.lower()


def _build_timeout(timeout: Any) -> float:
    try:
        value = float(timeout)
    except (TypeError, ValueError) as exc:
        raise ApiValidationError(f"Invalid timeout: {timeout!r}", cause=exc) from exc
    if value <= 0:
        raise ApiValidationError("timeout must be greater than 0")
    return value


def _build_interceptors(interceptors: Any) -> list[Any]:
    if isinstance(interceptors, (str, bytes)) or not isinstance(interceptors, Sequence):
        raise ApiValidationError("interceptors must be a sequence")
    return list(interceptors)


def merge_options(
    settings: Settings,
    options: Mapping[str, Any] | RequestOptions | None = None,
    **overrides: Any,
) -> RequestOptions:
    """Merge built-in defaults, global settings and per-call options.

    Headers merge per key (defaults, then settings, then the call); every other
    option is last-writer-wins. Neither ``settings`` nor ``options`` is mutated.
    """
    call = normalize_call_options(options, **overrides)
    body = _copy_body(call.get("body"))

    headers: dict[str, str] = {}
    if not isinstance(body, FormData):
        headers.update(DEFAULT_HEADERS)
    headers.update(_normalize_headers(settings.headers))
    headers.update(_normalize_headers(call.get("headers")))

    api_key = call.get("api_key", settings.api_key)
    if api_key and "authorization" not in headers:
        headers["authorization"] = str(api_key)

    api_url = str(call.get("api_url", settings.api_url))
    if "api_url" in call:
        try:
            validate_base_url(api_url, allow_http=settings.allow_http)
        except ValueError as exc:
            raise ApiValidationError(str(exc), cause=exc) from exc

    params = call.get("params")
    return RequestOptions(
        api_url=api_url,
        url=str(call.get("url", "")),
        method=_build_method(call.get("method", DEFAULT_METHOD)),
        headers=headers,
        body=body,
        params=dict(params) if params is not None else None,
        api_key=api_key,
        interceptors=_build_interceptors(call.get("interceptors", settings.interceptors)),
        full_response=bool(call.get("full_response", settings.full_response)),
        timeout=_build_timeout(call.get("timeout", settings.timeout)),
    )


def apply_options_update(options: RequestOptions, update: Mapping[str, Any]) -> RequestOptions:
    """Return a copy of ``options`` with the keys of ``update`` replaced.

    Request hooks may hand back a plain mapping instead of ``RequestOptions``;
    its keys replace whole fields, headers included.
    """
    changes = normalize_call_options(update)
    if "headers" in changes:
        changes["headers"] = _normalize_headers(changes["headers"])
    if "method" in changes:
        changes["method"] = _build_method(changes["method"])
    if "timeout" in changes:
        changes["timeout"] = _build_timeout(changes["timeout"])
    if "interceptors" in changes:
        changes["interceptors"] = _build_interceptors(changes["interceptors"])
    if "params" in changes:
        changes["params"] = dict(changes["params"])
    return replace(options, **changes)
