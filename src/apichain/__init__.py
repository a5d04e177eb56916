"""Interceptable asynchronous API client."""

from .client import AsyncApiClient, api, set_default_client
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
from .interceptors import (
    CancellationToken,
    Interceptor,
    LoggingInterceptor,
    run_request_interceptors,
    run_response_interceptors,
)
from .request_options import FormData, RequestOptions, merge_options
from .response import Response
from .settings import Settings, get_settings, reset_settings, setup
from .urls import resolve_url

__all__ = [
    "ApiAuthError",
    "ApiChainError",
    "ApiHTTPError",
    "ApiNetworkError",
    "ApiRateLimitError",
    "ApiTimeoutError",
    "ApiValidationError",
    "AsyncApiClient",
    "CancellationToken",
    "FormData",
    "Interceptor",
    "LoggingInterceptor",
    "RequestCancelledError",
    "RequestOptions",
    "Response",
    "Settings",
    "api",
    "get_settings",
    "merge_options",
    "reset_settings",
    "resolve_url",
    "run_request_interceptors",
    "run_response_interceptors",
    "set_default_client",
    "setup",
]
