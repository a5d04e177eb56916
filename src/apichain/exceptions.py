"""Exceptions raised by apichain calls."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping

if TYPE_CHECKING:
    from .response import Response


class ApiChainError(Exception):
    """Base exception for all apichain failures."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: object = None,
        headers: Mapping[str, str] | None = None,
        request_id: str | None = None,
        retry_after: float | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body
        self.headers = dict(headers) if headers is not None else {}
        self.request_id = request_id
        self.retry_after = retry_after
        self.cause = cause

    def __str__(self) -> str:  # pragma: no cover - simple formatting
        if self.status_code is None:
            return str(self.args[0])
        return f"{self.status_code}: {self.args[0]}"


class ApiValidationError(ApiChainError):
    """Raised when settings or request options are invalid."""


class RequestCancelledError(ApiChainError):
    """Raised when a request interceptor cancels the call."""

    cancelled = True

    def __init__(self, message: str = "Request cancelled") -> None:
        super().__init__(message)


class ApiHTTPError(ApiChainError):
    """Raised for responses with a status outside [200, 400)."""

    def __init__(
        self,
        message: str,
        *,
        response: Response,
        full_response: bool = False,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.response = response
        self.full_response = full_response

    @property
    def payload(self) -> Any:
        """The value the caller configured to receive: full response or parsed body."""
        return self.response if self.full_response else self.body


class ApiAuthError(ApiHTTPError):
    """Raised for authentication and authorization failures."""


class ApiRateLimitError(ApiHTTPError):
    """Raised for HTTP 429 responses."""


class ApiNetworkError(ApiChainError):
    """Raised for transport-level failures like DNS and TCP errors."""


class ApiTimeoutError(ApiChainError):
    """Raised when the transport exceeds the configured timeout."""
