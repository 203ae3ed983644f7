"""Errors raised by the Horizon API client."""

from __future__ import annotations

import httpx

DEFAULT_TIMEOUT_SECS = 30.0


def _format_duration(seconds: float) -> str:
    nanos = round(seconds * 1_000_000_000)
    for scale, unit in ((10**9, "s"), (10**6, "ms"), (10**3, "µs")):
        if nanos >= scale:
            whole, frac = divmod(nanos, scale)
            if frac:
                digits = str(frac).rjust(len(str(scale)) - 1, "0").rstrip("0")
                return f"{whole}.{digits}{unit}"
            return f"{whole}{unit}"
    return f"{nanos}ns"


class HorizonError(Exception):
    """Base class for every Horizon client failure."""

    prefix = "Error"
    is_retryable = False
    is_rate_limited = False
    is_server_error = False
    is_client_error = False

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.prefix}: {self.message}"

    def suggested_retry_duration(self) -> float | None:
        """Seconds to wait before retrying, when the error suggests one."""
        return None


class HorizonNetworkError(HorizonError):
    prefix = "Network error"
    is_retryable = True


class HorizonHttpError(HorizonError):
    """A request failed with an unclassified HTTP status."""

    def __init__(self, status: int, message: str) -> None:
        super().__init__(message)
        self.status = status

    def __str__(self) -> str:
        return f"HTTP request failed with status {self.status}: {self.message}"


class HorizonTimeoutError(HorizonError):
    """A request timed out."""

    is_retryable = True

    def __init__(self, duration: float = DEFAULT_TIMEOUT_SECS) -> None:
        super().__init__("")
        self.duration = duration

    def __str__(self) -> str:
        return f"Request timeout after {_format_duration(self.duration)}"

    def suggested_retry_duration(self) -> float | None:
        return 2.0


class RateLimitedError(HorizonError):
    """The server refused the request because of rate limits."""

    is_retryable = True
    is_rate_limited = True

    def __init__(self, retry_after: float) -> None:
        super().__init__("")
        self.retry_after = retry_after

    def __str__(self) -> str:
        return f"Rate limit exceeded. Retry after {_format_duration(self.retry_after)}"

    def suggested_retry_duration(self) -> float | None:
        return self.retry_after


class InvalidRequestError(HorizonError):
    prefix = "Invalid request"
    is_client_error = True


class InvalidResponseError(HorizonError):
    prefix = "Invalid response format"


class ServerError(HorizonError):
    """The server answered with a 5xx status."""

    is_retryable = True
    is_server_error = True

    def __init__(self, status: int, message: str) -> None:
        super().__init__(message)
        self.status = status

    def __str__(self) -> str:
        return f"Server error ({self.status}): {self.message}"

    def suggested_retry_duration(self) -> float | None:
        return 5.0


class NotFoundError(HorizonError):
    prefix = "Resource not found"
    is_client_error = True


class BadRequestError(HorizonError):
    prefix = "Bad request"
    is_client_error = True


class UnauthorizedError(HorizonError):
    prefix = "Unauthorized"
    is_client_error = True


class ForbiddenError(HorizonError):
    prefix = "Forbidden"
    is_client_error = True


class ConnectionRefusedError_(HorizonError):
    prefix = "Connection refused"
    is_retryable = True


class ConnectionResetError_(HorizonError):
    prefix = "Connection reset"
    is_retryable = True


class DnsError(HorizonError):
    prefix = "DNS resolution failed"
    is_retryable = True


class TlsError(HorizonError):
    prefix = "TLS error"


class ServiceUnavailableError(HorizonError):
    prefix = "Horizon service unavailable"
    is_retryable = True
    is_server_error = True

    def suggested_retry_duration(self) -> float | None:
        return 10.0


class CacheError(HorizonError):
    prefix = "Cache error"


class InvalidConfigError(HorizonError):
    prefix = "Invalid configuration"


class JsonError(HorizonError):
    prefix = "JSON parsing error"


class UrlError(HorizonError):
    prefix = "URL parsing error"


class OtherHorizonError(HorizonError):
    prefix = "Error"


_STATUS_ERRORS: dict[int, type[HorizonError]] = {
    404: NotFoundError,
    400: BadRequestError,
    401: UnauthorizedError,
    403: ForbiddenError,
}


def from_http_exception(exc: Exception) -> HorizonError:
    """Classify an HTTP library exception as a HorizonError."""
    message = str(exc)
    if isinstance(exc, httpx.TimeoutException):
        return HorizonTimeoutError(DEFAULT_TIMEOUT_SECS)
    if isinstance(exc, httpx.ConnectError):
        return ConnectionRefusedError_(message)
    if isinstance(exc, httpx.RequestError):
        return HorizonNetworkError(message)
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        error_class = _STATUS_ERRORS.get(status)
        if error_class is not None:
            return error_class(message)
        if 500 <= status < 600:
            return ServerError(status, message)
        return HorizonHttpError(status, message)
    return HorizonNetworkError(message)