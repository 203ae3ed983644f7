"""Client for the Horizon API with rate limiting, retries and response caching."""

from __future__ import annotations

import logging
import re
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any

import httpx

from .horizon_errors import (
    BadRequestError,
    CacheError,
    ForbiddenError,
    HorizonError,
    HorizonHttpError,
    InvalidConfigError,
    InvalidResponseError,
    NotFoundError,
    OtherHorizonError,
    RateLimitedError,
    ServerError,
    UnauthorizedError,
    from_http_exception,
)
from .horizon_fetcher import PUBLIC_HORIZON_URL
from .rate_limit import HorizonRateLimiter, RateLimitConfig, RateLimiterStats
from .response_cache import CacheStats, ResponseCache
from .retry import RetryConfig, RetryPolicy, calculate_backoff

logger = logging.getLogger(__name__)

USER_AGENT = "stellaraid-client/1.0"
DEFAULT_RETRY_AFTER_SECS = 60.0

_RETRY_AFTER = re.compile(r"\+?[0-9]+")

_STATUS_ERRORS: dict[int, type[HorizonError]] = {
    404: NotFoundError,
    400: BadRequestError,
    401: UnauthorizedError,
    403: ForbiddenError,
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class HorizonClientConfig:
    """Settings for a Horizon client; durations are in seconds."""

    server_url: str = PUBLIC_HORIZON_URL
    timeout: float = 30.0
    enable_logging: bool = __debug__
    rate_limit_config: RateLimitConfig = field(default_factory=RateLimitConfig.public_horizon)
    retry_config: RetryConfig = field(default_factory=RetryConfig)
    retry_policy: RetryPolicy = RetryPolicy.TRANSIENT_AND_SERVER_ERRORS
    enable_cache: bool = True
    cache_ttl: float = 60.0

    @classmethod
    def public_horizon(cls) -> HorizonClientConfig:
        """Settings for the public Horizon server, rate limited."""
        return cls()

    @classmethod
    def private_horizon(cls, url: str, requests_per_second: float) -> HorizonClientConfig:
        """Settings for a private Horizon server with its own request rate."""
        return cls(
            server_url=url,
            rate_limit_config=RateLimitConfig.private_horizon(requests_per_second),
        )

    @classmethod
    def for_testing(cls) -> HorizonClientConfig:
        """Settings for a local server with no rate limit, retries or cache."""
        return cls(
            server_url="http://localhost:8000",
            timeout=5.0,
            enable_logging=False,
            rate_limit_config=RateLimitConfig.unlimited(),
            retry_config=RetryConfig.no_retry(),
            retry_policy=RetryPolicy.NO_RETRY,
            enable_cache=False,
            cache_ttl=0.0,
        )


@dataclass
class _RequestContext:
    """Identifies one logical request across its attempts."""

    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    start_time: datetime = field(default_factory=_utcnow)
    attempt: int = 1

    def elapsed(self) -> float:
        """Seconds since the request started, never negative."""
        return max((_utcnow() - self.start_time).total_seconds(), 0.0)


def _retry_after(response: httpx.Response) -> float:
    value = response.headers.get("retry-after")
    if value is not None and _RETRY_AFTER.fullmatch(value):
        return float(int(value))
    return DEFAULT_RETRY_AFTER_SECS


def _status_error(status: int, body: str) -> HorizonError:
    error_class = _STATUS_ERRORS.get(status)
    if error_class is not None:
        return error_class(body)
    if 500 <= status < 600:
        return ServerError(status, body)
    return HorizonHttpError(status, body)


class HorizonClient:
    """Makes GET requests to Horizon and returns decoded JSON."""

    def __init__(self, config: HorizonClientConfig | None = None) -> None:
        self.config = config if config is not None else HorizonClientConfig()
        try:
            self._http = httpx.AsyncClient(
                timeout=self.config.timeout,
                headers={"User-Agent": USER_AGENT},
                follow_redirects=True,
            )
        except (TypeError, ValueError) as exc:
            raise InvalidConfigError(str(exc)) from exc
        self._rate_limiter = HorizonRateLimiter(replace(self.config.rate_limit_config))
        self._cache = ResponseCache(self.config.cache_ttl) if self.config.enable_cache else None
        logger.info("Horizon client initialized for %s", self.config.server_url)

    @classmethod
    def public(cls) -> HorizonClient:
        """A client for the public Horizon server."""
        return cls(HorizonClientConfig.public_horizon())

    @classmethod
    def private(cls, url: str, requests_per_second: float) -> HorizonClient:
        """A client for a private Horizon server."""
        return cls(HorizonClientConfig.private_horizon(url, requests_per_second))

    def rate_limiter_stats(self) -> RateLimiterStats:
        """Configuration and readiness of the client's rate limiter."""
        return self._rate_limiter.stats()

    async def get(self, path: str) -> Any:
        """GET ``path`` relative to the server URL and return the decoded JSON."""
        if self._cache is not None:
            try:
                cached = await self._cache.get(path)
            except CacheError:
                pass
            else:
                logger.debug("Cache hit for %s", path)
                return cached

        url = f"{self.config.server_url}{path}"
        result = await self._execute_with_retry(_RequestContext(), url)

        if self._cache is not None:
            await self._cache.set(path, result)
        return result

    async def _execute_with_retry(self, context: _RequestContext, url: str) -> Any:
        retry_config = self.config.retry_config
        max_attempts = retry_config.max_attempts
        for attempt in range(1, max_attempts + 1):
            ctx = replace(context, attempt=attempt)
            try:
                return await self._send(ctx, url)
            except HorizonError as error:
                if not self.config.retry_policy.should_retry(error):
                    logger.error(
                        "[%s] Request failed with non-retryable error: %s",
                        ctx.request_id,
                        error,
                    )
                    raise
                if attempt >= max_attempts:
                    logger.error(
                        "[%s] Request failed after %d attempts: %s",
                        ctx.request_id,
                        attempt,
                        error,
                    )
                    raise
                backoff = calculate_backoff(attempt, retry_config)
                logger.warning(
                    "[%s] Request failed on attempt %d/%d, retrying after %.3fs: %s",
                    ctx.request_id,
                    attempt,
                    max_attempts,
                    backoff,
                    error,
                )
                import asyncio

                await asyncio.sleep(backoff)
        raise OtherHorizonError("Retry loop exhausted without returning")

    async def _send(self, ctx: _RequestContext, url: str) -> Any:
        await self._rate_limiter.acquire()
        if self.config.enable_logging:
            logger.debug("[%s] GET %s (attempt %d)", ctx.request_id, url, ctx.attempt)

        try:
            response = await self._http.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise from_http_exception(exc) from exc

        status = response.status_code
        if status == 429:
            raise RateLimitedError(_retry_after(response))

        if not response.is_success:
            try:
                body = response.text
            except (UnicodeDecodeError, LookupError):
                body = "Unknown error"
            raise _status_error(status, body)

        try:
            payload = response.json()
        except ValueError as exc:
            raise InvalidResponseError(str(exc)) from exc

        if self.config.enable_logging:
            logger.debug(
                "[%s] GET %s completed in %.3fs", ctx.request_id, url, ctx.elapsed()
            )
        return payload

    async def clear_cache(self) -> None:
        """Drop every cached response."""
        if self._cache is not None:
            await self._cache.clear()
            logger.info("Response cache cleared")

    async def cache_stats(self) -> CacheStats | None:
        """Cache statistics, or None when caching is disabled."""
        return self._cache.stats() if self._cache is not None else None

    async def aclose(self) -> None:
        """Close the underlying HTTP connections."""
        await self._http.aclose()

    async def __aenter__(self) -> HorizonClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()