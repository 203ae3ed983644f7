"""Retrying Horizon requests with exponential backoff."""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, TypeVar

from .horizon_errors import (
    ConnectionRefusedError_,
    ConnectionResetError_,
    DnsError,
    HorizonError,
    HorizonNetworkError,
    HorizonTimeoutError,
    OtherHorizonError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

_TRANSIENT_ERRORS = (
    HorizonNetworkError,
    HorizonTimeoutError,
    ConnectionRefusedError_,
    ConnectionResetError_,
    DnsError,
)


@dataclass
class RetryConfig:
    """How often and how long to back off between attempts; durations in seconds."""

    max_attempts: int = 3
    initial_backoff: float = 0.1
    max_backoff: float = 30.0
    backoff_multiplier: float = 2.0
    use_jitter: bool = True

    @classmethod
    def transient(cls) -> RetryConfig:
        """Three attempts with exponential backoff."""
        return cls()

    @classmethod
    def conservative(cls) -> RetryConfig:
        """Two attempts with short backoff."""
        return cls(max_attempts=2, initial_backoff=0.05, max_backoff=5.0)

    @classmethod
    def aggressive(cls) -> RetryConfig:
        """Five attempts with longer backoff."""
        return cls(max_attempts=5, initial_backoff=0.2, max_backoff=60.0)

    @classmethod
    def no_retry(cls) -> RetryConfig:
        """A single attempt and no backoff."""
        return cls(
            max_attempts=1,
            initial_backoff=0.0,
            max_backoff=0.0,
            backoff_multiplier=1.0,
            use_jitter=False,
        )


class RetryPolicy(Enum):
    """Which errors are worth another attempt."""

    TRANSIENT_ONLY = "transient_only"
    TRANSIENT_AND_SERVER_ERRORS = "transient_and_server_errors"
    ALL_RETRYABLE = "all_retryable"
    NO_RETRY = "no_retry"

    def should_retry(self, error: HorizonError) -> bool:
        """Whether the error should be retried under this policy."""
        if self is RetryPolicy.NO_RETRY:
            return False
        if self is RetryPolicy.TRANSIENT_ONLY:
            return isinstance(error, _TRANSIENT_ERRORS)
        if self is RetryPolicy.TRANSIENT_AND_SERVER_ERRORS:
            return error.is_retryable and (error.is_retryable or error.is_server_error)
        return error.is_retryable


@dataclass
class RetryContext:
    """Progress through a sequence of attempts (attempt is 1-based)."""

    attempt: int
    max_attempts: int
    delay: float = 0.0
    errors: list[HorizonError] = field(default_factory=list)

    def can_retry(self) -> bool:
        """Whether attempts remain after this one."""
        return self.attempt < self.max_attempts

    def remaining_attempts(self) -> int:
        """Attempts left, never negative."""
        return max(self.max_attempts - self.attempt, 0)

    def last_error(self) -> HorizonError | None:
        """The most recent error, if any."""
        return self.errors[-1] if self.errors else None

    def is_last_attempt(self) -> bool:
        """Whether this is the final attempt."""
        return self.attempt == self.max_attempts


def calculate_backoff(attempt: int, config: RetryConfig) -> float:
    """Seconds to wait after the given attempt; 0 for attempt 0."""
    if attempt == 0:
        return 0.0

    initial_ms = int(config.initial_backoff * 1000)
    max_ms = int(config.max_backoff * 1000)
    try:
        exp_backoff = initial_ms * config.backoff_multiplier ** (attempt - 1)
    except OverflowError:
        exp_backoff = float("inf")
    backoff_ms = max(int(min(exp_backoff, max_ms)), 0)

    if config.use_jitter:
        jitter_amount = int(backoff_ms * 0.1)
        if jitter_amount > 0:
            jitter = random.randrange(jitter_amount * 2)
            backoff_ms = max(backoff_ms - jitter_amount + jitter, 0)

    return backoff_ms / 1000


async def retry_with_backoff(
    config: RetryConfig,
    policy: RetryPolicy,
    func: Callable[[], Awaitable[T]],
) -> T:
    """Await ``func()`` until it succeeds, retrying errors the policy allows."""
    for attempt in range(1, config.max_attempts + 1):
        try:
            return await func()
        except HorizonError as error:
            if not policy.should_retry(error) or attempt >= config.max_attempts:
                raise
            backoff = calculate_backoff(attempt, config)
            logger.warning(
                "Request failed (attempt %d/%d), retrying after %.3fs: %s",
                attempt,
                config.max_attempts,
                backoff,
                error,
            )
            await asyncio.sleep(backoff)
    raise OtherHorizonError("Retry loop exhausted without returning")