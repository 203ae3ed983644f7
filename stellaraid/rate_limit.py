"""Client-side rate limiting for Horizon API requests."""

from __future__ import annotations

import asyncio
import threading
import time
from dataclasses import dataclass, replace

from .horizon_errors import RateLimitedError

_U32_MAX = 2**32 - 1
_POLL_INTERVAL_SECS = 0.1


def _to_u32(value: float) -> int:
    """Truncate to an unsigned 32-bit count, saturating at both ends."""
    if value != value:  # NaN
        return 0
    if value <= 0:
        return 0
    if value >= _U32_MAX:
        return _U32_MAX
    return int(value)


@dataclass
class RateLimitConfig:
    """Request limits; only ``requests_per_hour`` drives the limiter."""

    requests_per_second: float = 0.02
    requests_per_minute: int = 1
    requests_per_hour: int = 72

    @classmethod
    def public_horizon(cls) -> RateLimitConfig:
        """Limits of the public Horizon server (72 requests per hour)."""
        return cls()

    @classmethod
    def private_horizon(cls, requests_per_second: float) -> RateLimitConfig:
        """Limits derived from a per-second rate for a private server."""
        return cls(
            requests_per_second=requests_per_second,
            requests_per_minute=_to_u32(requests_per_second * 60.0),
            requests_per_hour=_to_u32(requests_per_second * 3600.0),
        )

    @classmethod
    def unlimited(cls) -> RateLimitConfig:
        """Limits high enough to never matter in practice."""
        return cls(
            requests_per_second=1000.0,
            requests_per_minute=60000,
            requests_per_hour=3600000,
        )


@dataclass(frozen=True)
class RateLimiterStats:
    """Snapshot of a limiter's configuration and readiness."""

    config: RateLimitConfig
    time_until_ready: float | None

    def is_ready(self) -> bool:
        """Whether a request could be made with no wait."""
        return self.time_until_ready == 0.0

    def wait_time_ms(self) -> int:
        """Estimated wait in whole milliseconds."""
        if self.time_until_ready is None:
            return 0
        return int(self.time_until_ready * 1000)


class _CellRateLimiter:
    """Generic cell rate algorithm allowing ``burst`` requests per ``period``."""

    def __init__(self, burst: int, period: float) -> None:
        self._burst = burst
        self._interval = period / burst
        self._tolerance = self._interval * burst
        self._tat: float | None = None
        self._lock = threading.Lock()

    def check(self) -> float:
        """Take a cell if one is free; return 0.0, or the seconds to wait."""
        with self._lock:
            now = time.monotonic()
            tat = now if self._tat is None else max(self._tat, now)
            new_tat = tat + self._interval
            wait = new_tat - self._tolerance - now
            if wait > 0:
                return wait
            self._tat = new_tat
            return 0.0


class HorizonRateLimiter:
    """Limits the rate of requests to the configured number per hour."""

    def __init__(self, config: RateLimitConfig | None = None) -> None:
        self.config = config if config is not None else RateLimitConfig()
        burst = self.config.requests_per_hour or 1
        self._limiter = _CellRateLimiter(burst, 3600.0)

    @classmethod
    def public_horizon(cls) -> HorizonRateLimiter:
        """A limiter for the public Horizon server."""
        return cls(RateLimitConfig.public_horizon())

    @classmethod
    def private_horizon(cls, requests_per_second: float) -> HorizonRateLimiter:
        """A limiter for a private Horizon server."""
        return cls(RateLimitConfig.private_horizon(requests_per_second))

    def check(self) -> bool:
        """Take permission for one request if available now."""
        return self._limiter.check() == 0.0

    async def acquire(self) -> None:
        """Wait until a request may be made, taking permission for it."""
        while not self.check():
            await asyncio.sleep(_POLL_INTERVAL_SECS)

    def try_acquire(self) -> None:
        """Take permission for one request or raise RateLimitedError.

        The error's ``retry_after`` holds the wait in whole seconds.
        """
        wait = self._limiter.check()
        if wait > 0:
            raise RateLimitedError(float(int(wait)))

    def time_until_ready(self) -> float | None:
        """Seconds until a request is allowed; 0.0 means one was taken now."""
        return self._limiter.check()

    def stats(self) -> RateLimiterStats:
        """Configuration and readiness of the limiter."""
        return RateLimiterStats(config=replace(self.config), time_until_ready=self.time_until_ready())

    def clone(self) -> HorizonRateLimiter:
        """A limiter sharing this one's state and a copy of its configuration."""
        other = HorizonRateLimiter.__new__(HorizonRateLimiter)
        other.config = replace(self.config)
        other._limiter = self._limiter
        return other