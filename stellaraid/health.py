"""Health checks and monitoring of a Horizon server."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from .horizon_client import HorizonClient
from .horizon_errors import HorizonError

logger = logging.getLogger(__name__)

SERVICE_NAME = "Horizon"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class HealthStatus(Enum):
    """Health of a service."""

    HEALTHY = "Healthy"
    DEGRADED = "Degraded"
    UNHEALTHY = "Unhealthy"
    UNKNOWN = "Unknown"

    def __str__(self) -> str:
        return self.value


@dataclass
class HealthCheckResult:
    """Outcome of one health check."""

    service: str
    status: HealthStatus
    last_check: datetime = field(default_factory=_utcnow)
    response_time_ms: int = 0
    error: str | None = None
    details: Any = None

    def is_healthy(self) -> bool:
        """Whether the service is healthy."""
        return self.status is HealthStatus.HEALTHY

    def is_operational(self) -> bool:
        """Whether the service is healthy or degraded."""
        return self.status in (HealthStatus.HEALTHY, HealthStatus.DEGRADED)


@dataclass
class HealthCheckConfig:
    """Timings for health checks, in milliseconds."""

    timeout_ms: int = 5000
    cache_duration_ms: int = 30000
    degraded_threshold_ms: int = 2000


class HorizonHealthChecker:
    """Checks Horizon by requesting its root and remembers the last result."""

    def __init__(self, config: HealthCheckConfig | None = None) -> None:
        self.config = config if config is not None else HealthCheckConfig()
        self._last_result: HealthCheckResult | None = None

    async def check(self, client: HorizonClient) -> HealthCheckResult:
        """Check the server; the result is stored even when the check fails."""
        start = time.monotonic()
        try:
            response = await client.get("/")
        except HorizonError as error:
            self._last_result = HealthCheckResult(
                service=SERVICE_NAME,
                status=HealthStatus.UNHEALTHY,
                response_time_ms=int((time.monotonic() - start) * 1000),
                error=str(error),
            )
            raise

        response_time = int((time.monotonic() - start) * 1000)
        status = (
            HealthStatus.DEGRADED
            if response_time > self.config.degraded_threshold_ms
            else HealthStatus.HEALTHY
        )
        result = HealthCheckResult(
            service=SERVICE_NAME,
            status=status,
            response_time_ms=response_time,
            details=response,
        )
        self._last_result = result
        return result

    async def last_result(self) -> HealthCheckResult | None:
        """The most recent result, if any."""
        return self._last_result

    async def last_result_if_fresh(self) -> HealthCheckResult | None:
        """The most recent result if it is younger than the cache duration."""
        result = self._last_result
        if result is None:
            return None
        age_ms = int((_utcnow() - result.last_check).total_seconds() * 1000)
        if 0 <= age_ms < self.config.cache_duration_ms:
            return result
        return None

    async def clear_cache(self) -> None:
        """Forget the most recent result."""
        self._last_result = None


class HealthMonitor:
    """Runs health checks repeatedly in the background."""

    def __init__(self, checker: HorizonHealthChecker, check_interval_secs: float) -> None:
        self.checker = checker
        self.check_interval_secs = check_interval_secs
        self._running = False
        self._stopped = asyncio.Event()
        self._task: asyncio.Task[None] | None = None

    async def start(self, client: HorizonClient) -> None:
        """Start checking in a background task until stopped."""
        self._running = True
        self._stopped.clear()
        self._task = asyncio.get_running_loop().create_task(self._run(client))

    async def _run(self, client: HorizonClient) -> None:
        while self._running:
            try:
                result = await self.checker.check(client)
            except HorizonError as error:
                logger.warning("Health check failed: %s", error)
            else:
                logger.info(
                    "Health check passed: %s (%dms)", result.status, result.response_time_ms
                )
            try:
                await asyncio.wait_for(self._stopped.wait(), self.check_interval_secs)
            except asyncio.TimeoutError:
                pass

    def stop(self) -> None:
        """Ask the background task to finish."""
        self._running = False
        self._stopped.set()