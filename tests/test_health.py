import asyncio
from datetime import datetime, timezone

import pytest
import respx

from stellaraid.health import (
    HealthCheckConfig,
    HealthCheckResult,
    HealthMonitor,
    HealthStatus,
    HorizonHealthChecker,
)
from stellaraid.horizon_client import HorizonClient, HorizonClientConfig
from stellaraid.horizon_errors import ServerError

BASE = "http://localhost:8000"


def _result(status, response_time_ms, error=None):
    return HealthCheckResult(
        service="Horizon",
        status=status,
        last_check=datetime.now(timezone.utc),
        response_time_ms=response_time_ms,
        error=error,
        details=None,
    )


@pytest.mark.parametrize(
    "status, text, healthy",
    [
        (HealthStatus.HEALTHY, "Healthy", True),
        (HealthStatus.DEGRADED, "Degraded", False),
        (HealthStatus.UNHEALTHY, "Unhealthy", False),
        (HealthStatus.UNKNOWN, "Unknown", False),
    ],
)
def test_health_status_display(status, text, healthy):
    result = _result(status, 100)
    assert str(result.status) == text
    assert result.is_healthy() is healthy


def test_health_check_result():
    result = _result(HealthStatus.HEALTHY, 100)
    assert result.is_healthy()
    assert result.is_operational()


def test_health_check_degraded():
    result = _result(HealthStatus.DEGRADED, 3000)
    assert not result.is_healthy()
    assert result.is_operational()


def test_health_check_unhealthy():
    result = _result(HealthStatus.UNHEALTHY, 5000, error="Connection refused")
    assert not result.is_healthy()
    assert not result.is_operational()


def test_health_check_config_defaults():
    config = HealthCheckConfig()
    assert (config.timeout_ms, config.cache_duration_ms, config.degraded_threshold_ms) == (
        5000,
        30000,
        2000,
    )


@pytest.mark.asyncio
async def test_health_checker_cache():
    checker = HorizonHealthChecker()
    assert await checker.last_result() is None
    assert await checker.last_result_if_fresh() is None


@pytest.mark.asyncio
async def test_check_healthy():
    checker = HorizonHealthChecker()
    with respx.mock(base_url=BASE) as mock:
        mock.get("/").respond(json={"horizon_version": "1.0"})
        async with HorizonClient(HorizonClientConfig.for_testing()) as client:
            result = await checker.check(client)
    assert result.status is HealthStatus.HEALTHY
    assert result.service == "Horizon"
    assert result.details == {"horizon_version": "1.0"}
    assert result.error is None
    assert await checker.last_result() == result
    assert await checker.last_result_if_fresh() == result

    await checker.clear_cache()
    assert await checker.last_result() is None


@pytest.mark.asyncio
async def test_check_failure_records_unhealthy():
    checker = HorizonHealthChecker()
    with respx.mock(base_url=BASE) as mock:
        mock.get("/").respond(500, text="down")
        async with HorizonClient(HorizonClientConfig.for_testing()) as client:
            with pytest.raises(ServerError):
                await checker.check(client)
    last = await checker.last_result()
    assert last.status is HealthStatus.UNHEALTHY
    assert last.error == "Server error (500): down"
    assert last.details is None


@pytest.mark.asyncio
async def test_stale_result_is_not_fresh():
    checker = HorizonHealthChecker(HealthCheckConfig(cache_duration_ms=0))
    with respx.mock(base_url=BASE) as mock:
        mock.get("/").respond(json={})
        async with HorizonClient(HorizonClientConfig.for_testing()) as client:
            await checker.check(client)
    assert (await checker.last_result()).is_healthy()
    assert await checker.last_result_if_fresh() is None


@pytest.mark.asyncio
async def test_monitor_runs_checks_until_stopped():
    checker = HorizonHealthChecker()
    monitor = HealthMonitor(checker, 0.01)
    with respx.mock(base_url=BASE) as mock:
        route = mock.get("/").respond(json={"ok": True})
        async with HorizonClient(HorizonClientConfig.for_testing()) as client:
            await monitor.start(client)
            for _ in range(200):
                if route.call_count >= 2:
                    break
                await asyncio.sleep(0.01)
            monitor.stop()
            await asyncio.sleep(0.05)
            calls_after_stop = route.call_count
            await asyncio.sleep(0.05)
            assert route.call_count == calls_after_stop
    assert calls_after_stop >= 2
    assert (await checker.last_result()).details == {"ok": True}