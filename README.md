# stellaraid

A library for working with Stellar transaction fees and the Horizon API:

- **Fee estimation**: compute fees in stroops and XLM, cache the network
  base fee, keep a fee history with statistics, and detect surge pricing.
- **Currency display**: convert XLM fees into other currencies using
  exchange rates you supply, and format them with the right symbol.
- **Horizon client**: an async HTTP client with rate limiting, exponential
  backoff retries, response caching and health monitoring.

All durations taken or returned by the Horizon client, rate limiter and retry
modules are in seconds unless a name says otherwise (`timeout_ms`,
`wait_time_ms()` and the like).

## Installation

```
pip install stellaraid
```

For running the test suite:

```
pip install "stellaraid[test]"
pytest
```

## Fee calculation

One XLM is 10,000,000 stroops; the standard base fee is 100 stroops per
operation.

```python
from stellaraid.fee_calculator import FeeInfo, calculate_fee, stroops_to_xlm, xlm_to_stroops

calculate_fee(100, 5)        # 500
stroops_to_xlm(10_000_000)   # 1.0
xlm_to_stroops(0.1)          # 1000000

info = FeeInfo(100, 3, False, 100.0)   # base fee, operations, surge?, surge percent
info.total_fee_stroops       # 300
info.total_fee_xlm           # 3e-05
info.exceeds_threshold(0.00001)  # True (strictly greater than)
info.is_fresh(60)            # True while younger than 60 seconds
```

Invalid input raises an exception from `stellaraid.fee_errors`, all derived
from `FeeError`: an operation count below one raises
`InvalidOperationCountError`, a negative fee raises `InvalidFeeValueError`.
`calculate_surge_percent(current_fee, normal_fee)` gives the current fee as a
percentage of the normal one (100.0 when the normal fee is zero).

## Caching and history

```python
from stellaraid.fee_cache import FeeCache
from stellaraid.fee_history import FeeHistory

cache = FeeCache(300)        # time to live in seconds
cache.set(100)
cache.get()                  # 100 while fresh, None once expired
cache.get_unchecked()        # 100 even after expiry
cache.metadata()             # CacheMetadata with age and time until expiration

history = FeeHistory(1000)   # keeps the most recent 1000 records
history.add(100, "Horizon API")
history.add(150, "Horizon API")
stats = history.stats()
stats.min_fee, stats.max_fee, stats.median_fee   # (100, 150, 125)
history.max_change_percent(60)                   # 50.0
```

`FeeHistory` also offers `latest()`, `oldest()`, `within_time_window(seconds)`,
`recent_stats(seconds)`, `prune_older_than(seconds)` and `clear()`, and can be
iterated and measured with `len()`.

## Surge pricing

```python
from stellaraid.surge_pricing import SurgePricingAnalyzer, SurgePricingConfig

analyzer = SurgePricingAnalyzer(SurgePricingConfig())
analysis = analyzer.analyze(250)
analysis.surge_level         # SurgePricingLevel.HIGH
analysis.is_surge            # True
analysis.trend               # FeeTrend.STABLE, INCREASING or DECREASING
analysis.recommendation      # "Network is congested. Consider waiting if not urgent."
```

Levels are Normal (up to 100 %), Elevated (above 100 %), High (from 150 %)
and Critical (from 300 %) of the normal 100-stroop base fee. The analyzer keeps
the last `window_size` (default 10) fees it has seen; `average_fee()`,
`max_fee()` and `min_fee()` report on them and `reset_history()` forgets them.
The trend compares the average of the newer half of that window with the older
half; a change of more than 10 % either way counts as rising or falling.

## Currency conversion

```python
from stellaraid.currency import Currency, CurrencyConverter, FormattedAmount

converter = CurrencyConverter()
converter.set_rate(Currency.XLM, Currency.USD, 0.25)
converter.convert(100.0, Currency.XLM, Currency.USD)   # 25.0
converter.convert_xlm_fee(1.0, Currency.USD)           # 0.25

FormattedAmount(1.5, Currency.USD).format(2)           # "$ 1.50"
str(FormattedAmount(1.5, Currency.USD))                # "$ 1.50000000"
```

Supported codes: XLM, USD, EUR, GBP, JPY, CNY, INR, BRL, AUD, CAD.
`Currency.from_code("usd")` accepts any letter case and raises
`InvalidCurrencyError` for unknown codes. A missing rate, a non-positive rate or
a negative amount raises `CurrencyConversionError`. Rates are used only in the
direction they were set.

## Fee estimation service

The service ties everything together: it fetches the latest ledger's base fee
from Horizon, caches it, records it in history and analyses it for surges.

```python
import asyncio

from stellaraid.currency import Currency
from stellaraid.fee_service import FeeEstimationService


async def main():
    service = FeeEstimationService.public_horizon()
    await service.set_exchange_rate(Currency.XLM, Currency.EUR, 0.22)
    info, eur = await service.estimate_fee_in_currency(3, Currency.EUR)
    print(info.total_fee_stroops, eur)
    print(await service.get_surge_info())


asyncio.run(main())
```

While a fetched base fee is still cached (300 seconds by default), estimates
reuse it and report no surge pricing at 100 %; only a fresh fetch is analysed
for surges. `batch_estimate_fees`, `is_surging`, `get_fee_stats`,
`get_recent_fee_stats`, `get_cache_metadata`, `get_history_count`,
`clear_cache` and `clear_history` round out the service.

## Horizon client

```python
import asyncio

from stellaraid.horizon_client import HorizonClient, HorizonClientConfig
from stellaraid.horizon_errors import HorizonError


async def main():
    config = HorizonClientConfig.private_horizon("http://localhost:8000", 10.0)
    async with HorizonClient(config) as client:
        try:
            ledgers = await client.get("/ledgers?sort=desc&limit=1")
            print(ledgers)
        except HorizonError as exc:
            print("request failed:", exc, "retryable:", exc.is_retryable)


asyncio.run(main())
```

Requests wait for the rate limiter (`stellaraid.rate_limit`), failures that the
retry policy allows are retried with exponential backoff and jitter
(`stellaraid.retry`), and successful responses are cached for the configured
time to live (`stellaraid.response_cache`). Errors are raised as subclasses of
`HorizonError`, such as `NotFoundError`, `RateLimitedError` (with the server's
`Retry-After` value, 60 seconds when absent) or `ServerError`; each carries
`is_retryable`, `is_server_error`, `is_client_error` and
`suggested_retry_duration()`.

`HorizonClientConfig.for_testing()` points at `http://localhost:8000` with no
rate limit, retries or cache. The retry helpers can also be used on their own:

```python
from stellaraid.retry import RetryConfig, RetryPolicy, retry_with_backoff

result = await retry_with_backoff(RetryConfig.conservative(), RetryPolicy.ALL_RETRYABLE, fetch)
```

The rate limiter spreads `requests_per_hour` evenly over the hour, allowing
that many requests in a burst. Note that `check()`, `time_until_ready()` and
`stats()` take permission for a request when one is free.

## Health checks

```python
from stellaraid.health import HealthCheckConfig, HealthMonitor, HorizonHealthChecker


async def watch(client):
    checker = HorizonHealthChecker(HealthCheckConfig())
    result = await checker.check(client)
    print(result.status)     # HealthStatus.HEALTHY or DEGRADED; a failure raises

    monitor = HealthMonitor(checker, 60)
    await monitor.start(client)  # checks every 60 seconds in the background
    ...
    monitor.stop()
```

A check requests the server root. A response slower than the degraded
threshold (2 seconds by default) is reported as Degraded; a failed request
re-raises its error after recording an Unhealthy result, which
`last_result()` and `last_result_if_fresh()` return afterwards.

## What this package does not do

It is a library only: there is no command-line program. It does not build,
sign or submit transactions, and it does not fetch exchange rates; rates must be
supplied with `set_rate` or `set_exchange_rate`. Caches and history live in
memory and are lost when the process ends.