"""Fee estimation service combining fetching, caching, history and surge analysis."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from .currency import Currency, CurrencyConverter
from .fee_cache import DEFAULT_CACHE_TTL_SECS, CacheMetadata, FeeCache
from .fee_calculator import FeeConfig, FeeInfo
from .fee_history import FeeHistory, FeeStats
from .horizon_fetcher import PUBLIC_HORIZON_URL, HorizonFeeFetcher
from .surge_pricing import SurgePricingAnalyzer, SurgePricingConfig

logger = logging.getLogger(__name__)


@dataclass
class FeeServiceConfig:
    """Settings for the fee estimation service."""

    horizon_url: str = PUBLIC_HORIZON_URL
    cache_ttl_secs: int = DEFAULT_CACHE_TTL_SECS
    fetch_timeout_secs: float = 30
    max_history_records: int = 1000
    enable_surge_detection: bool = True


class FeeEstimationService:
    """Estimates transaction fees from the current Horizon base fee."""

    def __init__(self, config: FeeServiceConfig | None = None) -> None:
        self.config = config if config is not None else FeeServiceConfig()
        self.fee_config = FeeConfig()
        self._fetcher = HorizonFeeFetcher(
            self.config.horizon_url, self.config.fetch_timeout_secs
        )
        self._cache = FeeCache(self.config.cache_ttl_secs)
        self._history = FeeHistory(self.config.max_history_records)
        self._surge_analyzer = SurgePricingAnalyzer(SurgePricingConfig())
        self._converter = CurrencyConverter()

    @classmethod
    def public_horizon(cls) -> FeeEstimationService:
        """A service using the public Horizon server."""
        return cls(FeeServiceConfig())

    async def estimate_fee(self, operation_count: int) -> FeeInfo:
        """Estimate the fee for a transaction with the given number of operations."""
        logger.info("Estimating fee for %d operations", operation_count)

        cached_fee = self._cache.get()
        if cached_fee is not None:
            logger.info("Using cached base fee: %d stroops", cached_fee)
            return FeeInfo(cached_fee, operation_count, False, 100.0)

        base_fee = await self._fetch_and_cache_fee()
        analysis = self._surge_analyzer.analyze(base_fee)
        logger.info(
            "Base fee: %d stroops, Surge level: %s", base_fee, analysis.surge_level.label
        )
        return FeeInfo(base_fee, operation_count, analysis.is_surge, analysis.surge_percent)

    async def estimate_fee_in_currency(
        self, operation_count: int, currency: Currency
    ) -> tuple[FeeInfo, float]:
        """Estimate a fee and also express its total in the given currency."""
        fee_info = await self.estimate_fee(operation_count)
        if currency == Currency.XLM:
            return fee_info, fee_info.total_fee_xlm
        converted = self._converter.convert_xlm_fee(fee_info.total_fee_xlm, currency)
        return fee_info, converted

    async def set_exchange_rate(
        self, from_currency: Currency, to_currency: Currency, rate: float
    ) -> None:
        """Record an exchange rate used for conversions."""
        self._converter.set_rate(from_currency, to_currency, rate)

    async def get_fee_stats(self) -> FeeStats | None:
        """Statistics over all fetched fees."""
        return self._history.stats()

    async def get_recent_fee_stats(self, seconds: int) -> FeeStats | None:
        """Statistics over fees fetched within the last ``seconds``."""
        return self._history.recent_stats(seconds)

    async def _fetch_and_cache_fee(self) -> int:
        logger.debug("Fetching base fee from Horizon")
        base_fee = await self._fetcher.fetch_base_fee()
        self._cache.set(base_fee)
        self._history.add(base_fee, "Horizon API")
        return base_fee

    async def clear_cache(self) -> None:
        """Drop the cached base fee."""
        self._cache.clear()
        logger.info("Fee cache cleared")

    async def clear_history(self) -> None:
        """Drop all fee history."""
        self._history.clear()
        logger.info("Fee history cleared")

    async def get_cache_metadata(self) -> CacheMetadata | None:
        """Details of the cached base fee, if any."""
        return self._cache.metadata()

    async def get_history_count(self) -> int:
        """Number of fees kept in history."""
        return len(self._history)

    async def batch_estimate_fees(self, operation_counts: Iterable[int]) -> list[FeeInfo]:
        """Estimate fees for several operation counts in order."""
        return [await self.estimate_fee(count) for count in operation_counts]

    async def is_surging(self) -> bool:
        """Whether a single-operation estimate reports surge pricing."""
        fee_info = await self.estimate_fee(1)
        return fee_info.is_surge_pricing

    async def get_surge_info(self) -> str | None:
        """A summary of surge pricing for the cached fee, if one is cached."""
        base_fee = self._cache.get()
        if base_fee is None:
            return None
        analysis = self._surge_analyzer.analyze(base_fee)
        return (
            f"{analysis.surge_level.label}: {analysis.recommendation} "
            f"({int(analysis.surge_percent)}%)"
        )