"""Transaction fee calculation and stroop/XLM conversion."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from .fee_errors import InvalidFeeValueError, InvalidOperationCountError

BASE_FEE_STROOPS = 100
BASE_FEE_XLM = 0.00001
STROOPS_PER_XLM = 10_000_000

_I64_MAX = 2**63 - 1


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class FeeConfig:
    """Settings for fee calculation."""

    base_fee_stroops: int = BASE_FEE_STROOPS
    min_fee_xlm: float = 0.00001
    max_fee_xlm: float = 100.0
    surge_threshold_percent: float = 150.0


def calculate_fee(base_fee_stroops: int, operation_count: int) -> int:
    """Return the total fee in stroops for the given number of operations."""
    if operation_count < 1:
        raise InvalidOperationCountError("operation_count must be at least 1")
    if base_fee_stroops < 0:
        raise InvalidFeeValueError("base_fee_stroops cannot be negative")
    total = base_fee_stroops * operation_count
    if total > _I64_MAX:
        raise InvalidFeeValueError("fee calculation overflow")
    return total


def stroops_to_xlm(stroops: int) -> float:
    """Convert stroops to XLM."""
    return stroops / STROOPS_PER_XLM


def xlm_to_stroops(xlm: float) -> int:
    """Convert XLM to stroops, truncating any fraction of a stroop."""
    return int(xlm * STROOPS_PER_XLM)


def calculate_surge_percent(current_fee: int, normal_fee: int) -> float:
    """Return the current fee as a percentage of the normal fee."""
    if normal_fee == 0:
        return 100.0
    return current_fee / normal_fee * 100.0


@dataclass
class FeeInfo:
    """Fee details for one transaction."""

    base_fee_stroops: int
    operation_count: int
    is_surge_pricing: bool
    surge_percent: float
    total_fee_stroops: int = field(init=False)
    total_fee_xlm: float = field(init=False)
    fetched_at: datetime = field(init=False, default_factory=_utcnow)

    def __post_init__(self) -> None:
        self.total_fee_stroops = calculate_fee(self.base_fee_stroops, self.operation_count)
        self.total_fee_xlm = stroops_to_xlm(self.total_fee_stroops)

    def exceeds_threshold(self, threshold_xlm: float) -> bool:
        """Whether the total fee is strictly above the threshold."""
        return self.total_fee_xlm > threshold_xlm

    def age_seconds(self) -> int:
        """Whole seconds since the fee was computed."""
        return int((_utcnow() - self.fetched_at).total_seconds())

    def is_fresh(self, cache_ttl_seconds: int) -> bool:
        """Whether the fee is younger than the given TTL."""
        return self.age_seconds() < cache_ttl_seconds