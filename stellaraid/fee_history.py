"""Record of observed base fees and statistics over them."""

from __future__ import annotations

import math
from collections import deque
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from datetime import datetime, timezone

from .fee_errors import InvalidFeeValueError


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class FeeRecord:
    """A base fee observed at a point in time."""

    base_fee_stroops: int
    source: str
    timestamp: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        if self.base_fee_stroops < 0:
            raise InvalidFeeValueError("base_fee_stroops cannot be negative")

    def age_seconds(self) -> int:
        """Whole seconds since the fee was observed."""
        return int((_utcnow() - self.timestamp).total_seconds())


@dataclass(frozen=True)
class FeeStats:
    """Summary statistics over a set of fee records."""

    min_fee: int
    max_fee: int
    avg_fee: float
    median_fee: int
    std_dev: float
    total_records: int

    @classmethod
    def calculate(cls, records: Iterable[FeeRecord]) -> FeeStats | None:
        """Statistics for the records, or None when there are none."""
        fees = sorted(record.base_fee_stroops for record in records)
        if not fees:
            return None
        count = len(fees)
        avg = sum(fees) / count
        mid = count // 2
        median = (fees[mid - 1] + fees[mid]) // 2 if count % 2 == 0 else fees[mid]
        variance = sum((fee - avg) ** 2 for fee in fees) / count
        return cls(
            min_fee=fees[0],
            max_fee=fees[-1],
            avg_fee=avg,
            median_fee=median,
            std_dev=math.sqrt(variance),
            total_records=count,
        )


class FeeHistory:
    """Keeps the most recent ``max_records`` fee observations."""

    def __init__(self, max_records: int = 1000) -> None:
        self.max_records = max_records
        self._records: deque[FeeRecord] = deque(maxlen=max_records)

    def add(self, base_fee_stroops: int, source: str) -> None:
        """Record a fee; the oldest record is dropped once full."""
        self._records.append(FeeRecord(base_fee_stroops, source))

    def within_time_window(self, seconds: int) -> list[FeeRecord]:
        """Records no older than the given number of seconds."""
        return [record for record in self._records if record.age_seconds() <= seconds]

    def latest(self) -> FeeRecord | None:
        """The most recent record, if any."""
        return self._records[-1] if self._records else None

    def oldest(self) -> FeeRecord | None:
        """The oldest record kept, if any."""
        return self._records[0] if self._records else None

    def stats(self) -> FeeStats | None:
        """Statistics over all records."""
        return FeeStats.calculate(self._records)

    def recent_stats(self, seconds: int) -> FeeStats | None:
        """Statistics over records within the time window."""
        return FeeStats.calculate(self.within_time_window(seconds))

    def clear(self) -> None:
        """Drop all records."""
        self._records.clear()

    def prune_older_than(self, seconds: int) -> None:
        """Drop records older than the given number of seconds."""
        self._records = deque(self.within_time_window(seconds), maxlen=self.max_records)

    def max_change_percent(self, seconds: int) -> float | None:
        """Spread between highest and lowest recent fee, as a percent of the lowest."""
        fees = [record.base_fee_stroops for record in self.within_time_window(seconds)]
        if len(fees) < 2:
            return None
        low, high = min(fees), max(fees)
        if low == 0:
            return None
        return (high - low) / low * 100.0

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[FeeRecord]:
        return iter(self._records)