"""Time-limited cache for the network base fee."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from .fee_errors import InvalidFeeValueError

DEFAULT_CACHE_TTL_SECS = 300


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class CachedFeeData:
    """A base fee together with when it was fetched and how long it lives."""

    base_fee_stroops: int
    ttl_seconds: int
    fetched_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        if self.base_fee_stroops < 0:
            raise InvalidFeeValueError("base_fee_stroops cannot be negative")

    def age_seconds(self) -> int:
        """Whole seconds since the fee was fetched."""
        return int((_utcnow() - self.fetched_at).total_seconds())

    def is_valid(self) -> bool:
        """Whether the data is younger than its TTL."""
        return self.age_seconds() < self.ttl_seconds

    def time_until_expiration(self) -> int:
        """Seconds left before the data expires, never negative."""
        return max(self.ttl_seconds - self.age_seconds(), 0)


@dataclass(frozen=True)
class CacheMetadata:
    """Snapshot of the cache's current entry."""

    base_fee_stroops: int
    fetched_at: datetime
    age_seconds: int
    time_until_expiration: int
    is_valid: bool


class FeeCache:
    """Holds at most one base fee, valid for ``ttl_seconds``."""

    def __init__(self, ttl_seconds: int = DEFAULT_CACHE_TTL_SECS) -> None:
        self.ttl_seconds = ttl_seconds
        self._data: CachedFeeData | None = None

    def set(self, base_fee_stroops: int) -> None:
        """Store a base fee; raises InvalidFeeValueError if it is negative."""
        self._data = CachedFeeData(base_fee_stroops, self.ttl_seconds)

    def get(self) -> int | None:
        """The cached base fee if it is still valid, else None."""
        if self._data is not None and self._data.is_valid():
            return self._data.base_fee_stroops
        return None

    def get_unchecked(self) -> int | None:
        """The cached base fee whether or not it has expired."""
        return None if self._data is None else self._data.base_fee_stroops

    def is_valid(self) -> bool:
        """Whether the cache holds unexpired data."""
        return self._data is not None and self._data.is_valid()

    def has_data(self) -> bool:
        """Whether the cache holds any data, expired or not."""
        return self._data is not None

    def clear(self) -> None:
        """Drop the cached data."""
        self._data = None

    def metadata(self) -> CacheMetadata | None:
        """Details of the cached entry, or None when empty."""
        data = self._data
        if data is None:
            return None
        return CacheMetadata(
            base_fee_stroops=data.base_fee_stroops,
            fetched_at=data.fetched_at,
            age_seconds=data.age_seconds(),
            time_until_expiration=data.time_until_expiration(),
            is_valid=data.is_valid(),
        )