from datetime import timedelta

import pytest

from stellaraid.fee_cache import DEFAULT_CACHE_TTL_SECS, CachedFeeData, FeeCache
from stellaraid.fee_errors import InvalidFeeValueError


def test_cache_set_and_get():
    cache = FeeCache()
    assert cache.get() is None
    cache.set(100)
    assert cache.get() == 100


def test_default_ttl():
    assert FeeCache().ttl_seconds == DEFAULT_CACHE_TTL_SECS == 300


def test_cache_validity():
    cache = FeeCache(10)
    cache.set(100)
    assert cache.is_valid()
    assert cache.has_data()


def test_cache_clear():
    cache = FeeCache()
    cache.set(100)
    assert cache.has_data()
    cache.clear()
    assert not cache.has_data()
    assert cache.get() is None
    assert cache.metadata() is None


def test_cache_invalid_fee():
    cache = FeeCache()
    with pytest.raises(InvalidFeeValueError):
        cache.set(-100)
    assert not cache.has_data()


def test_cache_metadata():
    cache = FeeCache(60)
    cache.set(100)
    metadata = cache.metadata()
    assert metadata.base_fee_stroops == 100
    assert metadata.is_valid is True
    assert metadata.age_seconds >= 0
    assert metadata.time_until_expiration <= 60


def test_cache_get_unchecked():
    cache = FeeCache(1)
    cache.set(100)
    assert cache.get_unchecked() == 100


def test_expired_cache():
    cache = FeeCache(0)
    cache.set(100)
    assert cache.get() is None
    assert not cache.is_valid()
    assert cache.has_data()
    assert cache.get_unchecked() == 100
    assert cache.metadata().time_until_expiration == 0


def test_cache_set_ttl():
    cache = FeeCache(10)
    assert cache.ttl_seconds == 10
    cache.ttl_seconds = 20
    cache.set(5)
    assert cache.ttl_seconds == 20
    assert cache.metadata().time_until_expiration <= 20
    assert cache.metadata().time_until_expiration > 10


def test_cached_fee_data_creation():
    data = CachedFeeData(100, 300)
    assert data.base_fee_stroops == 100
    assert data.ttl_seconds == 300


def test_cached_fee_data_negative():
    with pytest.raises(InvalidFeeValueError):
        CachedFeeData(-1, 300)


def test_cached_fee_data_age():
    data = CachedFeeData(100, 300)
    assert data.age_seconds() >= 0
    assert data.is_valid()


def test_cached_fee_data_expires():
    data = CachedFeeData(100, 300)
    data.fetched_at -= timedelta(seconds=400)
    assert data.age_seconds() >= 400
    assert not data.is_valid()
    assert data.time_until_expiration() == 0