import asyncio

import pytest

from stellaraid.horizon_errors import CacheError
from stellaraid.response_cache import CacheStats, ResponseCache


@pytest.mark.asyncio
async def test_cache_set_get():
    cache = ResponseCache(60)
    value = {"test": "value"}
    await cache.set("key1", value)
    assert await cache.get("key1") == {"test": "value"}


@pytest.mark.asyncio
async def test_cache_miss():
    cache = ResponseCache(60)
    with pytest.raises(CacheError) as info:
        await cache.get("nonexistent")
    assert str(info.value) == "Cache error: Cache miss"


@pytest.mark.asyncio
async def test_cache_clear():
    cache = ResponseCache(60)
    await cache.set("key1", {"test": "value"})
    await cache.clear()
    with pytest.raises(CacheError):
        await cache.get("key1")


@pytest.mark.asyncio
async def test_cache_stats():
    cache = ResponseCache(60)
    await cache.set("key1", {"test": "value"})
    await cache.get("key1")
    with pytest.raises(CacheError):
        await cache.get("key2")
    assert cache.stats() == CacheStats(entries=1, hits=1, misses=1)


@pytest.mark.asyncio
async def test_cache_hit_rate():
    cache = ResponseCache(60)
    await cache.set("key1", {"test": "value"})
    await cache.get("key1")
    await cache.get("key1")
    with pytest.raises(CacheError):
        await cache.get("key2")
    rate = cache.hit_rate()
    assert 60.0 < rate < 70.0


def test_hit_rate_without_lookups():
    assert ResponseCache(60).hit_rate() == 0.0


@pytest.mark.asyncio
async def test_reset_stats():
    cache = ResponseCache(60)
    with pytest.raises(CacheError):
        await cache.get("missing")
    cache.reset_stats()
    stats = cache.stats()
    assert (stats.hits, stats.misses) == (0, 0)
    assert cache.hit_rate() == 0.0


@pytest.mark.asyncio
async def test_entries_expire_after_ttl():
    cache = ResponseCache(0.05)
    await cache.set("key1", [1, 2, 3])
    await asyncio.sleep(0.15)
    with pytest.raises(CacheError):
        await cache.get("key1")
    assert cache.stats().entries == 0