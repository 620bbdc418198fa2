import asyncio

import pytest

from superbridge.cache.ephemeral import EphemeralCache


class _Clock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def _counting_producer():
    calls = {"n": 0}

    async def _produce():
        calls["n"] += 1
        return f"value-{calls['n']}"

    return calls, _produce


@pytest.mark.asyncio
async def test_get_or_fetch_serves_cached_value_until_ttl_passes():
    clock = _Clock()
    cache = EphemeralCache(clock=clock)
    calls, produce = _counting_producer()

    assert await cache.get_or_fetch("k", 0.1, produce) == "value-1"
    clock.now = 0.05
    assert await cache.get_or_fetch("k", 0.1, produce) == "value-1"
    assert calls["n"] == 1

    clock.now = 0.15
    assert await cache.get_or_fetch("k", 0.1, produce) == "value-2"
    assert calls["n"] == 2
    assert cache.hits == 1
    assert cache.misses == 2


@pytest.mark.asyncio
async def test_infinite_ttl_never_expires():
    clock = _Clock()
    cache = EphemeralCache(clock=clock)
    cache.set("img", b"bytes", None)
    clock.now = 10**9
    assert cache.get("img") == b"bytes"
    assert "img" in cache


@pytest.mark.asyncio
async def test_concurrent_fetches_share_one_producer_call():
    cache = EphemeralCache()
    release = asyncio.Event()
    calls = {"n": 0}

    async def _slow():
        calls["n"] += 1
        await release.wait()
        return "shared"

    tasks = [asyncio.create_task(cache.get_or_fetch("k", None, _slow)) for _ in range(5)]
    await asyncio.sleep(0)
    assert cache.is_fetching("k")

    release.set()
    results = await asyncio.gather(*tasks)

    assert results == ["shared"] * 5
    assert calls["n"] == 1
    assert not cache.is_fetching("k")


@pytest.mark.asyncio
async def test_failed_producer_is_not_cached_and_reaches_all_waiters():
    cache = EphemeralCache()
    release = asyncio.Event()

    async def _fail():
        await release.wait()
        raise RuntimeError("upstream down")

    tasks = [asyncio.create_task(cache.get_or_fetch("k", 60, _fail)) for _ in range(2)]
    await asyncio.sleep(0)
    release.set()
    results = await asyncio.gather(*tasks, return_exceptions=True)

    assert all(isinstance(r, RuntimeError) for r in results)
    assert "k" not in cache
    assert not cache.is_fetching("k")

    async def _ok():
        return "recovered"

    assert await cache.get_or_fetch("k", 60, _ok) == "recovered"


@pytest.mark.asyncio
async def test_sync_producer_is_accepted():
    cache = EphemeralCache()
    assert await cache.get_or_fetch("k", None, lambda: 42) == 42
    assert cache.get("k") == 42


def test_least_recently_used_entry_is_evicted_past_capacity():
    cache = EphemeralCache(max_entries=2)
    cache.set("a", 1)
    cache.set("b", 2)
    assert cache.get("a") == 1
    cache.set("c", 3)

    assert "b" not in cache
    assert cache.get("a") == 1
    assert cache.get("c") == 3
    assert len(cache) == 2


def test_expired_entries_are_pruned_before_live_ones_are_evicted():
    clock = _Clock()
    cache = EphemeralCache(max_entries=2, clock=clock)
    cache.set("stale", 1, ttl=1)
    cache.set("live", 2)
    clock.now = 5
    cache.set("new", 3)

    assert cache.get("live") == 2
    assert cache.get("new") == 3
    assert "stale" not in cache


def test_delete_and_clear():
    cache = EphemeralCache()
    cache.set("a", 1)
    cache.set("b", 2)
    assert cache.delete("a") is True
    assert cache.delete("a") is False
    cache.clear()
    assert len(cache) == 0


def test_invalid_arguments_are_rejected():
    with pytest.raises(ValueError):
        EphemeralCache(max_entries=0)
    with pytest.raises(ValueError):
        EphemeralCache().set("k", 1, ttl=-1)
