"""
Tests for KeyedCache
"""
import asyncio

import pytest

from core.cache import KeyedCache


@pytest.mark.asyncio
async def test_get_or_compute_caches_value():
    """测试计算结果被缓存"""
    cache = KeyedCache("test")
    calls = []

    async def compute():
        calls.append(1)
        return "value"

    assert await cache.get_or_compute("k", compute) == "value"
    assert await cache.get_or_compute("k", compute) == "value"
    assert len(calls) == 1
    assert "k" in cache
    assert len(cache) == 1


@pytest.mark.asyncio
async def test_failures_are_not_cached():
    """测试失败不缓存，重试会重新计算"""
    cache = KeyedCache("test")
    attempts = []

    async def compute():
        attempts.append(1)
        if len(attempts) == 1:
            raise ValueError("first attempt fails")
        return 42

    with pytest.raises(ValueError):
        await cache.get_or_compute("k", compute)
    assert "k" not in cache

    assert await cache.get_or_compute("k", compute) == 42
    assert len(attempts) == 2


@pytest.mark.asyncio
async def test_single_flight_shares_computation():
    """测试并发请求共享同一次计算"""
    cache = KeyedCache("test", single_flight=True)
    started = []
    release = asyncio.Event()

    async def compute():
        started.append(1)
        await release.wait()
        return "shared"

    first = asyncio.create_task(cache.get_or_compute("k", compute))
    second = asyncio.create_task(cache.get_or_compute("k", compute))
    await asyncio.sleep(0)
    release.set()

    assert await asyncio.gather(first, second) == ["shared", "shared"]
    assert len(started) == 1


@pytest.mark.asyncio
async def test_single_flight_delivers_failure_to_all_waiters():
    cache = KeyedCache("test", single_flight=True)
    release = asyncio.Event()

    async def compute():
        await release.wait()
        raise RuntimeError("boom")

    first = asyncio.create_task(cache.get_or_compute("k", compute))
    second = asyncio.create_task(cache.get_or_compute("k", compute))
    await asyncio.sleep(0)
    release.set()

    results = await asyncio.gather(first, second, return_exceptions=True)
    assert all(isinstance(r, RuntimeError) for r in results)
    assert "k" not in cache


@pytest.mark.asyncio
async def test_without_single_flight_concurrent_misses_compute_twice():
    """测试关闭single flight时并发首次访问会重复计算"""
    cache = KeyedCache("test", single_flight=False)
    started = []
    release = asyncio.Event()

    async def compute():
        started.append(1)
        await release.wait()
        return len(started)

    first = asyncio.create_task(cache.get_or_compute("k", compute))
    second = asyncio.create_task(cache.get_or_compute("k", compute))
    await asyncio.sleep(0)
    release.set()
    await asyncio.gather(first, second)

    assert len(started) == 2
    assert "k" in cache


def test_set_and_get():
    cache = KeyedCache("test")
    cache.set("a", 1)
    assert cache.get("a") == 1
    assert cache.get("missing") is None
    assert len(cache) == 1


@pytest.mark.asyncio
async def test_waiter_survives_cancelled_computation():
    """测试计算方被取消时等待方接手计算"""
    cache = KeyedCache("test", single_flight=True)
    calls = []
    release = asyncio.Event()

    async def compute():
        calls.append(1)
        await release.wait()
        return len(calls)

    first = asyncio.create_task(cache.get_or_compute("k", compute))
    second = asyncio.create_task(cache.get_or_compute("k", compute))
    await asyncio.sleep(0)

    first.cancel()
    release.set()

    with pytest.raises(asyncio.CancelledError):
        await first
    assert await second == 2
    assert cache.get("k") == 2


@pytest.mark.asyncio
async def test_waiter_cancellation_is_not_swallowed():
    cache = KeyedCache("test", single_flight=True)
    release = asyncio.Event()

    async def compute():
        await release.wait()
        return "value"

    first = asyncio.create_task(cache.get_or_compute("k", compute))
    second = asyncio.create_task(cache.get_or_compute("k", compute))
    await asyncio.sleep(0)

    second.cancel()
    with pytest.raises(asyncio.CancelledError):
        await second

    release.set()
    assert await first == "value"
