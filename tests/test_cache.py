"""
Tests for the TTL cache.

Run with: pytest tests/
"""
import asyncio

import pytest

from neo_watch.cache import TTLCache
from neo_watch.errors import UpstreamUnreachable


class TestExpiry:
    """Entries live exactly as long as their TTL"""

    def test_value_visible_until_ttl_elapses(self, cache, clock):
        cache.set("neo_feed:2024-01-01:2024-01-07", {"element_count": 3}, ttl_seconds=60)

        assert cache.get("neo_feed:2024-01-01:2024-01-07") == {"element_count": 3}

        clock.advance(59)
        assert cache.get("neo_feed:2024-01-01:2024-01-07") == {"element_count": 3}

        clock.advance(1)
        assert cache.get("neo_feed:2024-01-01:2024-01-07") is None

    def test_default_ttl_is_used_when_not_given(self, clock):
        cache = TTLCache(default_ttl=3600, clock=clock)
        cache.set("k", "v")

        clock.advance(3599)
        assert cache.get("k") == "v"
        clock.advance(1)
        assert cache.get("k") is None

    def test_overwrite_resets_expiry(self, cache, clock):
        cache.set("k", "old", ttl_seconds=10)
        clock.advance(8)
        cache.set("k", "new", ttl_seconds=10)
        clock.advance(8)

        assert cache.get("k") == "new"

    def test_expired_entries_not_counted(self, cache, clock):
        cache.set("a", 1, ttl_seconds=5)
        cache.set("b", 2, ttl_seconds=50)
        clock.advance(10)

        assert cache.stats()["count"] == 1
        assert len(cache) == 1


class TestCounters:

    def test_hits_and_misses(self, cache):
        cache.get("missing")
        cache.set("present", 1)
        cache.get("present")
        cache.get("present")

        assert cache.stats() == {"count": 1, "hits": 2, "misses": 1}

    def test_expired_read_is_a_miss(self, cache, clock):
        cache.set("k", 1, ttl_seconds=1)
        clock.advance(2)
        cache.get("k")

        assert cache.stats()["misses"] == 1
        assert cache.stats()["hits"] == 0


class TestInvalidate:

    def test_pattern_removes_matching_keys_only(self, cache):
        cache.set("neo_feed:2024-01-01:2024-01-07", 1)
        cache.set("neo_feed:2024-01-07:2024-01-14", 2)
        cache.set("neo:3542519", 3)

        removed = cache.invalidate("neo_feed")

        assert removed == 2
        assert cache.get("neo:3542519") == 3
        assert cache.get("neo_feed:2024-01-01:2024-01-07") is None

    def test_no_pattern_clears_everything(self, cache):
        cache.set("a", 1)
        cache.set("b", 2)

        assert cache.invalidate() == 2
        assert cache.stats()["count"] == 0


class TestGetOrFetch:

    def test_miss_fetches_and_stores(self, cache):
        calls = []

        async def fetch():
            calls.append(1)
            return {"payload": True}

        async def scenario():
            first = await cache.get_or_fetch("k", fetch)
            second = await cache.get_or_fetch("k", fetch)
            return first, second

        first, second = asyncio.run(scenario())

        assert first == second == {"payload": True}
        assert len(calls) == 1
        assert cache.stats()["hits"] == 1

    def test_concurrent_misses_share_one_fetch(self, cache):
        calls = []

        async def fetch():
            calls.append(1)
            await asyncio.sleep(0)
            await asyncio.sleep(0)
            return "value"

        async def scenario():
            return await asyncio.gather(*(cache.get_or_fetch("k", fetch) for _ in range(5)))

        results = asyncio.run(scenario())

        assert results == ["value"] * 5
        assert len(calls) == 1

    def test_failures_are_not_cached(self, cache):
        attempts = []

        async def flaky():
            attempts.append(1)
            if len(attempts) == 1:
                raise RuntimeError("boom")
            return "ok"

        async def scenario():
            with pytest.raises(RuntimeError):
                await cache.get_or_fetch("k", flaky)
            return await cache.get_or_fetch("k", flaky)

        assert asyncio.run(scenario()) == "ok"
        assert len(attempts) == 2

    def test_cancelled_fetch_fails_waiters_instead_of_cancelling_them(self, cache):
        async def slow():
            await asyncio.sleep(10)
            return "never"

        async def fast():
            return "fresh"

        async def scenario():
            leader = asyncio.create_task(cache.get_or_fetch("k", slow))
            await asyncio.sleep(0)
            waiter = asyncio.create_task(cache.get_or_fetch("k", slow))
            await asyncio.sleep(0)

            leader.cancel()
            with pytest.raises(asyncio.CancelledError):
                await leader
            with pytest.raises(UpstreamUnreachable):
                await waiter
            assert not waiter.cancelled()
            return await cache.get_or_fetch("k", fast)

        assert asyncio.run(scenario()) == "fresh"

    def test_cancelled_waiter_leaves_fetch_running(self, cache):
        release = []

        async def fetch():
            while not release:
                await asyncio.sleep(0)
            return "value"

        async def scenario():
            leader = asyncio.create_task(cache.get_or_fetch("k", fetch))
            await asyncio.sleep(0)
            waiter = asyncio.create_task(cache.get_or_fetch("k", fetch))
            await asyncio.sleep(0)

            waiter.cancel()
            with pytest.raises(asyncio.CancelledError):
                await waiter
            release.append(1)
            return await leader

        assert asyncio.run(scenario()) == "value"
        assert cache.get("k") == "value"
