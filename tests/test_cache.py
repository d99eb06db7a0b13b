"""Unit tests for the freshness cache and the de-duplicating loader."""
import asyncio
import pytest
from trainingcog.services.cache import (
    CachedLoader, FetchAborted, FetchFailed, FreshnessCache, is_abort_error,
)

TTL = 300


class TestFreshnessCache:

    def test_set_then_get(self, fake_clock):
        cache = FreshnessCache(ttl=TTL, clock=fake_clock)
        cache.set("admin:sedi", ["Roma"])
        assert cache.get("admin:sedi") == ["Roma"]

    def test_missing_key(self, fake_clock):
        assert FreshnessCache(ttl=TTL, clock=fake_clock).get("nope") is None

    def test_entry_valid_just_before_ttl(self, fake_clock):
        cache = FreshnessCache(ttl=TTL, clock=fake_clock)
        cache.set("k", 1)
        fake_clock.advance(TTL - 0.001)
        assert cache.get("k") == 1

    def test_expired_entry_is_absent_and_purged(self, fake_clock):
        cache = FreshnessCache(ttl=TTL, clock=fake_clock)
        cache.set("k", 1)
        cache.set("other", 2)
        fake_clock.advance(TTL)
        assert len(cache) == 2
        assert cache.get("k") is None
        assert len(cache) == 1
        assert "k" not in cache

    def test_invalidate_regardless_of_age(self, fake_clock):
        cache = FreshnessCache(ttl=TTL, clock=fake_clock)
        cache.set("k", 1)
        cache.invalidate("k")
        assert cache.get("k") is None
        # Unknown keys are fine
        cache.invalidate("k")

    def test_set_overwrites_and_refreshes_timestamp(self, fake_clock):
        cache = FreshnessCache(ttl=TTL, clock=fake_clock)
        cache.set("k", "old")
        fake_clock.advance(TTL - 1)
        cache.set("k", "new")
        fake_clock.advance(TTL - 1)
        assert cache.get("k") == "new"

    def test_keys_do_not_interfere(self, fake_clock):
        cache = FreshnessCache(ttl=TTL, clock=fake_clock)
        cache.set("admin:sedi", ["Roma"])
        cache.set("admin:ruoli", ["educatore"])
        assert cache.get("admin:sedi") == ["Roma"]
        assert cache.get("admin:ruoli") == ["educatore"]

    def test_clear(self, fake_clock):
        cache = FreshnessCache(ttl=TTL, clock=fake_clock)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.clear()
        assert len(cache) == 0
        assert cache.get("a") is None

    def test_broken_clock_is_a_miss(self):
        calls = {"n": 0}

        def clock():
            calls["n"] += 1
            if calls["n"] > 1:
                raise RuntimeError("clock broke")
            return 0.0

        cache = FreshnessCache(ttl=TTL, clock=clock)
        cache.set("k", 1)
        assert cache.get("k") is None


class TestIsAbortError:

    def test_recognised(self):
        assert is_abort_error(asyncio.CancelledError())
        assert is_abort_error(FetchAborted("k"))
        assert is_abort_error(RuntimeError("AbortError: The user aborted a request."))

    def test_genuine_failure(self):
        assert not is_abort_error(ConnectionError("refused"))


class TestCachedLoader:

    def test_miss_fetches_and_caches(self, fake_clock):
        cache = FreshnessCache(ttl=TTL, clock=fake_clock)
        loader = CachedLoader(cache)
        calls = []

        async def fetch():
            calls.append(1)
            return ["Roma", "Milano"]

        async def scenario():
            first = await loader.load("admin:sedi", fetch)
            second = await loader.load("admin:sedi", fetch)
            return first, second

        first, second = asyncio.run(scenario())
        assert first == second == ["Roma", "Milano"]
        assert len(calls) == 1
        assert cache.get("admin:sedi") == ["Roma", "Milano"]

    def test_force_bypasses_cache(self, fake_clock):
        cache = FreshnessCache(ttl=TTL, clock=fake_clock)
        cache.set("k", "stale")
        loader = CachedLoader(cache)

        async def fetch():
            return "fresh"

        assert asyncio.run(loader.load("k", fetch, force=True)) == "fresh"
        assert cache.get("k") == "fresh"

    def test_concurrent_loads_share_one_fetch(self, fake_clock):
        loader = CachedLoader(FreshnessCache(ttl=TTL, clock=fake_clock))
        calls = []

        async def fetch():
            calls.append(1)
            await asyncio.sleep(0.01)
            return "value"

        async def scenario():
            return await asyncio.gather(*(loader.load("k", fetch) for _ in range(5)))

        assert asyncio.run(scenario()) == ["value"] * 5
        assert len(calls) == 1
        assert not loader.is_pending("k")

    def test_failure_is_not_cached(self, fake_clock):
        cache = FreshnessCache(ttl=TTL, clock=fake_clock)
        loader = CachedLoader(cache)

        async def fetch():
            raise ConnectionError("database unreachable")

        with pytest.raises(FetchFailed) as exc_info:
            asyncio.run(loader.load("k", fetch))
        assert isinstance(exc_info.value.__cause__, ConnectionError)
        assert "k" not in cache
        assert not loader.is_pending("k")

    def test_cancelled_fetch_is_not_cached(self, fake_clock):
        cache = FreshnessCache(ttl=TTL, clock=fake_clock)
        loader = CachedLoader(cache)

        async def fetch():
            await asyncio.sleep(10)
            return "never"

        async def scenario():
            owner = asyncio.ensure_future(loader.load("k", fetch))
            await asyncio.sleep(0)
            owner.cancel()
            with pytest.raises(asyncio.CancelledError):
                await owner
            return owner

        owner = asyncio.run(scenario())
        assert owner.cancelled()
        assert "k" not in cache
        assert not loader.is_pending("k")

    def test_joiner_refetches_when_owner_is_cancelled(self, fake_clock):
        cache = FreshnessCache(ttl=TTL, clock=fake_clock)
        loader = CachedLoader(cache)
        calls = []

        async def fetch():
            calls.append(1)
            if len(calls) == 1:
                await asyncio.sleep(10)
            return ["Roma"]

        async def scenario():
            owner = asyncio.ensure_future(loader.load("admin:sedi", fetch))
            await asyncio.sleep(0)
            joiner = asyncio.ensure_future(loader.load("admin:sedi", fetch))
            await asyncio.sleep(0)
            assert loader.is_pending("admin:sedi")
            owner.cancel()
            result = await joiner
            with pytest.raises(asyncio.CancelledError):
                await owner
            return owner, result

        owner, result = asyncio.run(scenario())
        assert owner.cancelled()
        assert result == ["Roma"]
        assert len(calls) == 2
        assert cache.get("admin:sedi") == ["Roma"]

    def test_abort_error_reaches_owner_as_fetch_aborted(self, fake_clock):
        cache = FreshnessCache(ttl=TTL, clock=fake_clock)
        loader = CachedLoader(cache)
        calls = []

        async def fetch():
            calls.append(1)
            if len(calls) == 1:
                await asyncio.sleep(0.01)
                raise RuntimeError("AbortError: The user aborted a request.")
            return "fresh"

        async def scenario():
            return await asyncio.gather(
                loader.load("k", fetch), loader.load("k", fetch), return_exceptions=True
            )

        owner_result, joiner_result = asyncio.run(scenario())
        assert isinstance(owner_result, FetchAborted)
        assert joiner_result == "fresh"
        assert cache.get("k") == "fresh"

    def test_waiters_see_the_failure(self, fake_clock):
        loader = CachedLoader(FreshnessCache(ttl=TTL, clock=fake_clock))

        async def fetch():
            await asyncio.sleep(0.01)
            raise ValueError("bad row")

        async def scenario():
            return await asyncio.gather(
                loader.load("k", fetch), loader.load("k", fetch), return_exceptions=True
            )

        results = asyncio.run(scenario())
        assert all(isinstance(r, FetchFailed) for r in results)
