"""In-memory freshness cache for reference data.

How It Works:
- Cache hit: the entry is younger than the TTL, use it (no database query).
- Cache miss: absent or stale, the caller fetches and stores the result.
- Invalidation: every create/update/delete of a cached collection removes its
  key before the response goes out.

Keys are namespaced by the caller ("admin:sedi", "admin:ruoli", ...); the
cache does no namespacing of its own. One instance lives on ``app.state``
and is handed out through the ``get_cache`` dependency.
"""
import asyncio
import time
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

from trainingcog.core.logging_config import logger

DEFAULT_TTL_SECONDS = 5 * 60

# Result placed on a shared fetch that was aborted; joiners retry
_ABORTED = object()


class FetchAborted(Exception):
    """A fetch was cancelled before completing (navigation, client disconnect)."""


class FetchFailed(Exception):
    """A fetch raised a genuine error. The original error is chained."""

    def __init__(self, key: str, message: str):
        super().__init__(f"Fetch for '{key}' failed: {message}")
        self.key = key


def is_abort_error(exc: BaseException) -> bool:
    if isinstance(exc, (asyncio.CancelledError, FetchAborted)):
        return True
    return "AbortError" in type(exc).__name__ or "AbortError" in str(exc)


class FreshnessCache:
    """Key/value store whose entries expire ``ttl`` seconds after being set."""

    def __init__(self, ttl: float = DEFAULT_TTL_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[str, Tuple[Any, float]] = {}

    def get(self, key: str) -> Optional[Any]:
        """Return the value for ``key`` if still fresh, else None.

        A stale entry is dropped as a side effect. Any internal failure is
        reported as a miss so the caller falls through to a live fetch.
        """
        try:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, stored_at = entry
            if self._clock() - stored_at >= self.ttl:
                del self._entries[key]
                logger.debug(f"Cache entry expired: {key}")
                return None
            return value
        except Exception as e:
            logger.warning(f"Cache read failed for {key}, treating as miss: {e}")
            return None

    def set(self, key: str, value: Any) -> None:
        try:
            self._entries[key] = (value, self._clock())
        except Exception as e:
            logger.warning(f"Cache write failed for {key}: {e}")

    def invalidate(self, key: str) -> None:
        if self._entries.pop(key, None) is not None:
            logger.debug(f"Cache invalidated: {key}")

    def clear(self) -> None:
        self._entries.clear()
        logger.info("Cache cleared")

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        # Raw membership, no expiry check
        return key in self._entries


class CachedLoader:
    """Cache-aside fetches with at most one in-flight fetch per key.

    Concurrent callers asking for the same key while a fetch is pending all
    await that one fetch. Only a successful fetch writes the cache. When the
    fetch is aborted, the caller that started it sees the abort and everyone
    who joined it starts over.
    """

    def __init__(self, cache: FreshnessCache):
        self.cache = cache
        self._pending: Dict[str, asyncio.Future] = {}

    def is_pending(self, key: str) -> bool:
        return key in self._pending

    async def load(self, key: str, fetch: Callable[[], Awaitable[Any]], force: bool = False) -> Any:
        while True:
            if not force:
                cached = self.cache.get(key)
                if cached is not None:
                    logger.debug(f"Cache hit: {key}")
                    return cached

            pending = self._pending.get(key)
            if pending is None:
                return await self._run(key, fetch)

            logger.debug(f"Fetch already in progress for {key}, joining it")
            result = await asyncio.shield(pending)
            if result is not _ABORTED:
                return result
            logger.debug(f"Joined fetch for {key} was aborted, fetching again")

    async def _run(self, key: str, fetch: Callable[[], Awaitable[Any]]) -> Any:
        future = asyncio.get_running_loop().create_future()
        self._pending[key] = future
        try:
            value = await fetch()
        except asyncio.CancelledError:
            logger.debug(f"Fetch cancelled for {key}")
            future.set_result(_ABORTED)
            raise
        except Exception as e:
            if is_abort_error(e):
                logger.debug(f"Fetch aborted for {key}")
                future.set_result(_ABORTED)
                raise FetchAborted(key) from e
            logger.error(f"Fetch failed for {key}: {e}")
            error = FetchFailed(key, str(e))
            future.set_exception(error)
            # Mark retrieved in case nobody joined
            future.exception()
            raise error from e
        except BaseException:
            future.cancel()
            raise
        else:
            self.cache.set(key, value)
            future.set_result(value)
            return value
        finally:
            if self._pending.get(key) is future:
                del self._pending[key]
