"""
TTL Cache - volatile in-memory key/value store for upstream payloads

Entries disappear once their TTL elapses (checked lazily against an
injectable clock) or when explicitly invalidated. Hit/miss counters are
kept for diagnostics.
"""
import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from .errors import UpstreamUnreachable

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """A cached value and the clock reading after which it is gone"""
    key: str
    value: Any
    expires_at: float

    def is_live(self, now: float) -> bool:
        return now < self.expires_at


class TTLCache:
    """
    In-memory cache with per-key expiry.

    Concurrent misses on the same key can be collapsed into a single fetch
    with get_or_fetch(); plain get()/set() give no such guarantee and the
    last writer wins.
    """

    def __init__(self, default_ttl: float = 3600, clock: Callable[[], float] = time.monotonic):
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._inflight: dict[str, asyncio.Future] = {}
        self.hits = 0
        self.misses = 0

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            self.misses += 1
            logger.debug("Cache miss for: %s", key)
            return None

        if not entry.is_live(self._clock()):
            del self._entries[key]
            self.misses += 1
            logger.debug("Cache entry expired: %s", key)
            return None

        self.hits += 1
        logger.debug("Cache hit for: %s", key)
        return entry.value

    def set(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
        ttl = self.default_ttl if ttl_seconds is None else ttl_seconds
        self._entries[key] = CacheEntry(key=key, value=value, expires_at=self._clock() + ttl)

    async def get_or_fetch(
        self,
        key: str,
        fetch: Callable[[], Awaitable[Any]],
        ttl_seconds: Optional[float] = None,
    ) -> Any:
        """
        Return the cached value for key, fetching and storing it on a miss.

        Callers that miss while a fetch for the same key is already running
        await that fetch instead of starting their own. Failures are not
        cached; they propagate to every waiter. If the fetching caller is
        cancelled, waiters fail with UpstreamUnreachable and may retry.
        """
        value = self.get(key)
        if value is not None:
            return value

        pending = self._inflight.get(key)
        if pending is not None:
            # A cancelled waiter must not cancel the shared fetch
            return await asyncio.shield(pending)

        future = asyncio.get_running_loop().create_future()
        self._inflight[key] = future
        try:
            value = await fetch()
        except asyncio.CancelledError:
            logger.warning("Fetch for %s was cancelled", key)
            future.set_exception(UpstreamUnreachable(f"Fetch for {key} was cancelled"))
            future.exception()
            raise
        except Exception as exc:
            future.set_exception(exc)
            # Mark retrieved so an unawaited future does not log a warning
            future.exception()
            raise
        else:
            self.set(key, value, ttl_seconds)
            future.set_result(value)
            return value
        finally:
            self._inflight.pop(key, None)

    def invalidate(self, pattern: Optional[str] = None) -> int:
        """Remove keys containing pattern, or everything when pattern is None"""
        if pattern is None:
            removed = len(self._entries)
            self._entries.clear()
            logger.info("Cleared entire cache (%d entries)", removed)
            return removed

        keys = [key for key in self._entries if pattern in key]
        for key in keys:
            del self._entries[key]
        logger.info("Cleared %d cache entries matching: %s", len(keys), pattern)
        return len(keys)

    def _purge_expired(self) -> None:
        now = self._clock()
        for key in [k for k, e in self._entries.items() if not e.is_live(now)]:
            del self._entries[key]

    def stats(self) -> dict:
        self._purge_expired()
        return {"count": len(self._entries), "hits": self.hits, "misses": self.misses}

    def __len__(self) -> int:
        self._purge_expired()
        return len(self._entries)
