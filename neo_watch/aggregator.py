"""
Feed Aggregator - assembles arbitrary date windows from 7-day NeoWs feeds

The requested window is split into upstream-legal sub-windows which are
fetched concurrently through the cache. A failing sub-window contributes
nothing and is reported alongside the records instead of failing the
whole request.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional

from .cache import TTLCache
from .config import config
from .date_range import DateWindow, split
from .errors import ClientFault, NeoWatchError
from .neo_client import NeoWsClient

logger = logging.getLogger(__name__)


@dataclass
class SubWindowFailure:
    """A sub-window that could not be fetched"""
    window: DateWindow
    code: str
    message: str

    def to_dict(self) -> dict:
        return {
            "start_date": self.window.start.isoformat(),
            "end_date": self.window.end.isoformat(),
            "code": self.code,
            "message": self.message,
        }


@dataclass
class FeedWindowResult:
    """Deduplicated raw records for a window plus any sub-window failures"""
    window: DateWindow
    records: list[dict] = field(default_factory=list)
    failures: list[SubWindowFailure] = field(default_factory=list)

    @property
    def partial(self) -> bool:
        return bool(self.failures)


def feed_cache_key(window: DateWindow) -> str:
    return f"neo_feed:{window.start.isoformat()}:{window.end.isoformat()}"


def flatten_feed(payload: dict) -> list[dict]:
    """
    Flatten a feed response's per-date buckets in ascending date order.

    Raises ClientFault when the body is not an object whose
    near_earth_objects maps dates to lists of record objects.
    """
    if not isinstance(payload, dict):
        raise ClientFault(f"Feed response is a {type(payload).__name__}, expected an object")
    buckets = payload.get("near_earth_objects") or {}
    if not isinstance(buckets, dict):
        raise ClientFault("Feed near_earth_objects is not keyed by date")

    records = []
    for day in sorted(buckets):
        bucket = buckets[day] or []
        if not isinstance(bucket, list) or not all(isinstance(r, dict) for r in bucket):
            raise ClientFault(f"Feed bucket {day} is not a list of records")
        records.extend(bucket)
    return records


def dedupe(records: list[dict]) -> list[dict]:
    """Drop repeated ids, keeping the first occurrence"""
    seen = set()
    unique = []
    for record in records:
        record_id = record.get("id")
        if record_id is not None:
            if record_id in seen:
                continue
            seen.add(record_id)
        unique.append(record)
    return unique


class FeedAggregator:
    """Fetches, caches and merges NeoWs feeds for windows of any length"""

    def __init__(self, client: NeoWsClient, cache: TTLCache, max_span_days: Optional[int] = None):
        self.client = client
        self.cache = cache
        self.max_span_days = max_span_days or config.MAX_SPAN_DAYS

    async def _fetch_sub_window(self, window: DateWindow) -> list[dict]:
        async def load() -> list[dict]:
            return flatten_feed(await self.client.feed(window.start, window.end))

        # Only well-formed feeds reach the cache
        return await self.cache.get_or_fetch(feed_cache_key(window), load)

    async def fetch_window(self, window: DateWindow) -> FeedWindowResult:
        sub_windows = split(window, self.max_span_days)
        logger.info("Fetching NEO feed for %s in %d sub-window(s)", window, len(sub_windows))

        outcomes = await asyncio.gather(
            *(self._fetch_sub_window(sub) for sub in sub_windows),
            return_exceptions=True,
        )

        result = FeedWindowResult(window=window)
        merged = []
        for sub, outcome in zip(sub_windows, outcomes):
            if isinstance(outcome, NeoWatchError):
                logger.warning("Sub-window %s failed (%s): %s", sub, outcome.code, outcome.message)
                result.failures.append(SubWindowFailure(sub, outcome.code, outcome.message))
                continue
            if isinstance(outcome, Exception):
                logger.error("Sub-window %s failed unexpectedly", sub, exc_info=outcome)
                result.failures.append(SubWindowFailure(sub, ClientFault.code, str(outcome)))
                continue
            if isinstance(outcome, BaseException):
                raise outcome
            merged.extend(outcome)

        result.records = dedupe(merged)
        if result.partial:
            logger.warning(
                "Returning partial feed for %s: %d of %d sub-window(s) failed",
                window, len(result.failures), len(sub_windows),
            )
        return result
