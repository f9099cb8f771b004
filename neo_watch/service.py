"""
NEO Service - request-level operations over the NEO pipeline

Composes the aggregator, normalizer and classifier into the operations the
API and CLI expose. Window requests degrade to partial results when
sub-windows fail; single-object requests (lookup, browse) propagate
upstream failures to the caller.
"""
import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Optional

from .aggregator import FeedAggregator, SubWindowFailure
from .cache import TTLCache
from .classifier import AlertLevel, alert_level, size_category, size_comparison
from .config import config
from .date_range import DateWindow, utc_today
from .errors import ValidationError
from .models import ApproachEvent, FeedSummary, NormalizedAsteroid
from .neo_client import NeoWsClient
from .normalizer import normalize, normalize_many, upcoming_approaches

logger = logging.getLogger(__name__)

MAX_BROWSE_SIZE = 100
UPCOMING_APPROACH_LIMIT = 5


@dataclass
class FeedReport:
    """Classified, sorted asteroids for a window"""
    window: DateWindow
    asteroids: list[NormalizedAsteroid]
    summary: FeedSummary
    failures: list[SubWindowFailure] = field(default_factory=list)

    @property
    def partial(self) -> bool:
        return bool(self.failures)


@dataclass
class HazardousEntry:
    asteroid: NormalizedAsteroid
    alert_level: AlertLevel


@dataclass
class AsteroidDetail:
    asteroid: NormalizedAsteroid
    size_category: str
    size_comparison: str
    next_approaches: list[ApproachEvent]


@dataclass
class BrowsePage:
    asteroids: list[NormalizedAsteroid]
    page: int
    size: int
    total_elements: int

    @property
    def total_pages(self) -> int:
        return -(-self.total_elements // self.size) if self.size else 0


def sort_by_approach(asteroids: list[NormalizedAsteroid]) -> list[NormalizedAsteroid]:
    return sorted(asteroids, key=lambda a: (a.approach_timestamp, a.id))


class NeoService:
    """Entry point for every NEO query"""

    def __init__(
        self,
        client: NeoWsClient,
        cache: TTLCache,
        max_span_days: Optional[int] = None,
        max_window_days: Optional[int] = None,
    ):
        self.client = client
        self.cache = cache
        self.max_window_days = max_window_days or config.MAX_WINDOW_DAYS
        self.aggregator = FeedAggregator(client, cache, max_span_days)

    async def classified_feed(self, window: DateWindow) -> FeedReport:
        if window.days > self.max_window_days:
            raise ValidationError(
                f"Date range cannot exceed {self.max_window_days} days",
                code="DATE_RANGE_TOO_LARGE",
            )

        feed = await self.aggregator.fetch_window(window)
        asteroids = sort_by_approach(normalize_many(feed.records))
        return FeedReport(
            window=window,
            asteroids=asteroids,
            summary=FeedSummary.from_asteroids(asteroids),
            failures=feed.failures,
        )

    async def today(self, today: Optional[date] = None) -> FeedReport:
        day = today or utc_today()
        return await self.classified_feed(DateWindow(day, day))

    async def hazardous(self, days: int = 7, today: Optional[date] = None) -> tuple[FeedReport, list[HazardousEntry]]:
        """Potentially hazardous asteroids over the next `days`, closest first"""
        days = max(1, min(days, self.max_window_days))
        start = today or utc_today()
        report = await self.classified_feed(DateWindow(start, start + timedelta(days=days)))

        flagged = sorted(
            (a for a in report.asteroids if a.is_hazardous),
            key=lambda a: (a.distance_au, a.id),
        )
        entries = [
            HazardousEntry(a, alert_level(a.is_hazardous, a.diameter_max_m / 1000, a.distance_km))
            for a in flagged
        ]
        return report, entries

    async def lookup(self, asteroid_id: str) -> AsteroidDetail:
        asteroid_id = (asteroid_id or "").strip()
        if len(asteroid_id) < 4:
            raise ValidationError("Invalid asteroid ID", code="INVALID_ASTEROID_ID")

        raw = await self.cache.get_or_fetch(
            f"neo:{asteroid_id}",
            lambda: self.client.lookup(asteroid_id),
        )
        asteroid = normalize(raw)
        return AsteroidDetail(
            asteroid=asteroid,
            size_category=size_category(asteroid.diameter_max_m),
            size_comparison=size_comparison(asteroid.diameter_max_m),
            next_approaches=upcoming_approaches(raw, UPCOMING_APPROACH_LIMIT),
        )

    async def browse(self, page: int = 0, size: int = 20) -> BrowsePage:
        if page < 0:
            raise ValidationError("Page number must be 0 or greater", code="INVALID_PAGE")
        if size < 1 or size > MAX_BROWSE_SIZE:
            raise ValidationError(f"Size must be between 1 and {MAX_BROWSE_SIZE}", code="INVALID_SIZE")

        raw = await self.cache.get_or_fetch(
            f"neo_browse:{page}:{size}",
            lambda: self.client.browse(page, size),
        )
        page_info = raw.get("page") or {}
        return BrowsePage(
            asteroids=normalize_many(raw.get("near_earth_objects") or []),
            page=page,
            size=size,
            total_elements=int(page_info.get("total_elements") or 0),
        )

    def cache_stats(self) -> dict:
        return self.cache.stats()

    def clear_cache(self, pattern: Optional[str] = None) -> int:
        return self.cache.invalidate(pattern)

    async def close(self):
        await self.client.aclose()


def create_service() -> NeoService:
    """Build a service wired from the global config"""
    client = NeoWsClient(config.NASA_API_KEY, config.NASA_BASE_URL, config.NASA_TIMEOUT_SECONDS)
    cache = TTLCache(default_ttl=config.CACHE_TTL_SECONDS)
    return NeoService(client, cache, config.MAX_SPAN_DAYS, config.MAX_WINDOW_DAYS)
