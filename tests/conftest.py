"""
Shared fixtures: NeoWs-shaped payload builders and an in-memory client.
"""
from datetime import date, datetime, timezone
from typing import Optional

import pytest

from neo_watch.cache import TTLCache
from neo_watch.service import NeoService


def make_record(
    neo_id: str = "3542519",
    name: str = "(2010 PK9)",
    hazardous: bool = False,
    diameter_min_m: Optional[float] = 100.0,
    diameter_max_m: Optional[float] = 200.0,
    au: float = 0.1,
    lunar: Optional[float] = None,
    km: Optional[float] = None,
    km_s: float = 12.5,
    approach_date: str = "2024-01-01",
    hour: int = 12,
) -> dict:
    """A single NeoWs object with numbers serialized as strings, like NASA does"""
    when = datetime.strptime(approach_date, "%Y-%m-%d").replace(hour=hour, tzinfo=timezone.utc)
    record = {
        "id": neo_id,
        "neo_reference_id": neo_id,
        "name": name,
        "nasa_jpl_url": f"https://ssd.jpl.nasa.gov/tools/sbdb_lookup.html#/?sstr={neo_id}",
        "absolute_magnitude_h": 21.3,
        "is_potentially_hazardous_asteroid": hazardous,
        "close_approach_data": [
            {
                "close_approach_date": approach_date,
                "close_approach_date_full": when.strftime("%Y-%b-%d %H:%M"),
                "epoch_date_close_approach": int(when.timestamp() * 1000),
                "relative_velocity": {
                    "kilometers_per_second": str(km_s),
                    "kilometers_per_hour": str(km_s * 3600),
                    "miles_per_hour": str(km_s * 2236.94),
                },
                "miss_distance": {
                    "astronomical": str(au),
                    "lunar": str(lunar if lunar is not None else au * 389.17),
                    "kilometers": str(km if km is not None else au * 149597870.7),
                    "miles": str(au * 92955807.3),
                },
                "orbiting_body": "Earth",
            }
        ],
        "is_sentry_object": False,
    }
    if diameter_min_m is not None:
        record["estimated_diameter"] = {
            "meters": {
                "estimated_diameter_min": diameter_min_m,
                "estimated_diameter_max": diameter_max_m,
            },
            "kilometers": {
                "estimated_diameter_min": diameter_min_m / 1000,
                "estimated_diameter_max": diameter_max_m / 1000,
            },
        }
    return record


def make_feed(buckets: dict[str, list[dict]]) -> dict:
    return {
        "links": {},
        "element_count": sum(len(v) for v in buckets.values()),
        "near_earth_objects": buckets,
    }


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeNeoClient:
    """Stands in for NeoWsClient; feeds are keyed by (start, end)"""

    def __init__(self, feeds: Optional[dict] = None, lookups: Optional[dict] = None,
                 browse_pages: Optional[dict] = None, errors: Optional[dict] = None):
        self.feeds = feeds or {}
        self.lookups = lookups or {}
        self.browse_pages = browse_pages or {}
        self.errors = errors or {}
        self.calls: list[tuple] = []
        self.closed = False

    async def feed(self, start_date: date, end_date: date) -> dict:
        key = (start_date.isoformat(), end_date.isoformat())
        self.calls.append(("feed",) + key)
        if key in self.errors:
            raise self.errors[key]
        return self.feeds.get(key, make_feed({}))

    async def lookup(self, asteroid_id: str) -> dict:
        self.calls.append(("lookup", asteroid_id))
        if asteroid_id in self.errors:
            raise self.errors[asteroid_id]
        return self.lookups[asteroid_id]

    async def browse(self, page: int = 0, size: int = 20) -> dict:
        self.calls.append(("browse", page, size))
        return self.browse_pages[(page, size)]

    async def aclose(self):
        self.closed = True


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return TTLCache(default_ttl=3600, clock=clock)


@pytest.fixture
def fake_client():
    return FakeNeoClient()


@pytest.fixture
def service(fake_client, cache):
    return NeoService(fake_client, cache, max_span_days=7, max_window_days=366)
