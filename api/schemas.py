"""
Pydantic schemas for the NEO Watch API

Every endpoint answers with a {success, data, meta} envelope; errors use
{success: false, error, code}.
"""
from pydantic import BaseModel
from typing import Optional

from neo_watch.classifier import AlertLevel
from neo_watch.models import ApproachEvent, FeedSummary, NormalizedAsteroid


class FailedWindow(BaseModel):
    start_date: str
    end_date: str
    code: str
    message: str


class FeedMeta(BaseModel):
    start_date: str
    end_date: str
    element_count: int
    summary: FeedSummary
    partial: bool = False
    failed_windows: list[FailedWindow] = []


class FeedResponse(BaseModel):
    success: bool = True
    data: list[NormalizedAsteroid]
    meta: FeedMeta


class HazardousAsteroid(BaseModel):
    asteroid: NormalizedAsteroid
    alert_level: AlertLevel


class HazardousMeta(FeedMeta):
    days: int
    hazardous_count: int


class HazardousResponse(BaseModel):
    success: bool = True
    data: list[HazardousAsteroid]
    meta: HazardousMeta


class AsteroidDetailData(BaseModel):
    asteroid: NormalizedAsteroid
    size_category: str
    size_comparison: str
    next_approaches: list[ApproachEvent]


class AsteroidDetailResponse(BaseModel):
    success: bool = True
    data: AsteroidDetailData


class Pagination(BaseModel):
    page: int
    size: int
    total_pages: int
    total_elements: int


class BrowseResponse(BaseModel):
    success: bool = True
    data: list[NormalizedAsteroid]
    meta: Pagination


class CacheStats(BaseModel):
    count: int
    hits: int
    misses: int


class CacheStatsResponse(BaseModel):
    success: bool = True
    data: CacheStats


class CacheClearResponse(BaseModel):
    success: bool = True
    removed: int
    pattern: Optional[str] = None
