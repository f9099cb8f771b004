"""
NEO Watch API Server

FastAPI application exposing the classified NASA NeoWs feed, single-object
lookups and cache diagnostics.
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from neo_watch.config import config
from neo_watch.date_range import parse_window
from neo_watch.errors import NeoWatchError, UpstreamError
from neo_watch.service import FeedReport, NeoService, create_service

from .schemas import (
    AsteroidDetailData, AsteroidDetailResponse, BrowseResponse,
    CacheClearResponse, CacheStats, CacheStatsResponse, FailedWindow,
    FeedMeta, FeedResponse, HazardousAsteroid, HazardousMeta,
    HazardousResponse, Pagination,
)

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

DEGRADED_MESSAGE = "NASA data service is degraded"

# Global state
service: Optional[NeoService] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler"""
    global service
    service = create_service()
    for warning in config.validate():
        logger.warning(warning)
    logger.info("NEO Watch API Server started (NASA base: %s)", config.NASA_BASE_URL)
    yield
    await service.close()
    service = None
    logger.info("NEO Watch API Server shutting down")


def get_service() -> NeoService:
    global service
    if service is None:
        service = create_service()
    return service


app = FastAPI(
    title="NEO Watch API",
    description="Near Earth Object feed aggregation and threat classification",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(NeoWatchError)
async def neo_watch_error_handler(request: Request, exc: NeoWatchError):
    if isinstance(exc, UpstreamError):
        logger.error("Upstream failure on %s: %s (%s)", request.url.path, exc.message, exc.code)
        body = {"success": False, "error": DEGRADED_MESSAGE, "code": exc.code}
    else:
        body = exc.to_dict()
    return JSONResponse(status_code=exc.status_code, content=body)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    problems = [
        f"{'.'.join(str(part) for part in error.get('loc', ()) if part != 'query')}: {error.get('msg')}"
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": "; ".join(problems) or "Invalid request", "code": "VALIDATION_ERROR"},
    )


def _feed_meta(report: FeedReport) -> dict:
    return {
        "start_date": report.window.start.isoformat(),
        "end_date": report.window.end.isoformat(),
        "element_count": len(report.asteroids),
        "summary": report.summary,
        "partial": report.partial,
        "failed_windows": [FailedWindow(**f.to_dict()) for f in report.failures],
    }


def _feed_response(report: FeedReport) -> FeedResponse:
    return FeedResponse(data=report.asteroids, meta=FeedMeta(**_feed_meta(report)))


# REST Endpoints

@app.get("/")
async def root():
    """API info"""
    return {
        "name": "NEO Watch API",
        "version": "1.0.0",
        "status": "running",
    }


@app.get("/health")
async def health():
    """Health check"""
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}


@app.get("/api/asteroids/feed", response_model=FeedResponse)
async def get_feed(
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    neo_service: NeoService = Depends(get_service),
):
    """Classified asteroids for any window up to MAX_WINDOW_DAYS"""
    window = parse_window(start_date, end_date, neo_service.max_window_days)
    report = await neo_service.classified_feed(window)
    return _feed_response(report)


@app.get("/api/asteroids/today", response_model=FeedResponse)
async def get_today(neo_service: NeoService = Depends(get_service)):
    report = await neo_service.today()
    return _feed_response(report)


@app.get("/api/asteroids/hazardous", response_model=HazardousResponse)
async def get_hazardous(days: int = 7, neo_service: NeoService = Depends(get_service)):
    """Potentially hazardous asteroids over the next N days, closest first"""
    report, entries = await neo_service.hazardous(days)
    return HazardousResponse(
        data=[HazardousAsteroid(asteroid=e.asteroid, alert_level=e.alert_level) for e in entries],
        meta=HazardousMeta(
            **_feed_meta(report),
            days=report.window.days,
            hazardous_count=len(entries),
        ),
    )


@app.get("/api/asteroids/browse", response_model=BrowseResponse)
async def browse(page: int = 0, size: int = 20, neo_service: NeoService = Depends(get_service)):
    result = await neo_service.browse(page, size)
    return BrowseResponse(
        data=result.asteroids,
        meta=Pagination(
            page=result.page,
            size=result.size,
            total_pages=result.total_pages,
            total_elements=result.total_elements,
        ),
    )


@app.get("/api/asteroids/{asteroid_id}", response_model=AsteroidDetailResponse)
async def get_asteroid(asteroid_id: str, neo_service: NeoService = Depends(get_service)):
    """Single asteroid with size comparison and upcoming approaches"""
    detail = await neo_service.lookup(asteroid_id)
    return AsteroidDetailResponse(data=AsteroidDetailData(
        asteroid=detail.asteroid,
        size_category=detail.size_category,
        size_comparison=detail.size_comparison,
        next_approaches=detail.next_approaches,
    ))


@app.get("/api/cache/stats", response_model=CacheStatsResponse)
async def cache_stats(neo_service: NeoService = Depends(get_service)):
    return CacheStatsResponse(data=CacheStats(**neo_service.cache_stats()))


@app.delete("/api/cache", response_model=CacheClearResponse)
async def clear_cache(pattern: Optional[str] = None, neo_service: NeoService = Depends(get_service)):
    removed = neo_service.clear_cache(pattern)
    return CacheClearResponse(removed=removed, pattern=pattern)


def run():
    import uvicorn
    uvicorn.run(
        "api.server:app",
        host=config.API_HOST,
        port=config.API_PORT,
        reload=config.DEBUG,
        log_level=config.LOG_LEVEL.lower()
    )


if __name__ == "__main__":
    run()
