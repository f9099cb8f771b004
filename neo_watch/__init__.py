"""
NEO Watch - Near Earth Object ingestion, caching and threat classification

Modules:
    neo_client: NASA NeoWs API client
    cache: in-memory TTL cache
    date_range: date windows and the 7-day range splitter
    aggregator: concurrent multi-window feed aggregation
    normalizer: raw record decoding and unit normalization
    classifier: deterministic risk classification
    service: request-level operations
    main: CLI application
"""
from .aggregator import FeedAggregator, FeedWindowResult
from .cache import TTLCache
from .classifier import AlertLevel, RiskLevel, alert_level, classify
from .date_range import DateWindow, parse_window, split
from .errors import (
    ClientFault,
    MalformedRecord,
    NeoWatchError,
    UpstreamError,
    UpstreamRejected,
    UpstreamUnreachable,
    ValidationError,
)
from .models import NormalizedAsteroid, RawNeoRecord
from .neo_client import NeoWsClient
from .normalizer import normalize, normalize_many
from .service import NeoService

__version__ = "1.0.0"
__all__ = [
    "FeedAggregator",
    "FeedWindowResult",
    "TTLCache",
    "AlertLevel",
    "RiskLevel",
    "alert_level",
    "classify",
    "DateWindow",
    "parse_window",
    "split",
    "ClientFault",
    "MalformedRecord",
    "NeoWatchError",
    "UpstreamError",
    "UpstreamRejected",
    "UpstreamUnreachable",
    "ValidationError",
    "NormalizedAsteroid",
    "RawNeoRecord",
    "NeoWsClient",
    "normalize",
    "normalize_many",
    "NeoService",
]
