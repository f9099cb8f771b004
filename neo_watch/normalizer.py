"""
Normalizer - turns raw NeoWs records into NormalizedAsteroid objects

The first entry of close_approach_data is taken as "the" approach; NeoWs
lists approaches chronologically and this module does not re-sort them.
Distances are copied from the upstream units as-is rather than converted
from one another.
"""
import logging
from datetime import datetime, timezone
from typing import Iterable, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from .errors import MalformedRecord
from .models import ApproachEvent, NormalizedAsteroid, RawCloseApproach, RawNeoRecord

logger = logging.getLogger(__name__)

FULL_DATE_FORMAT = "%Y-%b-%d %H:%M"


def decode(raw: Union[dict, RawNeoRecord]) -> RawNeoRecord:
    """Validate a raw payload into a RawNeoRecord"""
    if isinstance(raw, RawNeoRecord):
        return raw
    try:
        return RawNeoRecord.model_validate(raw)
    except PydanticValidationError as e:
        record_id = raw.get("id") if isinstance(raw, dict) else None
        raise MalformedRecord(
            f"Could not decode NEO record: {e.error_count()} invalid field(s)",
            record_id=str(record_id) if record_id is not None else None,
        ) from e


def _approach_timestamp(approach: RawCloseApproach) -> Optional[datetime]:
    if approach.epoch_date_close_approach is not None:
        try:
            return datetime.fromtimestamp(approach.epoch_date_close_approach / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            logger.debug("Epoch %s out of range, using calendar date", approach.epoch_date_close_approach)

    if approach.close_approach_date_full:
        try:
            parsed = datetime.strptime(approach.close_approach_date_full, FULL_DATE_FORMAT)
            return parsed.replace(tzinfo=timezone.utc)
        except ValueError:
            pass

    if approach.close_approach_date:
        try:
            parsed = datetime.strptime(approach.close_approach_date, "%Y-%m-%d")
            return parsed.replace(tzinfo=timezone.utc)
        except ValueError:
            return None
    return None


def normalize(raw: Union[dict, RawNeoRecord]) -> NormalizedAsteroid:
    """
    Convert one raw record into a NormalizedAsteroid.

    Missing optional values (diameter, magnitude, km/h velocity) fall back
    to defaults. A missing id, close approach, distance or km/s velocity
    raises MalformedRecord.
    """
    record = decode(raw)
    if not record.id:
        raise MalformedRecord("NEO record has no id")

    if not record.close_approach_data:
        raise MalformedRecord(f"NEO {record.id} has no close approach data", record_id=record.id)
    approach = record.close_approach_data[0]

    miss = approach.miss_distance
    velocity = approach.relative_velocity
    if (
        miss is None
        or miss.astronomical is None
        or miss.lunar is None
        or miss.kilometers is None
    ):
        raise MalformedRecord(f"NEO {record.id} is missing miss distance", record_id=record.id)
    if velocity is None or velocity.kilometers_per_second is None:
        raise MalformedRecord(f"NEO {record.id} is missing relative velocity", record_id=record.id)

    timestamp = _approach_timestamp(approach)
    if timestamp is None:
        raise MalformedRecord(f"NEO {record.id} has no usable approach date", record_id=record.id)

    diameter_min = diameter_max = 0.0
    if record.estimated_diameter is not None and record.estimated_diameter.meters is not None:
        meters = record.estimated_diameter.meters
        diameter_min = min(meters.estimated_diameter_min, meters.estimated_diameter_max)
        diameter_max = max(meters.estimated_diameter_min, meters.estimated_diameter_max)

    return NormalizedAsteroid(
        id=record.id,
        name=record.name or record.id,
        approach_timestamp=timestamp,
        approach_date=timestamp.date(),
        distance_au=miss.astronomical,
        distance_lunar=miss.lunar,
        distance_km=miss.kilometers,
        velocity_km_per_sec=velocity.kilometers_per_second,
        velocity_km_per_hour=velocity.kilometers_per_hour or 0.0,
        diameter_min_m=diameter_min,
        diameter_max_m=diameter_max,
        is_hazardous=record.is_potentially_hazardous_asteroid,
        absolute_magnitude=record.absolute_magnitude_h,
        orbiting_body=approach.orbiting_body,
        nasa_jpl_url=record.nasa_jpl_url,
    )


def normalize_many(records: Iterable[Union[dict, RawNeoRecord]]) -> list[NormalizedAsteroid]:
    """Normalize a batch, dropping (and logging) records that fail"""
    asteroids = []
    for raw in records:
        try:
            asteroids.append(normalize(raw))
        except MalformedRecord as e:
            logger.warning("Dropping NEO record %s: %s", e.record_id or "<unknown>", e.message)
    return asteroids


def upcoming_approaches(raw: Union[dict, RawNeoRecord], limit: int = 5) -> list[ApproachEvent]:
    """The first `limit` close approaches of a record, in upstream order"""
    record = decode(raw)
    events = []
    for approach in record.close_approach_data[:limit]:
        miss = approach.miss_distance
        velocity = approach.relative_velocity
        events.append(ApproachEvent(
            date=approach.close_approach_date,
            date_full=approach.close_approach_date_full,
            distance_km=miss.kilometers if miss else None,
            distance_au=miss.astronomical if miss else None,
            velocity_km_per_hour=velocity.kilometers_per_hour if velocity else None,
            orbiting_body=approach.orbiting_body,
        ))
    return events
