"""
Data models for the NEO pipeline.

Raw* models decode the loosely-typed NeoWs payload (numbers arrive as
strings, most fields may be missing). NormalizedAsteroid is the canonical
entity handed to callers.
"""
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, computed_field, field_validator

from .classifier import RiskLevel, classify


class RawMissDistance(BaseModel):
    astronomical: Optional[float] = None
    lunar: Optional[float] = None
    kilometers: Optional[float] = None
    miles: Optional[float] = None


class RawRelativeVelocity(BaseModel):
    kilometers_per_second: Optional[float] = None
    kilometers_per_hour: Optional[float] = None
    miles_per_hour: Optional[float] = None


class RawCloseApproach(BaseModel):
    close_approach_date: Optional[str] = None
    close_approach_date_full: Optional[str] = None
    epoch_date_close_approach: Optional[int] = None
    relative_velocity: Optional[RawRelativeVelocity] = None
    miss_distance: Optional[RawMissDistance] = None
    orbiting_body: Optional[str] = None


class RawDiameterRange(BaseModel):
    estimated_diameter_min: float = 0.0
    estimated_diameter_max: float = 0.0


class RawEstimatedDiameter(BaseModel):
    meters: Optional[RawDiameterRange] = None
    kilometers: Optional[RawDiameterRange] = None


class RawNeoRecord(BaseModel):
    """One object as returned by the NeoWs feed, lookup or browse endpoints"""
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    name: Optional[str] = None
    nasa_jpl_url: Optional[str] = None
    absolute_magnitude_h: Optional[float] = None
    estimated_diameter: Optional[RawEstimatedDiameter] = None
    is_potentially_hazardous_asteroid: bool = False
    close_approach_data: list[RawCloseApproach] = []

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_text(cls, value):
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class NormalizedAsteroid(BaseModel):
    """Canonical asteroid with consistent units and a computed risk level"""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    approach_timestamp: datetime
    approach_date: Optional[date] = None
    distance_au: float
    distance_lunar: float
    distance_km: float
    velocity_km_per_sec: float
    velocity_km_per_hour: float = 0.0
    diameter_min_m: float = 0.0
    diameter_max_m: float = 0.0
    is_hazardous: bool = False
    absolute_magnitude: Optional[float] = None
    orbiting_body: Optional[str] = None
    nasa_jpl_url: Optional[str] = None

    @computed_field
    @property
    def risk_level(self) -> RiskLevel:
        return classify(self.is_hazardous, self.diameter_min_m, self.diameter_max_m, self.distance_au)

    @property
    def avg_diameter_m(self) -> float:
        return (self.diameter_min_m + self.diameter_max_m) / 2


class ApproachEvent(BaseModel):
    """One close approach from an asteroid's history"""
    date: Optional[str] = None
    date_full: Optional[str] = None
    distance_km: Optional[float] = None
    distance_au: Optional[float] = None
    velocity_km_per_hour: Optional[float] = None
    orbiting_body: Optional[str] = None


class FeedSummary(BaseModel):
    """Aggregate statistics over a list of asteroids"""
    total_asteroids: int = 0
    hazardous_count: int = 0
    average_size_m: float = 0.0
    hazardous_percentage: float = 0.0
    risk_counts: dict[RiskLevel, int] = {}

    @classmethod
    def from_asteroids(cls, asteroids: list[NormalizedAsteroid]) -> "FeedSummary":
        total = len(asteroids)
        if total == 0:
            return cls(risk_counts={level: 0 for level in RiskLevel})

        hazardous = sum(1 for a in asteroids if a.is_hazardous)
        counts = {level: 0 for level in RiskLevel}
        for asteroid in asteroids:
            counts[asteroid.risk_level] += 1

        return cls(
            total_asteroids=total,
            hazardous_count=hazardous,
            average_size_m=round(sum(a.diameter_max_m for a in asteroids) / total, 3),
            hazardous_percentage=round(hazardous / total * 100, 1),
            risk_counts=counts,
        )
