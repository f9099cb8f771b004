"""
Threat classification for Near Earth Objects.

Two scales live here and are deliberately kept apart:

- classify(): the canonical LOW/MEDIUM/HIGH risk level attached to every
  normalized asteroid, driven by NASA's hazard flag, average diameter and
  miss distance in AU.
- alert_level(): the LOW/MODERATE/HIGH/CRITICAL alert scale reported on
  the hazardous list, driven by max diameter and miss distance in km. Its
  cutoffs differ from classify() and the two are not interchangeable.
"""
from enum import Enum


class RiskLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class AlertLevel(str, Enum):
    LOW = "LOW"
    MODERATE = "MODERATE"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


# Canonical risk thresholds
HIGH_RISK_DIAMETER_M = 1000.0
HIGH_RISK_DISTANCE_AU = 0.02
MEDIUM_RISK_DIAMETER_M = 500.0
MEDIUM_RISK_DISTANCE_AU = 0.05

# Alert scale thresholds
CRITICAL_ALERT_DISTANCE_KM = 7_500_000.0
CRITICAL_ALERT_DIAMETER_KM = 1.0
HIGH_ALERT_DISTANCE_KM = 10_000_000.0
MODERATE_ALERT_DISTANCE_KM = 50_000_000.0


def classify(
    is_hazardous: bool,
    diameter_min_m: float,
    diameter_max_m: float,
    distance_au: float,
) -> RiskLevel:
    """
    Classify an asteroid into LOW / MEDIUM / HIGH risk.

    Objects NASA does not flag as potentially hazardous are always LOW.
    Flagged objects are HIGH when both large (average diameter > 1 km) and
    very close (< 0.02 AU), MEDIUM when either larger than 500 m or closer
    than 0.05 AU, and LOW otherwise. All comparisons are strict.
    """
    if not is_hazardous:
        return RiskLevel.LOW

    avg_diameter_m = (diameter_min_m + diameter_max_m) / 2
    if avg_diameter_m > HIGH_RISK_DIAMETER_M and distance_au < HIGH_RISK_DISTANCE_AU:
        return RiskLevel.HIGH
    if avg_diameter_m > MEDIUM_RISK_DIAMETER_M or distance_au < MEDIUM_RISK_DISTANCE_AU:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def alert_level(is_hazardous: bool, diameter_max_km: float, miss_distance_km: float) -> AlertLevel:
    """Alert scale used for the hazardous watch list"""
    if (
        is_hazardous
        and miss_distance_km < CRITICAL_ALERT_DISTANCE_KM
        and diameter_max_km > CRITICAL_ALERT_DIAMETER_KM
    ):
        return AlertLevel.CRITICAL
    if is_hazardous or miss_distance_km < HIGH_ALERT_DISTANCE_KM:
        return AlertLevel.HIGH
    if miss_distance_km < MODERATE_ALERT_DISTANCE_KM:
        return AlertLevel.MODERATE
    return AlertLevel.LOW


def size_category(diameter_max_m: float) -> str:
    if diameter_max_m >= 1000:
        return "LARGE"
    if diameter_max_m >= 100:
        return "MEDIUM"
    return "SMALL"


def size_comparison(diameter_max_m: float) -> str:
    """Everyday comparison for an asteroid's upper size estimate"""
    if diameter_max_m >= 1000:
        return "Skyscraper sized"
    if diameter_max_m >= 100:
        return "Football field sized"
    if diameter_max_m >= 50:
        return "House sized"
    if diameter_max_m >= 10:
        return "Car sized"
    return "Small object"
