"""
Risk ranking heuristic for near-Earth objects.

The score is a UI ranking signal built from three capped factors:

- hazard flag: 40 points when the object is potentially hazardous
- size: up to 30 points, reached at 1 km average diameter
- proximity: up to 30 points at 0 lunar distances, none beyond 50

It is not calibrated against impact data.
"""

import math
from typing import Optional, Tuple

from cosmic_watch.models import NearEarthObject, RiskLevel

HAZARD_POINTS = 40
SIZE_MAX_POINTS = 30
PROXIMITY_MAX_POINTS = 30
PROXIMITY_CUTOFF_LD = 50

HIGH_THRESHOLD = 65
MEDIUM_THRESHOLD = 35


def risk_level_for(score: int) -> RiskLevel:
    if score >= HIGH_THRESHOLD:
        return RiskLevel.HIGH
    if score >= MEDIUM_THRESHOLD:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def calculate_risk(
    hazardous: bool,
    avg_diameter_km: float,
    miss_distance_ld: Optional[float] = None,
) -> Tuple[int, RiskLevel]:
    """Return (score, level) for the given factors.

    A missing miss distance contributes nothing. Halves round up.
    """
    score = 0.0

    if hazardous:
        score += HAZARD_POINTS

    score += min(SIZE_MAX_POINTS, avg_diameter_km * SIZE_MAX_POINTS)

    if miss_distance_ld is not None:
        score += max(0.0, PROXIMITY_MAX_POINTS - (miss_distance_ld / PROXIMITY_CUTOFF_LD) * PROXIMITY_MAX_POINTS)

    # Trim float noise so 7.5 stays 7.5 before rounding half up
    rounded = int(math.floor(round(score, 9) + 0.5))
    return rounded, risk_level_for(rounded)


def score_object(neo: NearEarthObject) -> NearEarthObject:
    """Return a copy of ``neo`` with fresh risk_score and risk_level."""
    approach = neo.first_approach
    score, level = calculate_risk(
        neo.is_potentially_hazardous_asteroid,
        neo.average_diameter_km,
        approach.miss_distance.lunar if approach else None,
    )
    return neo.model_copy(update={"risk_score": score, "risk_level": level})
