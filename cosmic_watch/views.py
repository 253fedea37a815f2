"""
View-model helpers for the dashboard pages.

Pure functions over scored feed objects: filtering, unit conversion and the
derived figures each page shows.
"""

import math
import random
from datetime import date
from typing import Dict, Iterable, List, Optional

from cosmic_watch.models import CloseApproach, NearEarthObject, RiskLevel

KM_TO_MI = 0.621371
EARTH_RADIUS_KM = 6371
MOON_ORBIT_KM = 400_000

HAZARD_FILTERS = ("all", "hazardous", "safe")
ORRERY_LIMIT = 50
TIMELINE_LIMIT = 20


def convert_km(value_km: float, unit: str) -> float:
    return value_km * KM_TO_MI if unit == "mi" else value_km


def filter_objects(objects: Iterable[NearEarthObject], hazard: str = "all", search: str = "") -> List[NearEarthObject]:
    """Hazard partition plus case-insensitive substring match on name."""
    needle = search.strip().lower()
    result = []
    for neo in objects:
        if hazard == "hazardous" and not neo.is_potentially_hazardous_asteroid:
            continue
        if hazard == "safe" and neo.is_potentially_hazardous_asteroid:
            continue
        if needle and needle not in neo.name.lower():
            continue
        result.append(neo)
    return result


def dashboard_stats(objects: List[NearEarthObject]) -> Dict[str, float]:
    velocities = [neo.first_approach.relative_velocity.kilometers_per_hour if neo.first_approach else 0.0 for neo in objects]
    return {
        "total": len(objects),
        "hazardous": sum(1 for neo in objects if neo.is_potentially_hazardous_asteroid),
        "high_risk": sum(1 for neo in objects if neo.risk_level == RiskLevel.HIGH),
        "avg_velocity_kph": sum(velocities) / (len(objects) or 1),
    }


def table_row(neo: NearEarthObject, unit: str) -> Optional[Dict[str, object]]:
    """One dashboard table row in the chosen unit. None without an approach."""
    approach = neo.first_approach
    if approach is None:
        return None

    if unit == "mi":
        distance = approach.miss_distance.miles
        velocity = approach.relative_velocity.miles_per_hour
    else:
        distance = approach.miss_distance.kilometers
        velocity = approach.relative_velocity.kilometers_per_hour

    return {
        "id": neo.id,
        "name": neo.name,
        "hazardous": neo.is_potentially_hazardous_asteroid,
        "approach_date": approach.close_approach_date,
        "size": convert_km(neo.estimated_diameter.kilometers.estimated_diameter_max, unit),
        "distance": distance,
        "velocity": velocity,
        "risk_level": neo.risk_level.value,
        "risk_score": neo.risk_score,
    }


# === DETAIL ===

def impact_probability(neo: NearEarthObject) -> float:
    """Rough proximity bands of the first approach, not an orbital solution."""
    approach = neo.first_approach
    miss_km = approach.miss_distance.kilometers if approach else 0.0

    if miss_km < EARTH_RADIUS_KM + 100:
        return 0.8
    if miss_km < EARTH_RADIUS_KM * 2:
        return 0.15
    if miss_km < MOON_ORBIT_KM:
        return 0.01
    return 0.0001


def risk_profile(neo: NearEarthObject) -> List[Dict[str, float]]:
    """Four axes scaled to 0..100."""
    approach = neo.first_approach
    velocity_kph = approach.relative_velocity.kilometers_per_hour if approach else 0.0
    max_diameter = neo.estimated_diameter.kilometers.estimated_diameter_max

    if approach is not None:
        proximity = 100 - min(100.0, (approach.miss_distance.lunar / 50) * 100)
    else:
        proximity = 0.0

    return [
        {"subject": "Velocity", "value": min(100.0, velocity_kph / 100000 * 100)},
        {"subject": "Size", "value": min(100.0, max_diameter / 2 * 100)},
        {"subject": "Proximity", "value": proximity},
        {"subject": "Hazard", "value": 100.0 if neo.is_potentially_hazardous_asteroid else 20.0},
    ]


def approach_timeline(neo: NearEarthObject, limit: int = TIMELINE_LIMIT) -> List[Dict[str, object]]:
    return [
        {
            "date": approach.close_approach_date,
            "velocity_kph": approach.relative_velocity.kilometers_per_hour,
            "miss_distance_thousand_km": approach.miss_distance.kilometers / 1000,
            "miss_distance_ld": approach.miss_distance.lunar,
            "earth_radii": approach.miss_distance.kilometers / EARTH_RADIUS_KM,
        }
        for approach in neo.close_approach_data[:limit]
    ]


# === ALERTS ===

def next_approach(neo: NearEarthObject, today: Optional[date] = None) -> Optional[CloseApproach]:
    """First approach on or after today, else the first one listed."""
    today = today or date.today()
    for approach in neo.close_approach_data:
        try:
            when = date.fromisoformat(approach.close_approach_date[:10])
        except ValueError:
            continue
        if when >= today:
            return approach
    return neo.first_approach


# === ORRERY ===

def orrery_positions(objects: List[NearEarthObject], limit: int = ORRERY_LIMIT) -> List[Dict[str, object]]:
    """Decorative ring placement around Earth, stable per object id."""
    positions = []
    for neo in objects[:limit]:
        rng = random.Random(neo.id)
        distance = 50 + rng.random() * 20
        angle = rng.random() * 2 * math.pi
        positions.append({
            "id": neo.id,
            "name": neo.name,
            "distance": distance,
            "x": distance * math.cos(angle),
            "y": distance * math.sin(angle),
            "size": 0.3 + rng.random() * 0.2,
            "color": "#FF4444" if neo.is_potentially_hazardous_asteroid else "#44FF44",
        })
    return positions
