"""
Fixed fallback dataset in NeoWs record shape.

Four named objects followed by 46 generated ones. Generation is seeded so
every process serves the same records.
"""

import copy
import random
from typing import Any, Dict, List

_NAMED_OBJECTS: List[Dict[str, Any]] = [
    {
        "id": "2142257",
        "name": "(2007 FD10)",
        "is_potentially_hazardous_asteroid": True,
        "absolute_magnitude_h": 22.5,
        "estimated_diameter": {
            "kilometers": {"estimated_diameter_min": 0.134, "estimated_diameter_max": 0.3},
        },
        "close_approach_data": [
            {
                "close_approach_date": "2026-02-15",
                "close_approach_date_full": "2026-Feb-15 09:45",
                "epoch_date_close_approach": 1739613900000,
                "relative_velocity": {
                    "kilometers_per_second": "18.5",
                    "kilometers_per_hour": "66600",
                    "miles_per_hour": "41400",
                },
                "miss_distance": {
                    "astronomical": "0.0456",
                    "lunar": "17.74",
                    "kilometers": "6820000",
                    "miles": "4240000",
                },
                "orbiting_body": "Earth",
            }
        ],
        "orbital_data": {},
    },
    {
        "id": "2159695",
        "name": "(2007 PA8)",
        "is_potentially_hazardous_asteroid": True,
        "absolute_magnitude_h": 20.1,
        "estimated_diameter": {
            "kilometers": {"estimated_diameter_min": 0.354, "estimated_diameter_max": 0.791},
        },
        "close_approach_data": [
            {
                "close_approach_date": "2026-02-20",
                "close_approach_date_full": "2026-Feb-20 14:30",
                "epoch_date_close_approach": 1740076200000,
                "relative_velocity": {
                    "kilometers_per_second": "22.3",
                    "kilometers_per_hour": "80280",
                    "miles_per_hour": "49900",
                },
                "miss_distance": {
                    "astronomical": "0.0821",
                    "lunar": "31.94",
                    "kilometers": "12280000",
                    "miles": "7630000",
                },
                "orbiting_body": "Earth",
            }
        ],
        "orbital_data": {},
    },
    {
        "id": "3671668",
        "name": "(2013 RY24)",
        "is_potentially_hazardous_asteroid": False,
        "absolute_magnitude_h": 23.8,
        "estimated_diameter": {
            "kilometers": {"estimated_diameter_min": 0.075, "estimated_diameter_max": 0.168},
        },
        "close_approach_data": [
            {
                "close_approach_date": "2026-02-18",
                "close_approach_date_full": "2026-Feb-18 06:15",
                "epoch_date_close_approach": 1739887500000,
                "relative_velocity": {
                    "kilometers_per_second": "19.7",
                    "kilometers_per_hour": "70920",
                    "miles_per_hour": "44100",
                },
                "miss_distance": {
                    "astronomical": "0.1245",
                    "lunar": "48.43",
                    "kilometers": "18620000",
                    "miles": "11570000",
                },
                "orbiting_body": "Earth",
            }
        ],
        "orbital_data": {},
    },
    {
        "id": "3860210",
        "name": "(2015 BX509)",
        "is_potentially_hazardous_asteroid": True,
        "absolute_magnitude_h": 21.2,
        "estimated_diameter": {
            "kilometers": {"estimated_diameter_min": 0.226, "estimated_diameter_max": 0.506},
        },
        "close_approach_data": [
            {
                "close_approach_date": "2026-02-22",
                "close_approach_date_full": "2026-Feb-22 18:45",
                "epoch_date_close_approach": 1740263100000,
                "relative_velocity": {
                    "kilometers_per_second": "21.1",
                    "kilometers_per_hour": "75960",
                    "miles_per_hour": "47200",
                },
                "miss_distance": {
                    "astronomical": "0.0634",
                    "lunar": "24.66",
                    "kilometers": "9485000",
                    "miles": "5895000",
                },
                "orbiting_body": "Earth",
            }
        ],
        "orbital_data": {},
    },
]

GENERATED_COUNT = 46
_SEED = 2026


def _generated_objects() -> List[Dict[str, Any]]:
    rng = random.Random(_SEED)
    records = []

    for i in range(GENERATED_COUNT):
        day = f"{10 + (i % 20):02d}"
        records.append({
            "id": str(2000000 + i),
            "name": f"({2026 - i // 5}-{chr(65 + i % 5)}{(i + 1) % 10})",
            "is_potentially_hazardous_asteroid": rng.random() > 0.6,
            "absolute_magnitude_h": round(18 + rng.random() * 8, 2),
            "estimated_diameter": {
                "kilometers": {
                    "estimated_diameter_min": round(0.05 + rng.random() * 0.5, 4),
                    "estimated_diameter_max": round(0.3 + rng.random() * 2, 4),
                },
            },
            "close_approach_data": [
                {
                    "close_approach_date": f"2026-02-{day}",
                    "close_approach_date_full": f"2026-Feb-{day} {(i * 7) % 24:02d}:{(i * 13) % 60:02d}",
                    "epoch_date_close_approach": 1739000000000 + i * 86400000,
                    "relative_velocity": {
                        "kilometers_per_second": f"{15 + rng.random() * 30:.1f}",
                        "kilometers_per_hour": f"{54000 + rng.random() * 100000:.0f}",
                        "miles_per_hour": f"{33500 + rng.random() * 65000:.0f}",
                    },
                    "miss_distance": {
                        "astronomical": f"{0.02 + rng.random() * 0.2:.4f}",
                        "lunar": f"{8 + rng.random() * 60:.2f}",
                        "kilometers": f"{3000000 + rng.random() * 30000000:.0f}",
                        "miles": f"{1850000 + rng.random() * 18600000:.0f}",
                    },
                    "orbiting_body": "Earth",
                }
            ],
            "orbital_data": {},
        })

    return records


FALLBACK_OBJECTS: List[Dict[str, Any]] = _NAMED_OBJECTS + _generated_objects()
FALLBACK_IDS = frozenset(record["id"] for record in FALLBACK_OBJECTS)


def fallback_records() -> List[Dict[str, Any]]:
    """Fresh copies of every fallback record."""
    return copy.deepcopy(FALLBACK_OBJECTS)


def fallback_record(neo_id: str) -> Dict[str, Any]:
    """Fresh copy of one fallback record. Raises KeyError when absent."""
    for record in FALLBACK_OBJECTS:
        if record["id"] == neo_id:
            return copy.deepcopy(record)
    raise KeyError(neo_id)
