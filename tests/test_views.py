"""
Tests for the dashboard view helpers.
"""

from __future__ import annotations

from datetime import date

import pytest

from cosmic_watch import views
from cosmic_watch.models import NearEarthObject
from cosmic_watch.risk import score_object


def _approach(day, lunar, km, miles="1000", kph="50000", mph="31000"):
    return {
        "close_approach_date": day,
        "relative_velocity": {"kilometers_per_second": "14", "kilometers_per_hour": kph, "miles_per_hour": mph},
        "miss_distance": {"astronomical": "0.01", "lunar": str(lunar), "kilometers": str(km), "miles": miles},
    }


def _neo(neo_id, name, hazardous=False, approaches=None, dmax=0.5):
    return score_object(NearEarthObject.model_validate({
        "id": neo_id,
        "name": name,
        "is_potentially_hazardous_asteroid": hazardous,
        "absolute_magnitude_h": 20.0,
        "estimated_diameter": {"kilometers": {"estimated_diameter_min": 0.1, "estimated_diameter_max": dmax}},
        "close_approach_data": approaches if approaches is not None else [_approach("2026-02-15", 20, 7_000_000)],
    }))


@pytest.fixture
def objects():
    return [
        _neo("1", "(2007 FD10)", hazardous=True),
        _neo("2", "(2013 RY24)"),
        _neo("3", "433 Eros (A898 PA)", hazardous=True),
    ]


def test_filter_by_hazard(objects):
    assert [n.id for n in views.filter_objects(objects, "hazardous")] == ["1", "3"]
    assert [n.id for n in views.filter_objects(objects, "safe")] == ["2"]
    assert len(views.filter_objects(objects, "all")) == 3


def test_filter_by_name_is_case_insensitive(objects):
    assert [n.id for n in views.filter_objects(objects, search="eros")] == ["3"]
    assert [n.id for n in views.filter_objects(objects, "safe", search="fd10")] == []


def test_dashboard_stats(objects):
    stats = views.dashboard_stats(objects)
    assert stats["total"] == 3
    assert stats["hazardous"] == 2
    assert stats["avg_velocity_kph"] == pytest.approx(50000)
    assert views.dashboard_stats([])["avg_velocity_kph"] == 0


def test_unit_conversion():
    assert views.convert_km(10, "km") == 10
    assert views.convert_km(10, "mi") == pytest.approx(6.21371)


def test_table_row_in_miles():
    row = views.table_row(_neo("1", "x", dmax=2.0), "mi")
    assert row["size"] == pytest.approx(2.0 * 0.621371)
    assert row["distance"] == 1000
    assert row["velocity"] == 31000


def test_table_row_without_approach_is_none():
    assert views.table_row(_neo("1", "x", approaches=[]), "km") is None


@pytest.mark.parametrize(
    "km,expected",
    [(6000, 0.8), (10000, 0.15), (300000, 0.01), (7_000_000, 0.0001)],
)
def test_impact_probability_bands(km, expected):
    neo = _neo("1", "x", approaches=[_approach("2026-02-15", 1, km)])
    assert views.impact_probability(neo) == expected


def test_risk_profile_axes():
    profile = {axis["subject"]: axis["value"] for axis in views.risk_profile(_neo("1", "x", hazardous=True, dmax=1.0))}
    assert profile["Velocity"] == pytest.approx(50)
    assert profile["Size"] == pytest.approx(50)
    assert profile["Proximity"] == pytest.approx(60)
    assert profile["Hazard"] == 100


def test_approach_timeline_is_limited():
    approaches = [_approach(f"2026-03-{d:02d}", 10, 1_000_000) for d in range(1, 26)]
    timeline = views.approach_timeline(_neo("1", "x", approaches=approaches))
    assert len(timeline) == 20
    assert timeline[0]["miss_distance_thousand_km"] == 1000


def test_next_approach_skips_past_dates():
    neo = _neo("1", "x", approaches=[
        _approach("2020-01-01", 10, 1),
        _approach("2030-01-01", 10, 2),
    ])
    assert views.next_approach(neo, today=date(2026, 1, 1)).close_approach_date == "2030-01-01"
    assert views.next_approach(neo, today=date(2031, 1, 1)).close_approach_date == "2020-01-01"


def test_orrery_positions_are_stable_and_limited():
    many = [_neo(str(i), f"({i})", hazardous=i % 2 == 0) for i in range(60)]
    first = views.orrery_positions(many)
    assert len(first) == 50
    assert first == views.orrery_positions(many)
    for p in first:
        assert 50 <= p["distance"] <= 70
    assert first[0]["color"] == "#FF4444"
    assert first[1]["color"] == "#44FF44"
