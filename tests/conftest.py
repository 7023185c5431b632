from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from neoviews.models import Observation
from neoviews.views import AsteroidDataset


def _observation(**overrides: Any) -> Observation:
    fields: dict[str, Any] = {
        "id": "1",
        "name": "(2024 AA)",
        "date": "2024-01-01",
        "diameter_min": 0.1,
        "diameter_max": 0.3,
        "is_hazardous": False,
        "velocity": 50_000.0,
        "miss_distance": 4_000_000.0,
        "absolute_magnitude": 22.0,
    }
    fields.update(overrides)
    return Observation(**fields)


@pytest.fixture
def make_observation() -> Callable[..., Observation]:
    return _observation


@pytest.fixture
def observations() -> list[Observation]:
    # Feed order deliberately not date-sorted.
    return [
        _observation(id="a", name="A", date="2024-01-02", diameter_min=0.01, diameter_max=0.03,
                     velocity=10.0, miss_distance=300.0, is_hazardous=True),
        _observation(id="b", name="B", date="2024-01-01", diameter_min=0.2, diameter_max=0.4,
                     velocity=30.0, miss_distance=100.0),
        _observation(id="c", name="C", date="2024-01-02", diameter_min=0.6, diameter_max=0.8,
                     velocity=20.0, miss_distance=200.0, is_hazardous=True),
        _observation(id="d", name="D", date="2024-01-03", diameter_min=1.0, diameter_max=2.0,
                     velocity=40.0, miss_distance=400.0),
    ]


@pytest.fixture
def store(observations: list[Observation]) -> AsteroidDataset:
    ds = AsteroidDataset()
    ds.load(observations)
    return ds


def _neo(neo_id: str, hazardous: bool, kmh: str, km: str, dmin: float, dmax: float) -> dict[str, Any]:
    return {
        "id": neo_id,
        "name": f"({neo_id})",
        "absolute_magnitude_h": 21.5,
        "estimated_diameter": {
            "kilometers": {"estimated_diameter_min": dmin, "estimated_diameter_max": dmax},
            "meters": {"estimated_diameter_min": dmin * 1000, "estimated_diameter_max": dmax * 1000},
        },
        "is_potentially_hazardous_asteroid": hazardous,
        "close_approach_data": [
            {
                "close_approach_date": "2024-01-01",
                "relative_velocity": {"kilometers_per_hour": kmh, "kilometers_per_second": "1.0"},
                "miss_distance": {"kilometers": km, "lunar": "10.0"},
            },
            {
                "close_approach_date": "2031-06-01",
                "relative_velocity": {"kilometers_per_hour": "1.0", "kilometers_per_second": "0.1"},
                "miss_distance": {"kilometers": "1.0", "lunar": "0.1"},
            },
        ],
    }


@pytest.fixture
def feed_payload() -> dict[str, Any]:
    """Minimal NeoWs feed response with dates out of order."""
    return {
        "element_count": 3,
        "near_earth_objects": {
            "2024-01-02": [_neo("3003", False, "72000.5", "7000000.25", 0.5, 1.5)],
            "2024-01-01": [
                _neo("1001", True, "54000.0", "1500000.0", 0.1, 0.3),
                _neo("2002", False, "36000.0", "900000.0", 0.02, 0.04),
            ],
        },
    }
