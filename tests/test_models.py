from __future__ import annotations

import dataclasses

import pytest

from neoviews.models import Dataset, Failed, NoData, Unloaded


def test_observation_diameter_avg_is_midpoint(make_observation) -> None:
    obs = make_observation(diameter_min=0.2, diameter_max=0.6)
    assert obs.diameter_avg == pytest.approx(0.4)


def test_observation_is_frozen(make_observation) -> None:
    obs = make_observation()
    with pytest.raises(dataclasses.FrozenInstanceError):
        obs.velocity = 1.0  # type: ignore[misc]


def test_dataset_metadata_matches_observations(observations) -> None:
    ds = Dataset.from_observations(observations)
    assert ds.total_count == 4
    assert ds.hazardous_count == 2
    assert ds.non_hazardous_count == 2
    assert ds.dates == ("2024-01-01", "2024-01-02", "2024-01-03")
    assert ds.observations == tuple(observations)


def test_dataset_from_empty_sequence() -> None:
    ds = Dataset.from_observations([])
    assert ds.total_count == 0
    assert ds.hazardous_count == 0
    assert ds.dates == ()


def test_no_data_is_falsy_and_carries_reason() -> None:
    unloaded = NoData(Unloaded())
    failed = NoData(Failed("HTTP 503"))
    assert not unloaded
    assert not failed
    assert unloaded.reason is None
    assert failed.reason == "HTTP 503"
