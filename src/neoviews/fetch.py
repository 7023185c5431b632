"""NeoWs feed layer — HTTP fetch from NASA and normalization into Observations."""

import logging
import os
from datetime import date
from typing import Any

import httpx

from neoviews.models import Dataset, Observation
from neoviews.views import AsteroidDataset

logger = logging.getLogger(__name__)

FEED_URL = "https://api.nasa.gov/neo/rest/v1/feed"
DEFAULT_START_DATE = "2024-01-01"
DEFAULT_END_DATE = "2024-01-08"
MAX_RANGE_DAYS = 7  # NeoWs rejects longer feed windows
REQUEST_TIMEOUT = 10  # seconds


class FeedError(Exception):
    """Base class for feed fetch and parse failures."""


class FeedFetchError(FeedError):
    """NeoWs request failed (transport error or non-2xx status)."""


class FeedFormatError(FeedError):
    """Feed payload did not have the expected shape."""


def _api_key(api_key: str | None) -> str:
    return api_key or os.environ.get("NASA_API_KEY") or "DEMO_KEY"


def _check_range(start_date: str, end_date: str) -> None:
    start = date.fromisoformat(start_date)
    end = date.fromisoformat(end_date)
    if end < start:
        raise ValueError(f"end_date {end_date} is before start_date {start_date}")
    if (end - start).days > MAX_RANGE_DAYS:
        raise ValueError(
            f"feed range {start_date}..{end_date} exceeds {MAX_RANGE_DAYS} days"
        )


def fetch_feed(
    start_date: str = DEFAULT_START_DATE,
    end_date: str = DEFAULT_END_DATE,
    api_key: str | None = None,
    client: httpx.Client | None = None,
) -> dict[str, Any]:
    """Fetch the raw NeoWs feed for a date range.

    Args:
        start_date: First day, "YYYY-MM-DD".
        end_date: Last day, "YYYY-MM-DD". At most 7 days after start_date.
        api_key: NASA API key. Falls back to $NASA_API_KEY, then DEMO_KEY.
        client: Optional httpx client. Created and closed here if omitted.

    Returns:
        Parsed JSON response.

    Raises:
        ValueError: On an invalid or too-long date range.
        FeedFetchError: On transport error, non-2xx status, or non-JSON body.
    """
    _check_range(start_date, end_date)
    params = {
        "start_date": start_date,
        "end_date": end_date,
        "api_key": _api_key(api_key),
    }
    owns_client = client is None
    http = client if client is not None else httpx.Client(timeout=REQUEST_TIMEOUT)
    try:
        resp = http.get(FEED_URL, params=params)
        resp.raise_for_status()
        return resp.json()
    except httpx.HTTPStatusError as e:
        raise FeedFetchError(
            f"NeoWs returned {e.response.status_code} for {start_date}..{end_date}"
        ) from e
    except httpx.HTTPError as e:
        raise FeedFetchError(f"NeoWs request failed: {e}") from e
    except ValueError as e:
        raise FeedFetchError(f"NeoWs returned invalid JSON: {e}") from e
    finally:
        if owns_client:
            http.close()


def _to_observation(feed_date: str, neo: dict[str, Any]) -> Observation:
    diameter = neo["estimated_diameter"]["kilometers"]
    # Only the first close approach is used, matching the workshop charts.
    approach = neo["close_approach_data"][0]
    return Observation(
        id=str(neo["id"]),
        name=neo["name"],
        date=feed_date,
        diameter_min=float(diameter["estimated_diameter_min"]),
        diameter_max=float(diameter["estimated_diameter_max"]),
        is_hazardous=neo["is_potentially_hazardous_asteroid"],
        velocity=float(approach["relative_velocity"]["kilometers_per_hour"]),
        miss_distance=float(approach["miss_distance"]["kilometers"]),
        absolute_magnitude=float(neo["absolute_magnitude_h"]),
    )


def normalize_feed(raw: dict[str, Any]) -> tuple[Observation, ...]:
    """Flatten the per-date ``near_earth_objects`` mapping into Observations.

    Dates are visited in sorted order; objects keep their feed order within
    a date.

    Raises:
        FeedFormatError: If the payload or any object is missing a field.
    """
    try:
        by_date = raw["near_earth_objects"]
    except (KeyError, TypeError) as e:
        raise FeedFormatError("feed has no near_earth_objects mapping") from e
    if not isinstance(by_date, dict):
        raise FeedFormatError(
            f"near_earth_objects is {type(by_date).__name__}, expected a mapping"
        )

    observations: list[Observation] = []
    for feed_date in sorted(by_date):
        neos = by_date[feed_date]
        if not isinstance(neos, list):
            raise FeedFormatError(
                f"objects for {feed_date} are {type(neos).__name__}, expected a list"
            )
        for neo in neos:
            try:
                observations.append(_to_observation(feed_date, neo))
            except (KeyError, IndexError, TypeError, ValueError) as e:
                neo_id = neo.get("id", "?") if isinstance(neo, dict) else "?"
                raise FeedFormatError(
                    f"malformed object {neo_id} on {feed_date}: {e!r}"
                ) from e
    return tuple(observations)


def fetch_observations(
    start_date: str = DEFAULT_START_DATE,
    end_date: str = DEFAULT_END_DATE,
    api_key: str | None = None,
    client: httpx.Client | None = None,
) -> tuple[Observation, ...]:
    """Fetch and normalize in one call."""
    return normalize_feed(fetch_feed(start_date, end_date, api_key, client))


def refresh(
    store: AsteroidDataset,
    start_date: str = DEFAULT_START_DATE,
    end_date: str = DEFAULT_END_DATE,
    api_key: str | None = None,
    client: httpx.Client | None = None,
) -> Dataset:
    """Fetch the feed and swap the result into ``store``.

    On failure the store is marked failed and the error is re-raised; no
    retry is attempted.

    Returns:
        The newly loaded Dataset.

    Raises:
        FeedError: If the fetch or normalization fails.
    """
    try:
        observations = fetch_observations(start_date, end_date, api_key, client)
    except FeedError as e:
        logger.error("Failed to load asteroid data: %s", e)
        store.mark_failed(str(e))
        raise
    dataset = store.load(observations)
    logger.info(
        "Asteroid data loaded: %d total, %d hazardous, %d non-hazardous",
        dataset.total_count,
        dataset.hazardous_count,
        dataset.non_hazardous_count,
    )
    return dataset
