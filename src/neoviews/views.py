"""Derived-view queries over the current asteroid dataset."""

import logging
import math
from collections.abc import Iterable

from neoviews.models import (
    NUMERIC_METRICS,
    SIZE_CATEGORIES,
    DailyCount,
    Dataset,
    DatasetState,
    Failed,
    Loaded,
    MetricStats,
    NoData,
    Observation,
    Unloaded,
)

logger = logging.getLogger(__name__)

# Lower bounds (km) of each size category above "small", checked largest first.
_SIZE_THRESHOLDS: tuple[tuple[float, str], ...] = (
    (1.0, "very_large"),
    (0.5, "large"),
    (0.1, "medium"),
)


class UnknownMetricError(KeyError):
    """Query named a field that is not a numeric Observation metric."""

    def __init__(self, metric: str) -> None:
        super().__init__(metric)
        self.metric = metric

    def __str__(self) -> str:
        expected = ", ".join(NUMERIC_METRICS)
        return f"unknown metric {self.metric!r}; expected one of {expected}"


class EmptyDatasetError(ValueError):
    """Statistics requested over a dataset with no observations."""


def _check_metric(metric: str) -> None:
    if metric not in NUMERIC_METRICS:
        raise UnknownMetricError(metric)


def size_category(diameter_km: float) -> str:
    """Return the size category for an average diameter in kilometers.

    Thresholds are half-open: a value equal to a boundary belongs to the
    larger category (0.1 is medium, 0.5 is large, 1.0 is very_large).
    """
    for lower, name in _SIZE_THRESHOLDS:
        if diameter_km >= lower:
            return name
    return "small"


def positional_quantile(sorted_values: list[float], q: float) -> float:
    """Value at index ``floor(n * q)`` of an ascending list. No interpolation."""
    return sorted_values[math.floor(len(sorted_values) * q)]


def metric_stats(observations: tuple[Observation, ...], metric: str) -> MetricStats:
    """Compute min/max/mean/median/q1/q3 for ``metric`` over ``observations``.

    ``q1`` and ``q3`` use positional quantiles (index ``floor(n * 0.25)``
    and ``floor(n * 0.75)`` of the sorted values) rather than linear
    interpolation, so on small samples they can differ from numpy or
    pandas defaults. The median does average the two middle values when
    ``n`` is even.

    Raises:
        UnknownMetricError: If ``metric`` is not a numeric field.
        EmptyDatasetError: If there are no observations.
    """
    _check_metric(metric)
    values = sorted(getattr(o, metric) for o in observations)
    n = len(values)
    if n == 0:
        raise EmptyDatasetError(f"no observations to compute {metric} stats")
    if n % 2 == 0:
        median = (values[n // 2 - 1] + values[n // 2]) / 2
    else:
        median = values[n // 2]
    return MetricStats(
        min=values[0],
        max=values[-1],
        mean=sum(values) / n,
        median=median,
        q1=positional_quantile(values, 0.25),
        q3=positional_quantile(values, 0.75),
    )


class AsteroidDataset:
    """Read-only analytical views over one dataset snapshot.

    The dataset is held as a single ``DatasetState`` reference. ``load`` and
    ``mark_failed`` replace that reference wholesale; queries read it once
    and work on that snapshot, so a concurrent refresh never shows a reader
    a mix of old and new observations.
    """

    def __init__(self, state: DatasetState | None = None) -> None:
        self._state: DatasetState = state if state is not None else Unloaded()

    @property
    def state(self) -> DatasetState:
        return self._state

    def load(self, observations: Iterable[Observation]) -> Dataset:
        """Build a dataset from normalized observations and swap it in.

        Args:
            observations: Flat observation sequence, in feed order.

        Returns:
            The newly loaded Dataset.
        """
        dataset = Dataset.from_observations(observations)
        self._state = Loaded(dataset)
        logger.debug(
            "Loaded dataset: %d observations over %d dates",
            dataset.total_count,
            len(dataset.dates),
        )
        return dataset

    def mark_failed(self, reason: str) -> None:
        """Replace the current state with a failure. Later queries return NoData."""
        self._state = Failed(reason)
        logger.debug("Dataset marked failed: %s", reason)

    def snapshot(self) -> Dataset | NoData:
        """The loaded Dataset, or NoData describing why there is none."""
        state = self._state
        if isinstance(state, Loaded):
            return state.dataset
        return NoData(state)

    def by_date(self) -> dict[str, tuple[Observation, ...]] | NoData:
        """Partition observations by exact date string, keys in first-seen order."""
        snap = self.snapshot()
        if isinstance(snap, NoData):
            return snap
        return _group_by_date(snap.observations)

    def by_size_category(self) -> dict[str, tuple[Observation, ...]] | NoData:
        """Partition observations into small / medium / large / very_large.

        Every observation lands in exactly one category, by ``diameter_avg``:
        ``< 0.1`` small, ``[0.1, 0.5)`` medium, ``[0.5, 1.0)`` large,
        ``>= 1.0`` very_large.
        """
        snap = self.snapshot()
        if isinstance(snap, NoData):
            return snap
        buckets: dict[str, list[Observation]] = {name: [] for name in SIZE_CATEGORIES}
        for obs in snap.observations:
            buckets[size_category(obs.diameter_avg)].append(obs)
        return {name: tuple(items) for name, items in buckets.items()}

    def top_n(self, metric: str, n: int = 10) -> list[Observation] | NoData:
        """Return the ``n`` observations with the largest ``metric``.

        The sort is stable, so observations with equal values keep their
        original order.

        Args:
            metric: One of ``NUMERIC_METRICS``.
            n: Maximum number of observations to return.

        Returns:
            Up to ``n`` observations, descending by ``metric``.

        Raises:
            UnknownMetricError: If ``metric`` is not a numeric field.
        """
        _check_metric(metric)
        snap = self.snapshot()
        if isinstance(snap, NoData):
            return snap
        if n <= 0:
            return []
        ranked = sorted(
            snap.observations, key=lambda o: getattr(o, metric), reverse=True
        )
        return ranked[:n]

    def stats(self, metric: str) -> MetricStats | NoData:
        """Summary statistics for ``metric``; see ``metric_stats``.

        Raises:
            UnknownMetricError: If ``metric`` is not a numeric field.
            EmptyDatasetError: If the loaded dataset has no observations.
        """
        _check_metric(metric)
        snap = self.snapshot()
        if isinstance(snap, NoData):
            return snap
        return metric_stats(snap.observations, metric)

    def daily_counts(self) -> list[DailyCount] | NoData:
        """Hazardous / non-hazardous / total counts for each date, in date order."""
        snap = self.snapshot()
        if isinstance(snap, NoData):
            return snap
        grouped = _group_by_date(snap.observations)
        counts: list[DailyCount] = []
        for date in snap.dates:
            day = grouped[date]
            hazardous = sum(1 for o in day if o.is_hazardous)
            counts.append(
                DailyCount(
                    date=date,
                    hazardous=hazardous,
                    non_hazardous=len(day) - hazardous,
                    total=len(day),
                )
            )
        return counts


def _group_by_date(
    observations: tuple[Observation, ...],
) -> dict[str, tuple[Observation, ...]]:
    grouped: dict[str, list[Observation]] = {}
    for obs in observations:
        grouped.setdefault(obs.date, []).append(obs)
    return {date: tuple(items) for date, items in grouped.items()}
