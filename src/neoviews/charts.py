"""Per-chart data views and the declarative chart registry.

Each registry entry pairs display metadata with a builder that turns the
current dataset into the data that chart type needs. Renderers look charts
up here and draw whatever the builder returns; no layout happens here.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import numpy as np

from neoviews.models import (
    NUMERIC_METRICS,
    SIZE_CATEGORIES,
    DailyCount,
    MetricStats,
    NoData,
    Observation,
)
from neoviews.views import AsteroidDataset, metric_stats

logger = logging.getLogger(__name__)

HISTOGRAM_BINS = 20

SIZE_LABELS: dict[str, str] = {
    "small": "Small (<0.1km)",
    "medium": "Medium (0.1-0.5km)",
    "large": "Large (0.5-1km)",
    "very_large": "Very Large (>1km)",
}


class UnknownChartError(KeyError):
    """No chart with that id is registered."""


@dataclass(frozen=True)
class SizeHazardCount:
    category: str  # One of SIZE_CATEGORIES
    label: str  # Display label from SIZE_LABELS
    hazardous: int
    safe: int


@dataclass(frozen=True)
class PieSlice:
    label: str
    count: int
    share: float  # Fraction of the total, 0.0 when the dataset is empty


@dataclass(frozen=True)
class HistogramBin:
    x0: float  # Inclusive lower edge
    x1: float  # Upper edge; inclusive only for the last bin
    count: int


@dataclass(frozen=True)
class ScatterPoint:
    name: str
    diameter_avg: float
    velocity: float
    is_hazardous: bool
    miss_distance: float | None = None  # Set for bubble charts (radius)


@dataclass(frozen=True)
class TimePoint:
    date: str
    value: int


# --- Builders ---


def bar_view(store: AsteroidDataset) -> list[Observation] | NoData:
    """Top 10 asteroids by estimated diameter."""
    return store.top_n("diameter_avg", 10)


def horizontal_bar_view(store: AsteroidDataset) -> list[Observation] | NoData:
    return store.top_n("velocity", 15)


def grouped_bar_view(store: AsteroidDataset) -> list[SizeHazardCount] | NoData:
    """Hazardous vs safe counts within each size category."""
    categories = store.by_size_category()
    if isinstance(categories, NoData):
        return categories
    rows = []
    for name in SIZE_CATEGORIES:
        members = categories[name]
        hazardous = sum(1 for o in members if o.is_hazardous)
        rows.append(
            SizeHazardCount(
                category=name,
                label=SIZE_LABELS[name],
                hazardous=hazardous,
                safe=len(members) - hazardous,
            )
        )
    return rows


def stacked_bar_view(store: AsteroidDataset) -> list[DailyCount] | NoData:
    return store.daily_counts()


def pie_view(store: AsteroidDataset) -> list[PieSlice] | NoData:
    dataset = store.snapshot()
    if isinstance(dataset, NoData):
        return dataset
    total = dataset.total_count
    return [
        PieSlice(
            label="Hazardous",
            count=dataset.hazardous_count,
            share=dataset.hazardous_count / total if total else 0.0,
        ),
        PieSlice(
            label="Non-Hazardous",
            count=dataset.non_hazardous_count,
            share=dataset.non_hazardous_count / total if total else 0.0,
        ),
    ]


def histogram_view(
    store: AsteroidDataset, bins: int = HISTOGRAM_BINS
) -> list[HistogramBin] | NoData:
    """Velocity distribution in equal-width bins spanning the observed range.

    Bins are half-open ``[x0, x1)`` except the last, which also includes the
    maximum. An empty dataset yields no bins.
    """
    dataset = store.snapshot()
    if isinstance(dataset, NoData):
        return dataset
    velocities = np.array([o.velocity for o in dataset.observations], dtype=float)
    if velocities.size == 0:
        return []
    counts, edges = np.histogram(velocities, bins=bins)
    return [
        HistogramBin(x0=float(edges[i]), x1=float(edges[i + 1]), count=int(c))
        for i, c in enumerate(counts)
    ]


def box_plot_view(store: AsteroidDataset) -> dict[str, MetricStats] | NoData:
    """Summary statistics for every numeric metric."""
    dataset = store.snapshot()
    if isinstance(dataset, NoData):
        return dataset
    if dataset.total_count == 0:
        return {}
    return {
        metric: metric_stats(dataset.observations, metric)
        for metric in NUMERIC_METRICS
    }


def _scatter_points(
    store: AsteroidDataset, with_radius: bool
) -> list[ScatterPoint] | NoData:
    dataset = store.snapshot()
    if isinstance(dataset, NoData):
        return dataset
    return [
        ScatterPoint(
            name=o.name,
            diameter_avg=o.diameter_avg,
            velocity=o.velocity,
            is_hazardous=o.is_hazardous,
            miss_distance=o.miss_distance if with_radius else None,
        )
        for o in dataset.observations
    ]


def scatter_view(store: AsteroidDataset) -> list[ScatterPoint] | NoData:
    """Size vs velocity, one point per asteroid."""
    return _scatter_points(store, with_radius=False)


def bubble_view(store: AsteroidDataset) -> list[ScatterPoint] | NoData:
    """Scatter points plus miss distance as a third variable."""
    return _scatter_points(store, with_radius=True)


def line_view(store: AsteroidDataset) -> list[TimePoint] | NoData:
    counts = store.daily_counts()
    if isinstance(counts, NoData):
        return counts
    return [TimePoint(date=c.date, value=c.total) for c in counts]


def area_view(store: AsteroidDataset) -> list[TimePoint] | NoData:
    """Running total of asteroids across the date range."""
    counts = store.daily_counts()
    if isinstance(counts, NoData):
        return counts
    running = np.cumsum([c.total for c in counts], dtype=int)
    return [TimePoint(date=c.date, value=int(v)) for c, v in zip(counts, running)]


# --- Registry ---


@dataclass(frozen=True)
class ChartSpec:
    """Display metadata plus the builder for one chart type."""

    id: str
    title: str
    subtitle: str
    description: str
    section: str  # Key into SECTION_INFO
    build: Callable[[AsteroidDataset], Any]


SECTION_INFO: dict[str, str] = {
    "categorical": "Categorical & Comparison Charts",
    "distribution": "Distribution Charts",
    "relationship": "Relationship & Correlation Charts",
    "time": "Time-Based Charts",
}

CHART_REGISTRY: tuple[ChartSpec, ...] = (
    ChartSpec(
        id="bar-chart",
        title="Bar Chart",
        subtitle="Top 10 asteroids by estimated diameter",
        description="Compares values with rectangles; height is the asteroid diameter.",
        section="categorical",
        build=bar_view,
    ),
    ChartSpec(
        id="horizontal-bar",
        title="Horizontal Bar Chart",
        subtitle="Asteroids sorted by relative velocity",
        description="A bar chart rotated 90 degrees, easier to read with long labels.",
        section="categorical",
        build=horizontal_bar_view,
    ),
    ChartSpec(
        id="grouped-bar",
        title="Grouped Bar Chart",
        subtitle="Hazardous vs non-hazardous by size category",
        description="Side-by-side hazardous and safe counts within each size category.",
        section="categorical",
        build=grouped_bar_view,
    ),
    ChartSpec(
        id="stacked-bar",
        title="Stacked Bar Chart",
        subtitle="Daily count of hazardous and non-hazardous asteroids",
        description="Each day's total, split into hazardous and non-hazardous segments.",
        section="categorical",
        build=stacked_bar_view,
    ),
    ChartSpec(
        id="pie-chart",
        title="Pie Chart",
        subtitle="Percentage of hazardous vs non-hazardous asteroids",
        description="A simple part-to-whole split of the hazard flag.",
        section="categorical",
        build=pie_view,
    ),
    ChartSpec(
        id="histogram",
        title="Histogram",
        subtitle="Distribution of asteroid velocities",
        description="Velocities grouped into equal-width bins to show the distribution shape.",
        section="distribution",
        build=histogram_view,
    ),
    ChartSpec(
        id="box-plot",
        title="Box Plot",
        subtitle="Spread of each numeric metric",
        description="Min, quartiles, median and max for every numeric field.",
        section="distribution",
        build=box_plot_view,
    ),
    ChartSpec(
        id="scatter-plot",
        title="Scatter Plot",
        subtitle="Asteroid size vs velocity relationship",
        description="One point per asteroid; reveals clusters and outliers.",
        section="relationship",
        build=scatter_view,
    ),
    ChartSpec(
        id="bubble-chart",
        title="Bubble Chart",
        subtitle="Size, velocity, and miss distance (3 variables)",
        description="A scatter plot where circle size encodes miss distance.",
        section="relationship",
        build=bubble_view,
    ),
    ChartSpec(
        id="line-chart",
        title="Line Chart",
        subtitle="Daily asteroid count over time",
        description="Daily totals connected in date order.",
        section="time",
        build=line_view,
    ),
    ChartSpec(
        id="area-chart",
        title="Area Chart",
        subtitle="Cumulative asteroids over the date range",
        description="Running total of asteroids, emphasising volume over time.",
        section="time",
        build=area_view,
    ),
)

_BY_ID: dict[str, ChartSpec] = {spec.id: spec for spec in CHART_REGISTRY}


def get_chart_spec(chart_id: str) -> ChartSpec:
    try:
        return _BY_ID[chart_id]
    except KeyError:
        raise UnknownChartError(chart_id) from None


def charts_by_section() -> dict[str, list[ChartSpec]]:
    """Group registry entries by section, in registry order."""
    sections: dict[str, list[ChartSpec]] = {}
    for spec in CHART_REGISTRY:
        sections.setdefault(spec.section, []).append(spec)
    return sections


def build_chart_data(store: AsteroidDataset, chart_id: str) -> Any:
    """Build the data view for one chart.

    Raises:
        UnknownChartError: If ``chart_id`` is not registered.
    """
    return get_chart_spec(chart_id).build(store)


def build_all_chart_data(store: AsteroidDataset) -> dict[str, Any]:
    """Build every registered chart's data view.

    A builder that raises is logged and left out of the result; the remaining
    charts are still built.
    """
    views: dict[str, Any] = {}
    for spec in CHART_REGISTRY:
        try:
            views[spec.id] = spec.build(store)
        except Exception:
            logger.exception("Error building data for chart %s", spec.id)
    return views
