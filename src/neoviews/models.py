"""Data model definitions — explicit boundaries between feed, dataset, and view layers."""

from collections.abc import Iterable
from dataclasses import dataclass, field

NUMERIC_METRICS: tuple[str, ...] = (
    "diameter_min",
    "diameter_max",
    "diameter_avg",
    "velocity",
    "miss_distance",
    "absolute_magnitude",
)

SIZE_CATEGORIES: tuple[str, ...] = ("small", "medium", "large", "very_large")


@dataclass(frozen=True)
class Observation:
    """A single near-Earth object close approach, flattened from the feed."""

    id: str  # NeoWs object id
    name: str  # Designation, e.g. "(2024 AB1)"
    date: str  # Feed date key, "YYYY-MM-DD"
    diameter_min: float  # Estimated diameter lower bound (km)
    diameter_max: float  # Estimated diameter upper bound (km)
    is_hazardous: bool  # Copied verbatim from the feed
    velocity: float  # Relative velocity (km/h), first close approach
    miss_distance: float  # Miss distance (km), first close approach
    absolute_magnitude: float  # H magnitude
    diameter_avg: float = field(init=False)  # Midpoint of min/max (km)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "diameter_avg", (self.diameter_min + self.diameter_max) / 2
        )


@dataclass(frozen=True)
class Dataset:
    """Observations plus metadata derived from them. Never mutated after construction."""

    observations: tuple[Observation, ...]
    dates: tuple[str, ...]  # Sorted distinct dates
    total_count: int
    hazardous_count: int
    non_hazardous_count: int

    @classmethod
    def from_observations(cls, observations: Iterable[Observation]) -> "Dataset":
        """Build a Dataset whose counts and date set match the observations."""
        items = tuple(observations)
        hazardous = sum(1 for o in items if o.is_hazardous)
        return cls(
            observations=items,
            dates=tuple(sorted({o.date for o in items})),
            total_count=len(items),
            hazardous_count=hazardous,
            non_hazardous_count=len(items) - hazardous,
        )


# --- Dataset state: Unloaded | Loaded(dataset) | Failed(reason) ---


@dataclass(frozen=True)
class Unloaded:
    """No fetch has completed yet."""


@dataclass(frozen=True)
class Loaded:
    dataset: Dataset


@dataclass(frozen=True)
class Failed:
    """The most recent fetch failed."""

    reason: str


DatasetState = Unloaded | Loaded | Failed


@dataclass(frozen=True)
class NoData:
    """Query result when no dataset is loaded. Falsy, so ``if not result`` works."""

    state: Unloaded | Failed

    @property
    def reason(self) -> str | None:
        if isinstance(self.state, Failed):
            return self.state.reason
        return None

    def __bool__(self) -> bool:
        return False


# --- View records ---


@dataclass(frozen=True)
class MetricStats:
    """Summary statistics for one numeric metric.

    ``q1`` and ``q3`` are positional quantiles: the sorted values at index
    ``floor(n * 0.25)`` and ``floor(n * 0.75)``. No interpolation between ranks.
    """

    min: float
    max: float
    mean: float
    median: float
    q1: float
    q3: float


@dataclass(frozen=True)
class DailyCount:
    date: str
    hazardous: int
    non_hazardous: int
    total: int
