"""CLI entry point: fetch the NeoWs feed and print a dataset summary.

    uv run python -m neoviews.summary [START_DATE [END_DATE]]

Dates default to the workshop window (2024-01-01 .. 2024-01-08).
"""

import logging
import os
import sys

from dotenv import load_dotenv

load_dotenv()

from neoviews.fetch import (  # noqa: E402
    DEFAULT_END_DATE,
    DEFAULT_START_DATE,
    FeedError,
    refresh,
)
from neoviews.models import Dataset, Loaded, NoData  # noqa: E402
from neoviews.views import AsteroidDataset  # noqa: E402


def format_summary(store: AsteroidDataset) -> str:
    """Render the loaded dataset as plain text lines."""
    snap = store.snapshot()
    if isinstance(snap, NoData):
        return f"No data loaded ({snap.reason or 'not fetched yet'})"
    # Every query below runs against this one snapshot.
    pinned = AsteroidDataset(Loaded(snap))
    lines = [
        f"Total asteroids: {snap.total_count}",
        f"Hazardous: {snap.hazardous_count}, Non-hazardous: {snap.non_hazardous_count}",
        "",
        "date        hazardous  non_hazardous  total",
    ]
    for day in pinned.daily_counts():
        lines.append(
            f"{day.date}  {day.hazardous:>9}  {day.non_hazardous:>13}  {day.total:>5}"
        )
    if snap.total_count:
        v = pinned.stats("velocity")
        lines += [
            "",
            "velocity (km/h): "
            f"min={v.min:,.0f} q1={v.q1:,.0f} median={v.median:,.0f} "
            f"q3={v.q3:,.0f} max={v.max:,.0f} mean={v.mean:,.0f}",
        ]
        fastest = pinned.top_n("velocity", 1)[0]
        lines.append(f"fastest: {fastest.name} ({fastest.velocity:,.0f} km/h)")
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    start_date = args[0] if len(args) > 0 else DEFAULT_START_DATE
    end_date = args[1] if len(args) > 1 else DEFAULT_END_DATE

    logging.basicConfig(
        level=os.environ.get("NEOVIEWS_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    store = AsteroidDataset()
    try:
        dataset: Dataset = refresh(store, start_date, end_date)
    except (FeedError, ValueError) as e:
        print(f"Failed to load asteroid data: {e}", file=sys.stderr)
        return 1
    print(f"Loaded {start_date} .. {end_date} ({len(dataset.dates)} days)")
    print(format_summary(store))
    return 0


if __name__ == "__main__":
    sys.exit(main())
