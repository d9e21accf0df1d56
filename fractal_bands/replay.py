"""Bar replay: drive engines the way a charting host would.

Bars are pushed into a ``BarSeries`` one at a time; after each push the
accumulated change notification is delivered to every engine, so the
engines see exactly the incremental updates they would get live.
"""

from __future__ import annotations

import csv
import logging
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from fractal_bands.engines.protocol import IndicatorEngine
from fractal_bands.models.bars import Bar, BarSeries
from fractal_bands.models.result import Status, UpdateResult

logger = logging.getLogger(__name__)

# Progress log interval during replay (every N bars)
PROGRESS_INTERVAL = 1000


def load_bars_csv(path: Path | str) -> list[Bar]:
    """Read bars from a CSV file with a header row.

    Required columns: timestamp, open, high, low, close. ``volume`` is
    optional. Rows are returned oldest first.

    Raises:
        ValueError: If a required column is missing or a value is not numeric.
    """
    required = ("timestamp", "open", "high", "low", "close")
    bars: list[Bar] = []
    with open(path, newline="") as f:
        reader = csv.DictReader(f)
        missing = [c for c in required if c not in (reader.fieldnames or [])]
        if missing:
            raise ValueError(f"{path}: missing columns {missing}")
        for line_no, row in enumerate(reader, start=2):
            try:
                bars.append(
                    Bar(
                        timestamp=float(row["timestamp"]),
                        open=float(row["open"]),
                        high=float(row["high"]),
                        low=float(row["low"]),
                        close=float(row["close"]),
                        volume=float(row.get("volume") or 0.0),
                    )
                )
            except (TypeError, ValueError) as exc:
                raise ValueError(f"{path}:{line_no}: {exc}") from exc
    bars.sort(key=lambda b: b.timestamp)
    return bars


@dataclass
class ReplaySummary:
    """Per-engine status counts and faults collected during a replay."""

    cycles: int = 0
    statuses: dict[str, Counter] = field(default_factory=dict)
    faults: list[tuple[str, UpdateResult]] = field(default_factory=list)

    def record(self, engine_name: str, result: UpdateResult) -> None:
        self.statuses.setdefault(engine_name, Counter())[result.status] += 1
        if result.status == Status.INVARIANT_VIOLATION:
            self.faults.append((engine_name, result))


def engine_labels(engines: list[IndicatorEngine]) -> list[str]:
    """Engine names, suffixed with #2, #3... when a name repeats."""
    seen: Counter = Counter()
    labels = []
    for engine in engines:
        seen[engine.name] += 1
        count = seen[engine.name]
        labels.append(engine.name if count == 1 else f"{engine.name}#{count}")
    return labels


class ReplayRunner:
    """Feed bars into a series and update every engine after each change.

    Results are keyed by engine label (see ``engine_labels``).
    """

    def __init__(self, series: BarSeries, engines: Iterable[IndicatorEngine]):
        self.series = series
        self.engines = list(engines)
        self.labels = engine_labels(self.engines)
        self.summary = ReplaySummary()

    def notify(self) -> dict[str, UpdateResult]:
        """Deliver the pending notification to every engine."""
        note = self.series.drain_notification()
        results = {}
        for label, engine in zip(self.labels, self.engines):
            result = engine.on_update(note)
            self.summary.record(label, result)
            results[label] = result
        self.summary.cycles += 1
        return results

    def load_history(self, bars: Iterable[Bar]) -> dict[str, UpdateResult]:
        """Load a block of history in one full-recalculation cycle."""
        self.series.replace(bars)
        return self.notify()

    def push(self, bar: Bar) -> dict[str, UpdateResult]:
        """Add one bar (or update the newest) and run one cycle."""
        self.series.add(bar)
        return self.notify()

    def run(self, bars: Iterable[Bar]) -> ReplaySummary:
        """Push bars one by one."""
        for i, bar in enumerate(bars, start=1):
            self.push(bar)
            if i % PROGRESS_INTERVAL == 0:
                logger.info("Replayed %d bars (%d in series)", i, len(self.series))
        if self.summary.faults:
            logger.warning("Replay finished with %d faults", len(self.summary.faults))
        return self.summary
