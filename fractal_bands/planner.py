"""Turn a change notification into the range of bars to recompute.

Every indicator here reads only bars at the same or older offsets, so the
range is always ``[0, start_bar]`` and is walked from ``start_bar`` (oldest
invalidated bar) down to 0 (newest bar) in a single pass.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator

from fractal_bands.models.config import UNBOUNDED

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecomputeRange:
    """Inclusive offset range ``[0, start_bar]``."""

    start_bar: int

    def __len__(self) -> int:
        return self.start_bar + 1

    def bars(self) -> Iterator[int]:
        """Offsets from oldest to newest."""
        return iter(range(self.start_bar, -1, -1))


class InvalidationPlanner:
    """Plan recomputation with an optional per-cycle cap.

    Parameters
    ----------
    max_visible : int
        Upper bound on bars recomputed per cycle, however many the host
        reports changed. ``UNBOUNDED`` (-1) disables the cap.
    """

    def __init__(self, max_visible: int = UNBOUNDED):
        if max_visible < UNBOUNDED or max_visible == 0:
            raise ValueError(f"max_visible must be -1 or positive, got {max_visible}")
        self.max_visible = max_visible

    def plan(
        self,
        changed_bars: int,
        total_bars: int,
        window_size: int,
    ) -> RecomputeRange | None:
        """Return the range to recompute, or None when history is too short.

        Args:
            changed_bars: Most-recent bars the source reports new or modified.
            total_bars: Bars currently in the series.
            window_size: Bars the algorithm reads per output value.
        """
        effective = changed_bars
        if self.max_visible != UNBOUNDED:
            effective = min(changed_bars, self.max_visible)

        start_bar = min(effective - 1, total_bars - window_size)
        if start_bar < 0:
            logger.debug(
                "Insufficient history: changed=%d total=%d window=%d",
                changed_bars,
                total_bars,
                window_size,
            )
            return None
        return RecomputeRange(start_bar)
