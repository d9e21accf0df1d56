"""Bar data, price feeds and host update notifications.

Bars are addressed by offset from the newest bar: offset 0 is the most
recent bar, larger offsets are older. A new bar pushes every older bar one
offset further back ("shift").

These models use:
- @dataclass(slots=True) for minimal memory footprint
- float instead of Decimal for fast arithmetic
- Unix timestamps (float) instead of datetime objects
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Protocol, runtime_checkable

import numpy as np

logger = logging.getLogger(__name__)


class AppliedPrice(str, Enum):
    """Which price of a bar an indicator reads."""

    CLOSE = "close"
    OPEN = "open"
    HIGH = "high"
    LOW = "low"
    MEDIAN = "median"  # (high + low) / 2
    TYPICAL = "typical"  # (high + low + close) / 3
    WEIGHTED = "weighted"  # (high + low + 2 * close) / 4


@dataclass(slots=True)
class Bar:
    """One OHLC bar."""

    timestamp: float  # Unix timestamp in seconds
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0

    def price(self, applied: AppliedPrice) -> float:
        """Resolve an applied price for this bar."""
        return float(_combine(applied, self.open, self.high, self.low, self.close))


@dataclass(slots=True, frozen=True)
class TickNotification:
    """What changed in the price series since the previous update cycle.

    Attributes:
        changed_bars: Number of most-recent bars that are new or modified.
        total_bars: Current number of bars in the series.
        shifted_bars: Number of new bars that pushed older bars back.
        is_full_recalculation: Whole history must be recomputed (reload,
            history inserted at the old end, first delivery).
    """

    changed_bars: int
    total_bars: int
    shifted_bars: int = 0
    is_full_recalculation: bool = False


@runtime_checkable
class PriceFeed(Protocol):
    """Read-only, offset-indexed price source consumed by the engines."""

    @property
    def timeframe(self) -> str:
        """Working timeframe of one bar (e.g. '5m')."""
        ...

    @property
    def digits(self) -> int | None:
        """Instrument price precision, or None for unrounded prices."""
        ...

    def __len__(self) -> int:
        ...

    def prices(self, applied: AppliedPrice, start: int, count: int) -> np.ndarray:
        """Return ``count`` prices from offset ``start`` going back in time.

        Index 0 of the result is offset ``start`` (the newest requested bar).

        Raises:
            IndexError: If the window reaches past the oldest bar.
        """
        ...


def _combine(applied: AppliedPrice, o, h, l, c):
    """Combine OHLC values (floats or arrays) into an applied price."""
    if applied == AppliedPrice.CLOSE:
        return c
    if applied == AppliedPrice.OPEN:
        return o
    if applied == AppliedPrice.HIGH:
        return h
    if applied == AppliedPrice.LOW:
        return l
    if applied == AppliedPrice.MEDIAN:
        return (h + l) / 2
    if applied == AppliedPrice.TYPICAL:
        return (h + l + c) / 3
    return (h + l + 2 * c) / 4


class BarSeries:
    """In-memory bar history that doubles as the host of the engines.

    Bars are stored oldest first. Every mutation is accumulated into a
    pending ``TickNotification`` that ``drain_notification()`` hands out once
    per update cycle, the way a charting host reports changes to its
    indicators.
    """

    def __init__(
        self,
        timeframe: str = "5m",
        digits: int | None = None,
        max_size: int | None = None,
    ):
        if max_size is not None and max_size < 1:
            raise ValueError(f"max_size must be positive, got {max_size}")
        self._timeframe = timeframe
        self._digits = digits
        self.max_size = max_size
        self._bars: list[Bar] = []

        self._pending_changed = 0
        self._pending_shifted = 0
        self._pending_full = True

    @property
    def timeframe(self) -> str:
        return self._timeframe

    @property
    def digits(self) -> int | None:
        return self._digits

    def __len__(self) -> int:
        return len(self._bars)

    def __getitem__(self, offset: int) -> Bar:
        if offset < 0 or offset >= len(self._bars):
            raise IndexError(f"bar offset {offset} out of range (0..{len(self._bars) - 1})")
        return self._bars[-1 - offset]

    @property
    def newest(self) -> Bar | None:
        return self._bars[-1] if self._bars else None

    # ------------------------------------------------------------------
    # Mutation (host side)
    # ------------------------------------------------------------------

    def add(self, bar: Bar) -> None:
        """Add a bar, updating the newest bar when the timestamp matches."""
        newest = self.newest
        if newest is not None and bar.timestamp <= newest.timestamp:
            if bar.timestamp == newest.timestamp:
                self._bars[-1] = bar
                self._pending_changed = max(self._pending_changed, 1)
            else:
                logger.debug(
                    "Ignoring stale bar at %s (newest is %s)",
                    bar.timestamp,
                    newest.timestamp,
                )
            return

        self._bars.append(bar)
        self._pending_shifted += 1
        self._pending_changed += 1
        self._trim()

    def load_history(self, bars: Iterable[Bar]) -> int:
        """Insert bars older than the current oldest bar.

        Offsets of existing bars do not move, but every output becomes
        suspect, so the next notification asks for a full recalculation.

        Returns:
            Number of bars inserted.
        """
        oldest = self._bars[0].timestamp if self._bars else None
        older = sorted(
            (b for b in bars if oldest is None or b.timestamp < oldest),
            key=lambda b: b.timestamp,
        )
        if not older:
            return 0
        self._bars[:0] = older
        self._pending_full = True
        self._trim()
        return len(older)

    def replace(self, bars: Iterable[Bar]) -> None:
        """Reload the whole history."""
        self._bars = sorted(bars, key=lambda b: b.timestamp)
        self._pending_full = True
        self._trim()

    def _trim(self) -> None:
        if self.max_size is not None and len(self._bars) > self.max_size:
            self._bars = self._bars[-self.max_size :]

    def drain_notification(self) -> TickNotification:
        """Return everything that changed since the last call and clear it."""
        total = len(self._bars)
        if self._pending_full:
            note = TickNotification(
                changed_bars=total,
                total_bars=total,
                shifted_bars=0,
                is_full_recalculation=True,
            )
        else:
            note = TickNotification(
                changed_bars=min(self._pending_changed, total),
                total_bars=total,
                shifted_bars=self._pending_shifted,
            )
        self._pending_changed = 0
        self._pending_shifted = 0
        self._pending_full = False
        return note

    # ------------------------------------------------------------------
    # PriceFeed
    # ------------------------------------------------------------------

    def prices(self, applied: AppliedPrice, start: int, count: int) -> np.ndarray:
        """Return ``count`` prices from offset ``start`` going back in time."""
        n = len(self._bars)
        if start < 0 or count < 0 or start + count > n:
            raise IndexError(
                f"price window {start}..{start + count - 1} out of range for {n} bars"
            )
        window = self._bars[n - start - count : n - start][::-1]
        o = np.fromiter((b.open for b in window), dtype=np.float64, count=count)
        h = np.fromiter((b.high for b in window), dtype=np.float64, count=count)
        l = np.fromiter((b.low for b in window), dtype=np.float64, count=count)
        c = np.fromiter((b.close for b in window), dtype=np.float64, count=count)
        return _combine(applied, o, h, l, c)
