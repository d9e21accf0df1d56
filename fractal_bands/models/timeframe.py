"""Timeframe parsing and period normalisation.

A period count can be expressed in a timeframe other than the chart's,
e.g. "20 bars of 1h" on a 15m chart is 80 working bars. Conversions that
land on a half-integer round up; anything else rounds to nearest.
"""

from __future__ import annotations

import math
import re
from decimal import ROUND_FLOOR, Decimal

TIMEFRAME_MINUTES = {
    "1m": 1,
    "3m": 3,
    "5m": 5,
    "15m": 15,
    "30m": 30,
    "1h": 60,
    "4h": 240,
    "1d": 1440,
    "1w": 10080,
}

_UNIT_MINUTES = {"m": 1, "h": 60, "d": 1440, "w": 10080}
_TIMEFRAME_RE = re.compile(r"^(\d+)([mhdw])$")


def timeframe_minutes(timeframe: str) -> int:
    """Return the length of a timeframe in minutes.

    Raises:
        ValueError: If the timeframe is not of the form '<n><m|h|d|w>'.
    """
    if timeframe in TIMEFRAME_MINUTES:
        return TIMEFRAME_MINUTES[timeframe]
    match = _TIMEFRAME_RE.match(timeframe)
    if match is None or int(match.group(1)) == 0:
        raise ValueError(f"Unknown timeframe: {timeframe!r}")
    return int(match.group(1)) * _UNIT_MINUTES[match.group(2)]


def is_half_integer(value: float) -> bool:
    """Check whether a value is exactly n + 0.5.

    Compares the shortest decimal representation, so 2.5 qualifies while
    2.4999999999999996 (a product that merely looks like 2.5) does not.
    """
    d = Decimal(repr(float(value)))
    return d - d.to_integral_value(rounding=ROUND_FLOOR) == Decimal("0.5")


def normalize_periods(
    periods: float,
    source_timeframe: str | None,
    working_timeframe: str,
) -> int:
    """Convert a period count into bars of the working timeframe.

    Args:
        periods: Period count, possibly fractional.
        source_timeframe: Timeframe the count is expressed in, or None when
            it is already in working bars.
        working_timeframe: Timeframe of the price feed.

    Returns:
        Whole number of working bars (may be below 2; callers decide).
    """
    if source_timeframe is None or source_timeframe == working_timeframe:
        raw = float(periods)
    else:
        raw = (
            float(periods)
            * timeframe_minutes(source_timeframe)
            / timeframe_minutes(working_timeframe)
        )
    if is_half_integer(raw):
        return math.floor(raw) + 1
    return int(round(raw))
