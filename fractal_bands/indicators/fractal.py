"""Fractal Dimension Index (Sevcik estimate, Matulich variant).

The window of ``periods + 1`` closes is normalised to a unit square: price
differences are divided by the window range and time steps are 1/periods.
The curve length over that square gives

    fdi = 1 + (ln(length) + ln 2) / ln(2 * periods)

which is near 1 for a straight trend and near 2 for a series that keeps
reversing across its whole range.
"""

from __future__ import annotations

import math

import numpy as np

from fractal_bands.models.config import FDI_THRESHOLD
from fractal_bands.models.result import InvariantViolationError

RANGING = "ranging"
TRENDING = "trending"


def fractal_dimension(window: np.ndarray, digits: int | None = None) -> float | None:
    """
    Calculate the FDI of one window.

    Args:
        window: ``periods + 1`` close prices, newest first
        digits: Instrument precision the range is rounded to (None = exact)

    Returns:
        FDI in [1, 2], or None when the window is flat (range 0)

    Raises:
        InvariantViolationError: If the estimate falls outside [1, 2]
    """
    periods = len(window) - 1
    if periods < 2:
        raise ValueError(f"FDI needs at least 3 prices, got {len(window)}")

    price_range = float(np.max(window) - np.min(window))
    if digits is not None:
        price_range = round(price_range, digits)
    if price_range <= 0:
        return None

    diffs = np.diff(window) / price_range
    length = float(np.sum(np.sqrt(diffs * diffs + 1.0 / (periods * periods))))
    fdi = 1.0 + (math.log(length) + math.log(2.0)) / math.log(2.0 * periods)

    if not 1.0 <= fdi <= 2.0:
        raise InvariantViolationError(
            f"FDI {fdi:.6f} outside [1, 2] (periods={periods}, length={length:.6f})",
            value=fdi,
        )
    return fdi


def classify_fdi(fdi: float) -> str:
    """Return RANGING above the 1.5 threshold, TRENDING at or below it."""
    return RANGING if fdi > FDI_THRESHOLD else TRENDING
