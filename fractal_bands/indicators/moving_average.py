"""Moving averages and deviations over a single price window.

All functions take a window ordered newest first (index 0 is the bar being
computed, the last element is the oldest bar in the window), so a value
depends only on its own window and can be recomputed in any order.
"""

import math

import numpy as np

from fractal_bands.models.config import MaMethod


def _ema(window: np.ndarray) -> float:
    """EMA seeded with the oldest price and folded towards the newest."""
    alpha = 2.0 / (len(window) + 1)
    value = float(window[-1])
    for price in window[-2::-1]:
        value = alpha * float(price) + (1 - alpha) * value
    return value


def _lwma(window: np.ndarray) -> float:
    """Linearly weighted: newest bar weight n, oldest weight 1."""
    n = len(window)
    weights = np.arange(n, 0, -1, dtype=np.float64)
    return float(np.dot(weights, window) / (n * (n + 1) / 2))


def windowed_moving_average(window: np.ndarray, method: MaMethod) -> float:
    """
    Calculate a moving average over one window.

    ALMA needs precomputed weights; use ``alma_weights`` and ``alma`` instead.

    Args:
        window: Prices, newest first
        method: SMA, EMA or LWMA

    Returns:
        Moving average value at the newest bar of the window
    """
    if len(window) == 0:
        raise ValueError("Empty window")
    if method == MaMethod.SMA:
        return float(np.mean(window))
    if method == MaMethod.EMA:
        return _ema(window)
    if method == MaMethod.LWMA:
        return _lwma(window)
    raise ValueError(f"{method.value} is not a plain windowed average")


def windowed_std_dev(
    window: np.ndarray,
    method: MaMethod,
    ma: float | None = None,
) -> float:
    """
    Calculate the sample standard deviation of a window about its average.

    For SMA this is the ordinary sample standard deviation; for EMA and
    LWMA the residuals are taken against that method's average.

    Args:
        window: Prices, newest first (at least 2)
        method: SMA, EMA or LWMA
        ma: Average already computed for this window, if available

    Returns:
        sqrt(sum((price - ma)^2) / (n - 1))
    """
    n = len(window)
    if n < 2:
        raise ValueError("Standard deviation needs at least 2 prices")
    if ma is None:
        ma = windowed_moving_average(window, method)
    residuals = window - ma
    return math.sqrt(float(np.dot(residuals, residuals)) / (n - 1))


def alma_weights(periods: int, offset: float = 0.85, sigma: float = 6.0) -> np.ndarray:
    """
    Calculate normalised Gaussian ALMA weights, newest bar first.

    The kernel peaks ``offset`` of the way from the oldest to the newest bar
    (0.85 leans towards recent prices) with width ``periods / sigma``.

    Args:
        periods: Window length (>= 1)
        offset: Peak position in [0, 1]
        sigma: Kernel sharpness (> 0)

    Returns:
        Array of ``periods`` weights summing to 1
    """
    if periods < 1:
        raise ValueError(f"ALMA periods must be >= 1, got {periods}")
    if sigma <= 0:
        raise ValueError(f"ALMA sigma must be > 0, got {sigma}")
    m = (1.0 - offset) * (periods - 1)
    s = periods / sigma
    i = np.arange(periods, dtype=np.float64)
    weights = np.exp(-((i - m) ** 2) / (2.0 * s * s))
    return weights / weights.sum()


def alma(window: np.ndarray, weights: np.ndarray) -> float:
    """Weighted sum of a window with ALMA weights (both newest first)."""
    if len(window) != len(weights):
        raise ValueError(
            f"Window length {len(window)} does not match {len(weights)} weights"
        )
    return float(np.dot(weights, window))


def alma_deviation(window: np.ndarray, ma: float) -> float:
    """
    Calculate the ALMA band deviation.

    Squared residuals against the *weighted* ALMA value are averaged with
    equal weights over the window, dividing by n. This pairing is part of
    the indicator's definition and is kept as is.

    Args:
        window: Prices, newest first
        ma: ALMA value for the window

    Returns:
        sqrt(sum((price - ma)^2) / n)
    """
    residuals = window - ma
    return math.sqrt(float(np.dot(residuals, residuals)) / len(window))
