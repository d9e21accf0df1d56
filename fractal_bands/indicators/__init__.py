"""Indicator math over single windows (pure functions, no state)."""

from fractal_bands.indicators.fractal import (
    RANGING,
    TRENDING,
    classify_fdi,
    fractal_dimension,
)
from fractal_bands.indicators.moving_average import (
    alma,
    alma_deviation,
    alma_weights,
    windowed_moving_average,
    windowed_std_dev,
)

__all__ = [
    "RANGING",
    "TRENDING",
    "classify_fdi",
    "fractal_dimension",
    "alma",
    "alma_deviation",
    "alma_weights",
    "windowed_moving_average",
    "windowed_std_dev",
]
