"""Moving average with standard-deviation bands.

Outputs per bar:
- main  = moving average (SMA, EMA, LWMA or ALMA) of the applied price
- upper = main + deviation * multiplier
- lower = main - deviation * multiplier

SMA/EMA/LWMA bands use the sample standard deviation about the average.
ALMA bands use the population deviation about the weighted ALMA value.
"""

from __future__ import annotations

import logging

import numpy as np

from fractal_bands.engines.base import BufferedEngine
from fractal_bands.engines.registry import register_engine
from fractal_bands.indicators.moving_average import (
    alma,
    alma_deviation,
    alma_weights,
    windowed_moving_average,
    windowed_std_dev,
)
from fractal_bands.models.bars import PriceFeed
from fractal_bands.models.config import MaMethod, MovingAverageConfig

logger = logging.getLogger(__name__)

MA_BANDS_ENGINE_NAME = "ma_bands"


@register_engine(MA_BANDS_ENGINE_NAME)
class MovingAverageBandsEngine(BufferedEngine):
    """Incremental moving average band engine."""

    NAME = MA_BANDS_ENGINE_NAME
    BUFFER_NAMES = ("upper", "main", "lower")
    CONFIG_MODEL = MovingAverageConfig

    def __init__(self, feed: PriceFeed):
        super().__init__(feed)
        self._weights: np.ndarray | None = None
        self._weights_key: tuple[int, float, float] | None = None

    @property
    def weights(self) -> np.ndarray | None:
        """Cached ALMA weights (newest bar first), None for other methods."""
        return self._weights

    def _configure(self, config: MovingAverageConfig) -> None:
        if config.method != MaMethod.ALMA or self._periods < 1:
            self._weights = None
            self._weights_key = None
            return
        key = (self._periods, config.alma_offset, config.alma_sigma)
        if key != self._weights_key:
            self._weights = alma_weights(self._periods, config.alma_offset, config.alma_sigma)
            self._weights_key = key
            logger.debug("ALMA weights recomputed for %d periods", self._periods)

    def compute_bar(self, bar: int) -> None:
        config: MovingAverageConfig = self._require_config()
        window = self._feed.prices(config.applied_price, bar, self._periods)

        if config.method == MaMethod.ALMA:
            ma = alma(window, self._weights)
            dev = alma_deviation(window, ma) if config.deviation_multiplier else 0.0
        else:
            ma = windowed_moving_average(window, config.method)
            dev = (
                windowed_std_dev(window, config.method, ma)
                if config.deviation_multiplier
                else 0.0
            )
        dev *= config.deviation_multiplier

        self._buffers["main"][bar] = ma
        self._buffers["upper"][bar] = ma + dev
        self._buffers["lower"][bar] = ma - dev
