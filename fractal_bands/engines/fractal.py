"""Fractal Dimension Index engine with ranging/trending lines.

Outputs per bar:
- main     = FDI of the ``periods + 1`` closes ending at the bar
- ranging  = FDI when above 1.5, otherwise empty
- trending = FDI when at or below 1.5, otherwise empty

When drawn as a line, a change of class between a bar and its older
neighbor also writes the neighbor's value into the new class's line at the
neighbor's offset, so the two lines meet without a gap.
"""

from __future__ import annotations

import logging

from fractal_bands.engines.base import BufferedEngine
from fractal_bands.engines.registry import register_engine
from fractal_bands.indicators.fractal import RANGING, TRENDING, classify_fdi, fractal_dimension
from fractal_bands.models.bars import AppliedPrice
from fractal_bands.models.config import FractalConfig
from fractal_bands.models.result import InvariantViolationError

logger = logging.getLogger(__name__)

FDI_ENGINE_NAME = "fdi"

_OPPOSITE = {RANGING: TRENDING, TRENDING: RANGING}


@register_engine(FDI_ENGINE_NAME)
class FractalDimensionEngine(BufferedEngine):
    """Incremental FDI engine."""

    NAME = FDI_ENGINE_NAME
    BUFFER_NAMES = ("main", RANGING, TRENDING)
    CONFIG_MODEL = FractalConfig

    @property
    def window_size(self) -> int:
        # One extra close as the trailing endpoint of the oldest difference
        return self._periods + 1

    def compute_bar(self, bar: int) -> None:
        config: FractalConfig = self._require_config()
        window = self._feed.prices(AppliedPrice.CLOSE, bar, self._periods + 1)
        main = self._buffers["main"]

        try:
            fdi = fractal_dimension(window, self._feed.digits)
        except InvariantViolationError as exc:
            exc.bar = bar
            raise

        if fdi is None:
            # Flat window: no new information, carry the older value forward
            fdi = main.get(bar + 1, config.seed_fdi)

        cls = classify_fdi(fdi)
        main[bar] = fdi
        self._buffers[cls][bar] = fdi
        self._buffers[_OPPOSITE[cls]][bar] = None

        if config.draw_as_line:
            self._join_older(bar, cls)

    def _join_older(self, bar: int, cls: str) -> None:
        """Connect the line of ``cls`` to the already computed bar + 1."""
        older = bar + 1
        previous = self._buffers["main"].get(older)
        if previous is None:
            return
        if classify_fdi(previous) != cls:
            self._buffers[cls][older] = previous
        else:
            self._buffers[_OPPOSITE[cls]][older] = None
