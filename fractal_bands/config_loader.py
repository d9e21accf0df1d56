"""Engine configuration loaded from a YAML file.

Example ``indicators.yaml``::

    engines:
      - kind: ma_bands
        periods: 20
        method: ALMA
        deviation_multiplier: 2.0
      - kind: fdi
        periods: 4
        timeframe: 1h
        draw_as_line: true

A missing file falls back to one default engine of each kind.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Union

import yaml
from pydantic import BaseModel, Field

from fractal_bands.engines import create_engine
from fractal_bands.engines.protocol import IndicatorEngine
from fractal_bands.models.bars import PriceFeed
from fractal_bands.models.config import FractalConfig, MovingAverageConfig

logger = logging.getLogger(__name__)

EngineEntry = Annotated[
    Union[MovingAverageConfig, FractalConfig],
    Field(discriminator="kind"),
]


class IndicatorFileConfig(BaseModel):
    """Top-level indicators.yaml configuration."""

    engines: list[EngineEntry] = Field(
        default_factory=lambda: [MovingAverageConfig(), FractalConfig()]
    )

    def build_engines(self, feed: PriceFeed) -> list[IndicatorEngine]:
        """Create and initialize one engine per entry, all reading ``feed``."""
        engines = []
        for entry in self.engines:
            engine = create_engine(entry.kind, feed=feed)
            engine.init(entry)
            engines.append(engine)
        return engines


def load_indicator_config(
    path: Path | str | None = None,
    default_max_visible: int | None = None,
) -> IndicatorFileConfig:
    """Load engine configuration from YAML.

    Args:
        path: YAML file; None or a missing file yields the defaults.
        default_max_visible: Applied to entries that omit ``max_visible``.

    Raises:
        pydantic.ValidationError: If an entry is invalid.
    """
    config_path = Path(path) if path is not None else None
    if config_path is None or not config_path.exists():
        if config_path is not None:
            logger.info("No config at %s, using default engines", config_path)
        raw: dict = {}
    else:
        with open(config_path) as f:
            raw = yaml.safe_load(f) or {}
        logger.info("Loaded indicator config from %s", config_path)

    if not raw.get("engines"):
        raw["engines"] = [{"kind": "ma_bands"}, {"kind": "fdi"}]
    if default_max_visible is not None:
        for entry in raw["engines"]:
            entry.setdefault("max_visible", default_max_visible)

    return IndicatorFileConfig(**raw)
