"""Indicator engines.

Public API:
- IndicatorEngine: Protocol that all engines implement
- BufferedEngine: Base class with the shared update cycle
- register_engine / create_engine / list_engines / get_engine_class

Importing this package auto-registers the built-in engines.
"""

from fractal_bands.engines.protocol import EngineFactory, IndicatorEngine
from fractal_bands.engines.registry import (
    create_engine,
    get_engine_class,
    list_engines,
    register_engine,
)
from fractal_bands.engines.base import BufferedEngine
from fractal_bands.engines.moving_average import (
    MA_BANDS_ENGINE_NAME,
    MovingAverageBandsEngine,
)
from fractal_bands.engines.fractal import FDI_ENGINE_NAME, FractalDimensionEngine

__all__ = [
    "EngineFactory",
    "IndicatorEngine",
    "BufferedEngine",
    "create_engine",
    "get_engine_class",
    "list_engines",
    "register_engine",
    "MA_BANDS_ENGINE_NAME",
    "MovingAverageBandsEngine",
    "FDI_ENGINE_NAME",
    "FractalDimensionEngine",
]
