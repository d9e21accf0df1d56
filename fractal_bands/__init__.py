"""Incremental indicator engines for offset-indexed price bars.

This package contains pure computation with no I/O beyond an optional
YAML config and CSV replay. Bars are addressed by offset from the newest
bar; engines recompute only the bars a host reports as changed.
"""

from fractal_bands.buffers import OutputBuffer, TimeSeriesBufferSet
from fractal_bands.engines import (
    BufferedEngine,
    FractalDimensionEngine,
    IndicatorEngine,
    MovingAverageBandsEngine,
    create_engine,
    list_engines,
)
from fractal_bands.models import (
    AppliedPrice,
    Bar,
    BarSeries,
    FractalConfig,
    InvariantViolationError,
    MaMethod,
    MovingAverageConfig,
    Status,
    TickNotification,
    UpdateResult,
)
from fractal_bands.planner import InvalidationPlanner, RecomputeRange

__all__ = [
    "OutputBuffer",
    "TimeSeriesBufferSet",
    "BufferedEngine",
    "FractalDimensionEngine",
    "IndicatorEngine",
    "MovingAverageBandsEngine",
    "create_engine",
    "list_engines",
    "AppliedPrice",
    "Bar",
    "BarSeries",
    "FractalConfig",
    "InvariantViolationError",
    "MaMethod",
    "MovingAverageConfig",
    "Status",
    "TickNotification",
    "UpdateResult",
    "InvalidationPlanner",
    "RecomputeRange",
]
