"""Data models shared by buffers, planner and engines."""

from fractal_bands.models.bars import (
    AppliedPrice,
    Bar,
    BarSeries,
    PriceFeed,
    TickNotification,
)
from fractal_bands.models.config import (
    FDI_THRESHOLD,
    UNBOUNDED,
    EngineConfig,
    FractalConfig,
    MaMethod,
    MovingAverageConfig,
)
from fractal_bands.models.result import (
    InvariantViolationError,
    Status,
    UpdateResult,
)
from fractal_bands.models.timeframe import (
    TIMEFRAME_MINUTES,
    is_half_integer,
    normalize_periods,
    timeframe_minutes,
)

__all__ = [
    "AppliedPrice",
    "Bar",
    "BarSeries",
    "PriceFeed",
    "TickNotification",
    "FDI_THRESHOLD",
    "UNBOUNDED",
    "EngineConfig",
    "FractalConfig",
    "MaMethod",
    "MovingAverageConfig",
    "InvariantViolationError",
    "Status",
    "UpdateResult",
    "TIMEFRAME_MINUTES",
    "is_half_integer",
    "normalize_periods",
    "timeframe_minutes",
]
