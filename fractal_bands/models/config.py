"""Indicator configuration models.

Configurations are validated here, before any engine sees them, so the
engines can trust every value they receive.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from fractal_bands.models.bars import AppliedPrice
from fractal_bands.models.timeframe import timeframe_minutes

# Sentinel for "no cap on bars recomputed per cycle"
UNBOUNDED = -1

# FDI above this value is "ranging", at or below it "trending"
FDI_THRESHOLD = 1.5


class MaMethod(str, Enum):
    """Moving average method."""

    SMA = "SMA"
    EMA = "EMA"
    LWMA = "LWMA"
    ALMA = "ALMA"


class EngineConfig(BaseModel):
    """Parameters shared by every engine."""

    model_config = ConfigDict(frozen=True)

    # Period count, in bars of ``timeframe`` (or working bars when None)
    periods: float = 20
    timeframe: str | None = None

    # Cap on bars recomputed per cycle (-1 = unbounded)
    max_visible: int = Field(default=UNBOUNDED, ge=UNBOUNDED)

    @model_validator(mode="after")
    def _validate_periods(self):
        if self.timeframe is None:
            if self.periods != int(self.periods):
                raise ValueError(
                    f"periods must be a whole number without a timeframe, got {self.periods}"
                )
            if self.periods < 2:
                raise ValueError(f"periods must be >= 2, got {self.periods}")
        else:
            timeframe_minutes(self.timeframe)
            if self.periods <= 0:
                raise ValueError(f"periods must be positive, got {self.periods}")
        if self.max_visible == 0:
            raise ValueError("max_visible must be -1 (unbounded) or a positive count")
        return self


class MovingAverageConfig(EngineConfig):
    """Moving average with symmetric standard-deviation bands."""

    kind: Literal["ma_bands"] = "ma_bands"

    method: MaMethod = MaMethod.SMA
    applied_price: AppliedPrice = AppliedPrice.CLOSE
    deviation_multiplier: float = Field(default=2.0, ge=0.0)

    # ALMA kernel: peak position (0 = oldest bar, 1 = newest) and width
    alma_offset: float = Field(default=0.85, ge=0.0, le=1.0)
    alma_sigma: float = Field(default=6.0, gt=0.0)


class FractalConfig(EngineConfig):
    """Fractal Dimension Index with ranging/trending classification."""

    kind: Literal["fdi"] = "fdi"

    periods: float = 30
    draw_as_line: bool = True

    # Carried forward when a flat window has no computed older neighbor
    seed_fdi: float = Field(default=FDI_THRESHOLD, ge=1.0, le=2.0)
