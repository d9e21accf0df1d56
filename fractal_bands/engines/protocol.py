"""Engine protocol defining the interface every indicator engine implements.

This module provides:
- IndicatorEngine: Runtime-checkable Protocol that engines must satisfy
- EngineFactory: Callable that builds an engine for a price feed
"""

from __future__ import annotations

from typing import Callable, Protocol, runtime_checkable

from fractal_bands.buffers import TimeSeriesBufferSet
from fractal_bands.models.bars import PriceFeed, TickNotification
from fractal_bands.models.config import EngineConfig
from fractal_bands.models.result import UpdateResult


@runtime_checkable
class IndicatorEngine(Protocol):
    """Protocol that all indicator engines must implement.

    Engines are responsible for:
    1. Owning their output buffers and keeping them aligned with the feed
    2. Recomputing only the bars invalidated since the previous cycle
    3. Reporting each cycle's outcome as an ``UpdateResult``
    """

    @property
    def name(self) -> str:
        """Registered engine name (e.g. 'ma_bands')."""
        ...

    @property
    def buffers(self) -> TimeSeriesBufferSet:
        """Output buffers, newest bar at offset 0."""
        ...

    @property
    def window_size(self) -> int:
        """Bars read per output value (minimum history)."""
        ...

    def init(self, config: EngineConfig) -> None:
        """Attach a configuration; buffers are sized on the next update."""
        ...

    def on_update(self, notification: TickNotification) -> UpdateResult:
        """Process one host notification."""
        ...

    def reconfigure(self, config: EngineConfig) -> None:
        """Swap in a new configuration and force a full recompute."""
        ...

    def teardown(self) -> None:
        """Release buffers; the engine needs ``init`` again afterwards."""
        ...


EngineFactory = Callable[[PriceFeed], IndicatorEngine]
