"""Shared update cycle for buffered indicator engines.

One cycle, driven by a single host notification:

1. Not initialized, or no bars yet -> NOT_READY.
2. First cycle, new configuration or full reload -> reset every buffer and
   treat the whole series as changed. Otherwise shift the buffers by the
   number of new bars and align their length with the series.
3. Plan the recompute range; too little history -> INSUFFICIENT_HISTORY.
4. Compute bars from the oldest invalidated offset down to 0. An invariant
   violation stops the pass; bars already written stay valid.

This module is pure business logic with no I/O dependencies.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from fractal_bands.buffers import TimeSeriesBufferSet
from fractal_bands.models.bars import PriceFeed, TickNotification
from fractal_bands.models.config import EngineConfig
from fractal_bands.models.result import InvariantViolationError, Status, UpdateResult
from fractal_bands.models.timeframe import normalize_periods
from fractal_bands.planner import InvalidationPlanner

logger = logging.getLogger(__name__)


class BufferedEngine(ABC):
    """Base class owning the buffers, planner and lifecycle of one engine."""

    NAME: str = ""
    BUFFER_NAMES: tuple[str, ...] = ()
    CONFIG_MODEL: type[EngineConfig] = EngineConfig

    def __init__(self, feed: PriceFeed):
        self._feed = feed
        self._buffers = TimeSeriesBufferSet(self.BUFFER_NAMES)
        self._config: EngineConfig | None = None
        self._planner: InvalidationPlanner | None = None
        self._periods = 0
        self._needs_reset = True

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self.NAME

    @property
    def buffers(self) -> TimeSeriesBufferSet:
        return self._buffers

    @property
    def feed(self) -> PriceFeed:
        return self._feed

    @property
    def config(self) -> EngineConfig | None:
        return self._config

    @property
    def periods(self) -> int:
        """Period count in working bars after timeframe normalisation."""
        return self._periods

    @property
    def is_initialized(self) -> bool:
        return self._config is not None

    @property
    def window_size(self) -> int:
        return self._periods

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def init(self, config: EngineConfig | None = None) -> None:
        """Attach a configuration (defaults when None)."""
        self._apply(config if config is not None else self.CONFIG_MODEL())
        logger.debug("%s: initialized with periods=%d", self.name, self._periods)

    def reconfigure(self, config: EngineConfig) -> None:
        """Replace the configuration; all buffers are recomputed next cycle."""
        self._apply(config)
        logger.debug("%s: reconfigured, periods=%d", self.name, self._periods)

    def teardown(self) -> None:
        """Release buffers and configuration."""
        self._buffers.release()
        self._config = None
        self._planner = None
        self._periods = 0
        self._needs_reset = True

    def _apply(self, config: EngineConfig) -> None:
        if not isinstance(config, self.CONFIG_MODEL):
            raise TypeError(
                f"{self.name} expects {self.CONFIG_MODEL.__name__}, got {type(config).__name__}"
            )
        self._config = config
        self._planner = InvalidationPlanner(config.max_visible)
        self._periods = normalize_periods(
            config.periods, config.timeframe, self._feed.timeframe
        )
        self._needs_reset = True
        self._configure(config)

    def _configure(self, config: EngineConfig) -> None:
        """Hook for engine-specific state derived from the configuration."""

    # ------------------------------------------------------------------
    # Update cycle
    # ------------------------------------------------------------------

    def on_update(self, notification: TickNotification) -> UpdateResult:
        """Bring the buffers up to date with the feed."""
        if self._config is None or self._planner is None:
            return UpdateResult(Status.NOT_READY)

        total = notification.total_bars
        if total <= 0:
            return UpdateResult(Status.NOT_READY)

        if (
            self._needs_reset
            or not self._buffers.is_sized
            or notification.is_full_recalculation
        ):
            self._buffers.reset(total)
            self._needs_reset = False
            changed = total
        else:
            self._buffers.shift_sync(notification.shifted_bars)
            self._buffers.resize(total)
            changed = notification.changed_bars

        if changed <= 0:
            return UpdateResult(Status.OK)

        # Possible after timeframe conversion; nothing to draw, not a fault
        if self._periods < 2:
            logger.debug("%s: %d working periods, skipping cycle", self.name, self._periods)
            return UpdateResult(Status.OK)

        plan = self._planner.plan(changed, total, self.window_size)
        if plan is None:
            return UpdateResult(Status.INSUFFICIENT_HISTORY)

        computed = 0
        for bar in plan.bars():
            try:
                self.compute_bar(bar)
            except InvariantViolationError as exc:
                logger.error(
                    "%s: invariant violation at bar %d, pass aborted: %s",
                    self.name,
                    bar,
                    exc,
                )
                return UpdateResult(
                    Status.INVARIANT_VIOLATION,
                    start_bar=plan.start_bar,
                    bars_computed=computed,
                    failed_bar=bar,
                    error=str(exc),
                )
            computed += 1

        return UpdateResult(Status.OK, start_bar=plan.start_bar, bars_computed=computed)

    def _require_config(self) -> EngineConfig:
        if self._config is None:
            raise RuntimeError(f"{self.name}: init() must be called before computing")
        return self._config

    @abstractmethod
    def compute_bar(self, bar: int) -> None:
        """Compute and store every output at offset ``bar``."""
        ...
