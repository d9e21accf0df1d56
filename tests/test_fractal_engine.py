"""Tests for the Fractal Dimension Index engine."""

import math

import pytest

from fractal_bands.engines import FractalDimensionEngine
from fractal_bands.models import Bar, BarSeries, FractalConfig, Status


def _bar(i: int, close: float) -> Bar:
    return Bar(timestamp=float(i * 300), open=close, high=close, low=close, close=close)


def _series(closes: list[float], **kwargs) -> BarSeries:
    series = BarSeries(**kwargs)
    series.replace(_bar(i, c) for i, c in enumerate(closes))
    return series


def _engine(series: BarSeries, **config) -> FractalDimensionEngine:
    engine = FractalDimensionEngine(series)
    engine.init(FractalConfig(**config))
    return engine


# Trending for four bars then one reversal per bar, oldest first
FLIP_CLOSES = [0.0, 1.0, 2.0, 3.0, 4.0, 5.0, 0.0, 5.0, 0.0]

# Ends in a full-range zigzag, whose estimate exceeds 2
ZIGZAG_CLOSES = [0.5, 0.2, 0.8, 0.0, 1.0, 0.0, 1.0, 0.0]


class TestFdiValues:
    """Tests for main-line values and classification."""

    def test_window_includes_extra_close(self):
        engine = _engine(BarSeries(), periods=5)
        assert engine.window_size == 6

    def test_linear_then_reversals(self):
        series = _series(FLIP_CLOSES)
        engine = _engine(series, periods=5)

        result = engine.on_update(series.drain_notification())

        assert result.status == Status.OK
        assert result.start_bar == 3
        assert result.bars_computed == 4
        main = engine.buffers["main"]
        assert main[3] == pytest.approx(1 + 1.5 * math.log(2) / math.log(10))
        assert main[2] == pytest.approx(1.6337, abs=1e-3)
        assert main[1] == pytest.approx(1.7617, abs=1e-3)
        assert main[0] == pytest.approx(1.8604, abs=1e-3)
        assert main[4] is None

    def test_classification_lines(self):
        series = _series(FLIP_CLOSES)
        engine = _engine(series, periods=5, draw_as_line=False)
        engine.on_update(series.drain_notification())

        buffers = engine.buffers
        assert buffers["trending"][3] == buffers["main"][3]
        assert buffers["ranging"][3] is None
        for bar in range(3):
            assert buffers["ranging"][bar] == buffers["main"][bar]
            assert buffers["trending"][bar] is None

    def test_line_mode_joins_class_change(self):
        series = _series(FLIP_CLOSES)
        engine = _engine(series, periods=5, draw_as_line=True)
        engine.on_update(series.drain_notification())

        buffers = engine.buffers
        # Bar 3 is trending, bar 2 ranging: the ranging line starts at bar 3
        assert buffers["trending"][3] == buffers["main"][3]
        assert buffers["ranging"][3] == buffers["main"][3]
        assert buffers["trending"][2] is None

    def test_new_bar_leaves_older_bars_alone(self):
        series = _series(FLIP_CLOSES)
        engine = _engine(series, periods=5)
        engine.on_update(series.drain_notification())
        before = engine.buffers.snapshot()

        series.add(_bar(9, 5.0))
        result = engine.on_update(series.drain_notification())

        assert result.bars_computed == 1
        assert engine.buffers["main"][0] == pytest.approx(1.9407, abs=1e-3)
        after = engine.buffers.snapshot()
        for name in ("main", "ranging", "trending"):
            assert after[name][1:] == before[name]


class TestFlatWindows:
    """Tests for windows with no price range."""

    def test_flat_window_without_history_uses_seed(self):
        series = _series([3.0, 3.0, 3.0])
        engine = _engine(series, periods=2)
        engine.on_update(series.drain_notification())

        assert engine.buffers["main"][0] == 1.5
        assert engine.buffers["trending"][0] == 1.5
        assert engine.buffers["ranging"][0] is None

    def test_custom_seed(self):
        series = _series([3.0, 3.0, 3.0])
        engine = _engine(series, periods=2, seed_fdi=1.8)
        engine.on_update(series.drain_notification())

        assert engine.buffers["ranging"][0] == 1.8
        assert engine.buffers["trending"][0] is None

    def test_flat_window_carries_older_value(self):
        series = _series([0.0, 1.0, 0.5, 0.5, 0.5])
        engine = _engine(series, periods=2)
        engine.on_update(series.drain_notification())

        main = engine.buffers["main"]
        assert main[2] == pytest.approx(1.934, abs=1e-3)
        assert main[1] == pytest.approx(1.847, abs=1e-3)
        assert main[0] == main[1]

    def test_range_rounded_to_digits(self):
        series = _series([1.00001, 1.00002, 1.00001], digits=4)
        engine = _engine(series, periods=2)
        engine.on_update(series.drain_notification())

        assert engine.buffers["main"][0] == 1.5


class TestInvariantViolation:
    """Tests for aborting a pass on an out-of-range estimate."""

    def test_pass_stops_at_failing_bar(self):
        series = _series(ZIGZAG_CLOSES)
        engine = _engine(series, periods=4)

        result = engine.on_update(series.drain_notification())

        assert result.status == Status.INVARIANT_VIOLATION
        assert not result.ok
        assert result.start_bar == 3
        assert result.bars_computed == 3
        assert result.failed_bar == 0
        assert "outside [1, 2]" in result.error

    def test_bars_before_fault_stay_valid(self):
        series = _series(ZIGZAG_CLOSES)
        engine = _engine(series, periods=4)
        engine.on_update(series.drain_notification())

        main = engine.buffers["main"]
        assert main[3] == pytest.approx(1.8469, abs=1e-3)
        assert main[2] == pytest.approx(1.9426, abs=1e-3)
        assert main[1] == pytest.approx(1.9916, abs=1e-3)
        assert main[0] is None

    def test_later_update_recovers(self):
        series = _series(ZIGZAG_CLOSES)
        engine = _engine(series, periods=4)
        engine.on_update(series.drain_notification())

        series.add(_bar(7, 0.5))
        result = engine.on_update(series.drain_notification())

        assert result.status == Status.OK
        assert engine.buffers["main"][0] == pytest.approx(1.9561, abs=1e-3)


class TestLifecycle:
    """Tests for configuration of the FDI engine."""

    def test_default_periods(self):
        engine = FractalDimensionEngine(BarSeries())
        engine.init()
        assert engine.periods == 30
        assert engine.window_size == 31

    def test_insufficient_history(self):
        series = _series([1.0, 2.0, 3.0])
        engine = _engine(series, periods=3)
        assert engine.on_update(series.drain_notification()).status == Status.INSUFFICIENT_HISTORY

    def test_higher_timeframe_periods(self):
        series = _series([float(i % 7) for i in range(40)], timeframe="15m")
        engine = _engine(series, periods=4, timeframe="1h")
        assert engine.periods == 16

        result = engine.on_update(series.drain_notification())
        assert result.start_bar == 40 - 17
