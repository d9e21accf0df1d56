"""Tests for configuration models, the YAML loader and settings."""

import textwrap

import pytest
from pydantic import ValidationError

from fractal_bands.config_loader import IndicatorFileConfig, load_indicator_config
from fractal_bands.engines import FractalDimensionEngine, MovingAverageBandsEngine
from fractal_bands.models import (
    AppliedPrice,
    BarSeries,
    FractalConfig,
    MaMethod,
    MovingAverageConfig,
)
from fractal_bands.settings import Settings


# ── Config model tests ────────────────────────────────────────────────────


class TestEngineConfig:
    def test_defaults(self):
        config = MovingAverageConfig()
        assert config.periods == 20
        assert config.method == MaMethod.SMA
        assert config.applied_price == AppliedPrice.CLOSE
        assert config.deviation_multiplier == 2.0
        assert config.max_visible == -1

    def test_fdi_defaults(self):
        config = FractalConfig()
        assert config.periods == 30
        assert config.draw_as_line is True
        assert config.seed_fdi == 1.5

    def test_strings_coerce_to_enums(self):
        config = MovingAverageConfig(method="ALMA", applied_price="typical")
        assert config.method is MaMethod.ALMA
        assert config.applied_price is AppliedPrice.TYPICAL

    def test_frozen(self):
        config = MovingAverageConfig()
        with pytest.raises(ValidationError):
            config.periods = 10

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"periods": 1},
            {"periods": 2.5},
            {"periods": 0, "timeframe": "1h"},
            {"timeframe": "7x"},
            {"max_visible": -2},
            {"max_visible": 0},
            {"deviation_multiplier": -1.0},
            {"alma_offset": 1.5},
            {"alma_sigma": 0.0},
            {"method": "HMA"},
        ],
    )
    def test_invalid_values_rejected(self, kwargs):
        with pytest.raises(ValidationError):
            MovingAverageConfig(**kwargs)

    def test_fractional_periods_allowed_with_timeframe(self):
        config = FractalConfig(periods=2.5, timeframe="1h")
        assert config.periods == 2.5

    def test_seed_must_be_a_dimension(self):
        with pytest.raises(ValidationError):
            FractalConfig(seed_fdi=2.5)


# ── YAML loader tests ─────────────────────────────────────────────────────


class TestLoadIndicatorConfig:
    def test_missing_file_gives_defaults(self, tmp_path):
        config = load_indicator_config(tmp_path / "missing.yaml")
        kinds = [entry.kind for entry in config.engines]
        assert kinds == ["ma_bands", "fdi"]

    def test_none_path_gives_defaults(self):
        config = load_indicator_config(None)
        assert len(config.engines) == 2

    def test_model_defaults_match_loader(self):
        assert [e.kind for e in IndicatorFileConfig().engines] == ["ma_bands", "fdi"]

    def test_load_entries(self, tmp_path):
        path = tmp_path / "indicators.yaml"
        path.write_text(textwrap.dedent("""\
            engines:
              - kind: ma_bands
                periods: 14
                method: LWMA
                applied_price: median
                deviation_multiplier: 1.5
              - kind: fdi
                periods: 4
                timeframe: 1h
                draw_as_line: false
        """))

        config = load_indicator_config(path)

        ma, fdi = config.engines
        assert isinstance(ma, MovingAverageConfig)
        assert ma.periods == 14
        assert ma.method == MaMethod.LWMA
        assert ma.applied_price == AppliedPrice.MEDIAN
        assert isinstance(fdi, FractalConfig)
        assert fdi.timeframe == "1h"
        assert fdi.draw_as_line is False

    def test_default_max_visible_applied(self, tmp_path):
        path = tmp_path / "indicators.yaml"
        path.write_text(textwrap.dedent("""\
            engines:
              - kind: ma_bands
              - kind: fdi
                max_visible: 10
        """))

        config = load_indicator_config(path, default_max_visible=500)

        assert config.engines[0].max_visible == 500
        assert config.engines[1].max_visible == 10

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "indicators.yaml"
        path.write_text("")
        config = load_indicator_config(path, default_max_visible=100)
        assert [e.max_visible for e in config.engines] == [100, 100]

    def test_unknown_kind_rejected(self, tmp_path):
        path = tmp_path / "indicators.yaml"
        path.write_text("engines:\n  - kind: macd\n")
        with pytest.raises(ValidationError):
            load_indicator_config(path)

    def test_invalid_entry_rejected(self, tmp_path):
        path = tmp_path / "indicators.yaml"
        path.write_text("engines:\n  - kind: fdi\n    periods: 1\n")
        with pytest.raises(ValidationError):
            load_indicator_config(path)

    def test_build_engines(self):
        series = BarSeries()
        config = IndicatorFileConfig(
            engines=[MovingAverageConfig(periods=5), FractalConfig(periods=8)]
        )

        ma, fdi = config.build_engines(series)

        assert isinstance(ma, MovingAverageBandsEngine)
        assert isinstance(fdi, FractalDimensionEngine)
        assert ma.is_initialized and fdi.is_initialized
        assert ma.periods == 5
        assert fdi.periods == 8
        assert ma.feed is series and fdi.feed is series


# ── Settings tests ────────────────────────────────────────────────────────


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("CONFIG_PATH", "MAX_VISIBLE", "TIMEFRAME", "DIGITS", "LOG_LEVEL"):
            monkeypatch.delenv(f"FRACTAL_BANDS_{name}", raising=False)
        settings = Settings(_env_file=None)
        assert settings.config_path == "indicators.yaml"
        assert settings.max_visible == -1
        assert settings.timeframe == "5m"
        assert settings.digits is None

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("FRACTAL_BANDS_MAX_VISIBLE", "50")
        monkeypatch.setenv("FRACTAL_BANDS_TIMEFRAME", "1h")
        monkeypatch.setenv("FRACTAL_BANDS_DIGITS", "5")
        settings = Settings(_env_file=None)
        assert settings.max_visible == 50
        assert settings.timeframe == "1h"
        assert settings.digits == 5

    def test_invalid_max_visible(self, monkeypatch):
        monkeypatch.setenv("FRACTAL_BANDS_MAX_VISIBLE", "-5")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)
