"""Runtime settings loaded from environment variables."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings read from ``FRACTAL_BANDS_*`` variables or a .env file."""

    model_config = SettingsConfigDict(
        env_prefix="FRACTAL_BANDS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # YAML file listing the engines to run
    config_path: str = "indicators.yaml"

    # Applied to engine entries that do not set max_visible
    max_visible: int = Field(default=-1, ge=-1)

    # Feed defaults for the command line
    timeframe: str = "5m"
    digits: int | None = None

    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
