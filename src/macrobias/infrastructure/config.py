"""Application settings loaded from the environment."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings (env prefix ``MACROBIAS_``, optional ``.env`` file)."""

    model_config = SettingsConfigDict(
        env_prefix="MACROBIAS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Data sources
    fred_api_key: str | None = None
    fred_base_url: str = "https://api.stlouisfed.org/fred"
    fred_rate_limit_delay: float = 0.1
    benchmark_symbol: str = "DXY"
    benchmark_series_id: str = "DTWEXBGS"

    # Collaborator boundary
    request_timeout_seconds: float = Field(default=15.0, gt=0)
    max_retries: int = Field(default=2, ge=0)
    retry_backoff_seconds: float = Field(default=0.5, ge=0)
    cache_ttl_seconds: int = Field(default=3600, ge=0)

    # Correlation
    max_fill_days: int = Field(default=3, ge=0)
    max_staleness_days: int = Field(default=5, ge=0)
    history_days: int = Field(default=1100, gt=0, description="Calendar days fetched per series")

    # Signals
    signal_horizon_days: int = Field(default=5, ge=1, description="Days between signal entry and exit")

    # Jobs and storage
    job_concurrency: int = Field(default=1, ge=1)
    database_path: Path = Path("macrobias.db")

    # Config files; None uses the bundled defaults
    weights_path: Path | None = None
    universe_path: Path | None = None
    factors_path: Path | None = None
    calendar_path: Path | None = None

    # Logging
    log_level: str = "INFO"
    log_json: bool = False


@lru_cache
def get_settings() -> Settings:
    return Settings()
