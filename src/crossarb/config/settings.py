"""
Application settings with environment variable support.

Uses Pydantic Settings for type-safe configuration with automatic
environment variable loading and validation. Every scaling constant
the pipeline depends on is exposed here so it can be overridden
per run without touching the algorithms.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from crossarb.config.constants import (
    CAPITAL_VOLUME_MULTIPLE,
    DEFAULT_BASE_PRICE,
    DEFAULT_DASHBOARD_HOST,
    DEFAULT_DASHBOARD_PORT,
    DEFAULT_LEARNING_RATE,
    DEFAULT_MESSAGE_COUNT,
    DEFAULT_NUM_EXCHANGES,
    DEFAULT_NUM_TIME_POINTS,
    DEFAULT_TICK_INTERVAL_MS,
    DEFAULT_TOTAL_EPOCHS,
    HOLD_PROBABILITY,
    IMPACT_FACTOR_MAX,
    IMPACT_FACTOR_MIN,
    LIQUIDITY_VOLUME_SCALE,
    ORACLE_HISTORY_LIMIT,
    SIZING_IMPACT_FACTOR,
)


class Settings(BaseSettings):
    """
    Simulation settings loaded from environment variables.

    All settings can be overridden via ``CROSSARB_``-prefixed
    environment variables or a ``.env`` file.
    """

    model_config = SettingsConfigDict(
        env_prefix="CROSSARB_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =========================================================================
    # Sample Data
    # =========================================================================

    num_exchanges: int = Field(
        default=DEFAULT_NUM_EXCHANGES,
        ge=2,
        le=50,
        description="Number of exchanges in generated sample data",
    )

    num_time_points: int = Field(
        default=DEFAULT_NUM_TIME_POINTS,
        ge=1,
        le=100_000,
        description="Number of timestamps in generated sample data",
    )

    tick_interval_ms: int = Field(
        default=DEFAULT_TICK_INTERVAL_MS,
        ge=1,
        description="Milliseconds between generated timestamps",
    )

    base_price: float = Field(
        default=DEFAULT_BASE_PRICE,
        gt=0.0,
        description="Reference price for generated ticks",
    )

    seed: int | None = Field(
        default=None,
        description="Seed for the per-run random generator (None = nondeterministic)",
    )

    # =========================================================================
    # Pipeline Scaling
    # =========================================================================

    liquidity_volume_scale: float = Field(
        default=LIQUIDITY_VOLUME_SCALE,
        gt=0.0,
        description="Multiplier mapping liquidity_level onto a volume constraint",
    )

    capital_volume_multiple: float = Field(
        default=CAPITAL_VOLUME_MULTIPLE,
        gt=0.0,
        description="Assumed capital base as a multiple of average trade volume",
    )

    impact_factor_min: float = Field(
        default=IMPACT_FACTOR_MIN,
        ge=0.0,
        description="Lower bound for per-exchange impact factors",
    )

    impact_factor_max: float = Field(
        default=IMPACT_FACTOR_MAX,
        ge=0.0,
        description="Upper bound for per-exchange impact factors",
    )

    sizing_impact_factor: float = Field(
        default=SIZING_IMPACT_FACTOR,
        gt=0.0,
        description="Impact factor k used by the closed-form optimal volume spread / 2k",
    )

    hold_probability: float = Field(
        default=HOLD_PROBABILITY,
        ge=0.0,
        le=1.0,
        description="Probability of emitting a hold action after an execution",
    )

    message_count: int = Field(
        default=DEFAULT_MESSAGE_COUNT,
        ge=0,
        le=100_000,
        description="Number of synthetic inter-agent messages per run",
    )

    # =========================================================================
    # Scoring Oracle
    # =========================================================================

    oracle_history_limit: int = Field(
        default=ORACLE_HISTORY_LIMIT,
        ge=1,
        le=10_000,
        description="Observations kept per exchange in oracle histories",
    )

    oracle_concurrency: int = Field(
        default=1,
        ge=1,
        le=64,
        description="Concurrent oracle calls (1 = sequential)",
    )

    total_epochs: int = Field(
        default=DEFAULT_TOTAL_EPOCHS,
        ge=1,
        description="Nominal epoch count reported in the model state",
    )

    learning_rate: float = Field(
        default=DEFAULT_LEARNING_RATE,
        gt=0.0,
        description="Nominal learning rate reported in the model state",
    )

    # =========================================================================
    # Operation
    # =========================================================================

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging verbosity level",
    )

    log_file: Path | None = Field(
        default=None,
        description="Optional log file path",
    )

    dashboard_host: str = Field(
        default=DEFAULT_DASHBOARD_HOST,
        description="Dashboard API bind address",
    )

    dashboard_port: int = Field(
        default=DEFAULT_DASHBOARD_PORT,
        ge=1,
        le=65535,
        description="Dashboard API port",
    )

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: object) -> object:
        """Accept lowercase level names."""
        if isinstance(v, str):
            return v.upper()
        return v

    @model_validator(mode="after")
    def validate_impact_range(self) -> "Settings":
        """Ensure the impact factor range is ordered."""
        if self.impact_factor_min > self.impact_factor_max:
            raise ValueError(
                f"impact_factor_min ({self.impact_factor_min}) exceeds "
                f"impact_factor_max ({self.impact_factor_max})"
            )
        return self

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def impact_factor_range(self) -> tuple[float, float]:
        """Get the impact factor bounds as a tuple."""
        return (self.impact_factor_min, self.impact_factor_max)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses LRU cache to ensure settings are loaded only once.
    Clear cache with `get_settings.cache_clear()` if needed.
    """
    return Settings()
