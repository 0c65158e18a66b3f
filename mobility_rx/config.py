"""Configuration management for Mobility-Rx."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Energy reconciliation
    energy_tolerance_wm: float = Field(
        default=50.0,
        description="Allowed drift (watt-minutes) before the rescaler fine-tunes duration",
    )
    modest_increase_ratio: float = Field(
        default=1.5,
        description="Largest energy ratio handled by scaling intensity alone for frail patients",
    )
    decrease_fallback_factor: float = Field(
        default=0.8,
        description="Fraction of baseline watts kept when a dose decrease hits the power floor",
    )

    # Fixed AI-recommendation thresholds (goal editor)
    override_max_duration: float = Field(default=20.0, description="minutes per session")
    override_max_power: float = Field(default=45.0, description="watts")
    override_max_resistance: float = Field(default=6.0, description="resistance level")
    override_max_energy: float = Field(default=1200.0, description="watt-minutes per day")

    # Baseline-relative thresholds (risk assessment editor)
    baseline_energy_override_ratio: float = Field(default=1.3)
    baseline_power_override_ratio: float = Field(default=1.3)
    baseline_duration_override_ratio: float = Field(default=1.5)
    baseline_sessions_override_margin: int = Field(default=1)

    # API Settings
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8080)

    # CORS
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:5000"],
        description="Allowed CORS origins",
    )

    # Debug
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode (exposes error details in responses)",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
