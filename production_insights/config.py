"""Tunable thresholds, overridable through INSIGHTS_* environment variables."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class InsightSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="INSIGHTS_", frozen=True)

    # Schedule
    days_ahead: int = Field(7, ge=0)
    stale_after_days: int = Field(14, ge=0)

    # Historical window
    lookback_days: int = Field(90, ge=1)
    min_samples: int = Field(3, ge=1)
    historical_bottleneck_days: float = Field(7, ge=0)

    # Live workflow
    bottleneck_wait_days: float = Field(7, ge=0)
    min_bottleneck_items: int = Field(2, ge=1)

    # Predictions and alerts
    stuck_after_days: float = Field(14, ge=0)
    bottleneck_alert_min_items: int = Field(3, ge=1)


def get_settings(**overrides) -> InsightSettings:
    """Settings from the environment, with explicit keyword overrides on top."""

    return InsightSettings(**overrides)
