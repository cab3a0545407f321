"""Application configuration."""

import os
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic_settings import BaseSettings, SettingsConfigDict

from beer_tracker.domain.bac import (
    DEFAULT_BODY_WEIGHT_KG,
    DEFAULT_ELIMINATION_RATE,
    DEFAULT_SAMPLE_INTERVAL_MINUTES,
    DISTRIBUTION_FACTOR_MALE,
    PhysiologyParams,
)

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    admin_token: str
    webhook_secret: str
    timezone: str = "UTC"
    bac_body_weight_kg: float = DEFAULT_BODY_WEIGHT_KG
    bac_distribution_factor: float = DISTRIBUTION_FACTOR_MALE
    bac_elimination_rate: float = DEFAULT_ELIMINATION_RATE
    bac_sample_interval_minutes: int = DEFAULT_SAMPLE_INTERVAL_MINUTES
    entry_cache_ttl_seconds: int = 30
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    def physiology(self) -> PhysiologyParams:
        """Widmark coefficients applied to every drinker."""
        return PhysiologyParams(
            body_weight_kg=self.bac_body_weight_kg,
            distribution_factor=self.bac_distribution_factor,
            elimination_rate_per_hour=self.bac_elimination_rate,
        )


def parse_timezone(raw: str | None) -> ZoneInfo:
    """Resolve the configured timezone, falling back to UTC when blank."""
    cleaned = (raw or "").strip()
    if not cleaned:
        return ZoneInfo("UTC")
    try:
        return ZoneInfo(cleaned)
    except ZoneInfoNotFoundError as exc:
        raise ValueError(f"Unknown timezone: {cleaned}") from exc
