"""Environment configuration for the alerts console gateway."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_prefix="ALERTS_CONSOLE_", case_sensitive=False)

    service_name: str = Field("alerts-console", description="Identifier used in log records")
    base_url: str = Field(
        "http://localhost:8080/hawkular/alerts",
        description="Root URL of the alerting REST API",
    )
    timeout: float = Field(5.0, gt=0, description="Timeout applied to every alerting API request")
    log_level: str = Field("INFO", description="Root log level")


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()
