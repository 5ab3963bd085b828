"""
Application Configuration
=========================
Centralized configuration management using Pydantic Settings.
"""

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

    # Application
    app_env: Literal["development", "staging", "production"] = "development"
    app_debug: bool = False
    app_host: str = "0.0.0.0"
    app_port: int = 8000

    # Database
    database_url: str = Field(default="sqlite+aiosqlite:///./cost_estimator.db")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "json"

    # Metrics
    metrics_enabled: bool = True

    # Scheduler
    scheduler_enabled: bool = True
    pricing_refresh_hours: int = Field(default=24, ge=1)
    pricing_auto_update: bool = True

    # Pricing sources
    pricing_feed_path: str = "config/pricing.yaml"
    pricing_feed_url: str | None = None
    pricing_feed_timeout: float = 30.0
    catalog_seed_path: str = "config/models.yaml"

    # Token counting
    tokenizer_encoding: str = "o200k_base"
    ingest_batch_size: int = Field(default=10, ge=1)
    max_upload_files: int = Field(default=1000, ge=1)

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
