"""
Configuration management using pydantic-settings.
All settings loaded from environment variables (12-factor app).
"""

from functools import lru_cache
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # API
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")
    api_reload: bool = Field(default=False, description="Enable hot reload")
    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="CORS allowed origins (comma-separated)",
    )

    # Logging
    log_level: str = Field(default="info", description="Log level")
    log_format: str = Field(default="json", description="Log format (json|console)")

    # Record source
    records_path: str = Field(
        default="",
        description="JSON records file backing the in-memory repository",
    )
    snapshot_lookback_days: int = Field(
        default=90, ge=0, description="Days of records per snapshot (0 = no filter)"
    )

    # Engine Configuration
    window_size: int = Field(
        default=10, ge=1, le=1000, description="Records per recent/prior trend window"
    )
    anomaly_window_days: int = Field(
        default=30, ge=1, le=365, description="Days of history scanned for anomalies"
    )
    recommendation_limit: int = Field(
        default=6, ge=1, le=20, description="Maximum recommendations returned"
    )
    assistant_action_prefix: str = Field(
        default="AI_", min_length=1, description="Audit action prefix for assistant usage"
    )
    forecast_timeframe: str = Field(default="30 days", description="Forecast horizon label")
    summary_period: str = Field(default="Last 30 days", description="Summary period label")

    # Caching
    insights_cache_ttl_seconds: int = Field(
        default=300, ge=0, description="Report cache TTL (0 disables caching)"
    )

    # Development
    dev_mode: bool = Field(default=True, description="Development mode")
    testing: bool = Field(default=False, description="Testing mode")

    @field_validator("cors_origins")
    @classmethod
    def parse_cors_origins(cls, v: str) -> List[str]:
        """Parse comma-separated CORS origins."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Uses lru_cache to ensure singleton behavior.
    """
    return Settings()
