"""Configuration management for the tuner."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ProfileDefaults(BaseModel):
    """Profile values used when the caller leaves an axis unspecified."""

    db_type: Literal["web", "oltp", "dw", "mixed", "desktop"] = Field(
        default="web", description="Workload type"
    )
    db_version: Literal["9.4", "9.5", "9.6", "10", "11", "12", "13", "14"] = Field(
        default="14", description="PostgreSQL version"
    )
    platform: Literal["linux", "darwin", "windows"] = Field(
        default="linux", description="Operating system"
    )
    storage: Literal["ssd", "hdd", "san"] = Field(default="ssd", description="Storage class")


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING", description="Log level"
    )
    log_format: Literal["json", "console"] = Field(default="console", description="Log format")
    metrics_port: int | None = Field(
        default=None, ge=1, le=65535, description="Prometheus metrics port (disabled when unset)"
    )
    otel_endpoint: str | None = Field(
        default=None, description="OpenTelemetry collector endpoint"
    )
    otel_service_name: str = Field(default="pg_tuner", description="Service name for tracing")


class Config(BaseSettings):
    """Main configuration for the tuner."""

    model_config = SettingsConfigDict(
        env_prefix="PG_TUNER_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    defaults: ProfileDefaults = Field(default_factory=ProfileDefaults)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


@lru_cache
def get_config() -> Config:
    """Get the global configuration instance."""
    return Config()
