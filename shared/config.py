"""
Shared configuration management for the Read-Aside Item Service.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="ITEMS_",
        env_file=".env",
        case_sensitive=False,
        extra="allow"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")

    # Durable store
    postgres_dsn: str = Field(default="postgres://admin@localhost:5432/postgres")
    # Overrides the DSN password, e.g. with a pre-generated auth token
    postgres_password: Optional[str] = Field(default=None)
    store_pool_min_size: int = Field(default=2)
    store_pool_max_size: int = Field(default=10)
    store_timeout_seconds: float = Field(default=5.0)

    # Cache
    redis_url: str = Field(default="redis://localhost:6379/0")
    cache_name: str = Field(default="CacheableTable")
    cache_ttl_seconds: int = Field(default=5)
    cache_timeout_seconds: float = Field(default=1.0)
    cache_failure_threshold: int = Field(default=5)
    cache_recovery_timeout_seconds: float = Field(default=30.0)

    # Observability
    enable_tracing: bool = Field(default=False)
    otel_exporter: Optional[str] = Field(default=None)
    enable_console_tracing: bool = Field(default=False)

    # Bulk loader
    loader_workers: int = Field(default=100)
    loader_items_per_worker: int = Field(default=1000)


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int
    host: str = "0.0.0.0"

    def __init__(self, service_name: str, port: int, **kwargs):
        super().__init__(service_name=service_name, port=port, **kwargs)


def get_config(service_name: str, port: int, **overrides) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, port=port, **overrides)
