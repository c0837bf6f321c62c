"""
Shared configuration management for the Orders Access service.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings.

    Every field can be overridden through an ``ACCESS_``-prefixed environment
    variable (``ACCESS_PREFETCH_PAGES=5``) or a local ``.env`` file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="ACCESS_",
        case_sensitive=False,
        extra="allow"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")

    # Cursor cache
    cursor_cache_backend: str = Field(default="memory", description="memory | redis")
    redis_url: str = Field(default="redis://localhost:6379/0")
    cursor_cache_ttl_seconds: int = Field(default=600, ge=1)
    prefetch_pages: int = Field(default=3, ge=0)

    # Pagination
    default_page_size: int = Field(default=10, ge=1)
    max_page_size: int = Field(default=100, ge=1)

    # Order store
    store_backend: str = Field(default="dynamodb", description="dynamodb | memory")
    aws_region: str = Field(default="us-east-1")
    dynamodb_table_name: str = Field(default="Orders")
    dynamodb_index_name: str = Field(default="CustomerID-OrderDate-index")
    dynamodb_endpoint_url: Optional[str] = Field(default=None)


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
