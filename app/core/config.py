"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Map environments to their respective .env files (relative to PROJECT_ROOT)
ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Load .env file early to populate os.environ before creating nested settings
# This is necessary because Pydantic nested BaseSettings don't inherit env_file
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    name: str = Field(
        "Product Catalog API",
        description="Human-readable service name (OpenAPI title)",
    )
    version: str = Field(
        "1.0.0",
        description="Service version reported by the health endpoint",
    )
    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    api_prefix: str = Field(
        "/api",
        description="Path prefix for all API routers",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class DatabaseSettings(BaseSettings):
    """Hosted database (Supabase) configuration.

    When ``url`` or ``key`` is missing the service falls back to an in-process
    product store, which is what local development and the test-suite use.
    """

    url: str | None = Field(
        None,
        description="Supabase project URL",
    )
    key: str | None = Field(
        None,
        description="Supabase service or anon key used by the server",
    )
    products_table: str = Field(
        "products",
        description="Table holding product rows",
    )

    model_config = SettingsConfigDict(
        env_prefix="SUPABASE_",
        case_sensitive=False,
    )

    @property
    def configured(self) -> bool:
        return bool(self.url and self.key)


class RateLimitSettings(BaseSettings):
    """Admission control quotas for the three limiter instances."""

    enabled: bool = Field(
        True,
        description="Enable per-client rate limiting",
    )
    include_headers: bool = Field(
        True,
        description="Include X-RateLimit-* headers alongside Retry-After when throttling",
    )

    api_requests: int = Field(100, ge=1, description="General API quota per window")
    api_window_seconds: float = Field(15 * 60, gt=0, description="General API window")

    strict_requests: int = Field(10, ge=1, description="Quota for sensitive operations")
    strict_window_seconds: float = Field(60, gt=0, description="Window for sensitive operations")

    bot_requests: int = Field(50, ge=1, description="Quota per IP + user-agent")
    bot_window_seconds: float = Field(60, gt=0, description="Window for bot protection")

    model_config = SettingsConfigDict(
        env_prefix="RATE_LIMIT_",
        case_sensitive=False,
    )


class CacheSettings(BaseSettings):
    """Response cache freshness windows."""

    product_ttl_seconds: float = Field(
        300,
        gt=0,
        description="TTL for product listings",
    )
    api_ttl_seconds: float = Field(
        60,
        gt=0,
        description="TTL for API responses, including single products",
    )
    max_entries: int | None = Field(
        1000,
        ge=1,
        description="Entry cap per cache; least recently used entries go first (None for unlimited)",
    )

    model_config = SettingsConfigDict(
        env_prefix="CACHE_",
        case_sensitive=False,
    )


class ImageSettings(BaseSettings):
    """Uploaded image storage and retention."""

    uploads_dir: Path = Field(
        PROJECT_ROOT / "public" / "uploads",
        description="Directory where uploaded product images are written",
    )
    public_prefix: str = Field(
        "/uploads",
        description="URL prefix under which uploads are served",
    )
    max_upload_bytes: int = Field(
        1024 * 1024,
        ge=1,
        description="Maximum accepted image size in bytes",
    )
    max_images: int = Field(
        30,
        ge=1,
        description="Retention cap; oldest images beyond it are deleted on cleanup",
    )

    model_config = SettingsConfigDict(
        env_prefix="IMAGE_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="'json' or 'plain'")
    output: str = Field("stdout", description="'stdout' or 'file'")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(10 * 1024 * 1024, description="Rotate after this many bytes (0 disables)")
    backup_count: int = Field(5, description="Rotated files to keep")
    request_id_header: str = Field("X-Request-ID", description="Correlation header name")

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on startup if values are malformed.
    """

    app_env: str = APP_ENV
    sweep_interval_seconds: float = Field(
        60,
        gt=0,
        description="Interval of the background sweep over caches and limiters",
    )
    app: AppSettings = Field(default_factory=AppSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    images: ImageSettings = Field(default_factory=ImageSettings)
    log: LogSettings = Field(default_factory=LogSettings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
settings = Settings()
