"""
Configuration management for the StreamVerse backend.
Uses pydantic-settings for environment variable loading.
"""
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Configuration
    app_name: str = "StreamVerse"
    app_version: str = "1.0.0"
    debug: bool = False

    # Server Configuration
    host: str = "0.0.0.0"
    port: int = 3000

    # CORS Configuration
    # Default allows all origins for development; set STREAMVERSE_CORS_ORIGINS for production
    cors_origins: list[str] = ["*"]

    # Rate Limiting
    rate_limit_per_minute: int = 100

    # Playlist sources (JSON list of source configs); built-in list when unset
    sources_file: Optional[str] = None

    # Catalog snapshot
    snapshot_path: str = "data/channels-cache.json"
    use_snapshot: bool = True
    save_snapshot: bool = True

    # Fetching
    fetch_connect_timeout: float = 10.0
    fetch_read_timeout: float = 30.0
    fetch_max_attempts: int = 3
    fetch_backoff_base: float = 0.5  # 0.5s, 1s, 2s...
    fetch_concurrency: int = 4
    user_agent: str = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"

    # Deduplication
    dedup_merge_empty_names: bool = True

    # Validation
    validation_timeout: float = 6.0
    validation_ttl_seconds: int = 1800  # 30 minutes
    validation_batch_size: int = 50
    validation_batch_delay: float = 1.0
    validation_max_channels: int = 800
    validation_cache_path: str = "data/validation_cache.db"
    validate_on_startup: bool = True

    # Pagination
    default_page_size: int = 500
    max_page_size: int = 5000

    # Admin API key for protected endpoints
    admin_api_key: str = "dev-admin-key"

    # Pydantic V2 configuration
    model_config = SettingsConfigDict(env_prefix="STREAMVERSE_", env_file=".env")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
