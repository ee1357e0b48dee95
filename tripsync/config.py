"""Typed settings configuration - single source of truth."""

from datetime import time
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database (unset -> in-memory repositories)
    database_url: str | None = None

    # Lease store (unset -> in-process leases)
    redis_url: str | None = None

    # AI itinerary service
    ai_service_url: str = "http://localhost:8000"
    ai_timeout_seconds: float = 600.0

    # Route time provider (no key -> straight-line estimate)
    routes_api_url: str = "https://routes.googleapis.com"
    routes_api_key: str = ""
    routes_timeout_seconds: float = 10.0
    routes_language_code: str = "en"

    # Generation lease TTLs (seconds)
    lease_waiting_ttl_seconds: int = 600
    lease_running_ttl_seconds: int = 900

    # Worker pool
    generation_workers: int = 4

    # First stop of an empty day starts here
    default_day_start: time = time(9, 0)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
