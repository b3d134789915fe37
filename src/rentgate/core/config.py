# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Application configuration via environment variables and .env files."""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from rentgate.core.constants import (
    DEFAULT_CACHE_PREFIX,
    DEFAULT_CACHE_TTL,
    MIDDLEWARE_RATE_LIMIT_PREFIX,
    FailureMode,
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="RENTGATE_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
    )

    # Durable backend (Redis / Upstash)
    use_redis: bool = False
    redis_url: str = ""  # e.g. "rediss://eu1-example.upstash.io:6379"
    redis_token: str = ""
    redis_timeout: float = 2.0  # seconds per round trip
    backend_failure_mode: FailureMode = FailureMode.FALLBACK

    @field_validator("redis_url", "redis_token", mode="before")
    @classmethod
    def _strip_credentials(cls, v: object) -> object:
        return v.strip() if isinstance(v, str) else v

    # Ephemeral store
    memory_max_entries: int = 10_000
    memory_sweep_interval: float = 1.0  # minimum seconds between full sweeps

    # Cache
    cache_ttl: int = DEFAULT_CACHE_TTL
    cache_key_prefix: str = DEFAULT_CACHE_PREFIX

    # Rate limiting (requests per window, per client identifier)
    rate_limit_enabled: bool = True
    rate_limit_key_prefix: str = MIDDLEWARE_RATE_LIMIT_PREFIX
    rate_limit_window: int = 60
    rate_limit_api: int = 100
    rate_limit_auth: int = 10
    rate_limit_reservation: int = 5
    rate_limit_search: int = 60

    # API server
    api_host: str = "127.0.0.1"
    api_port: int = 8000
    api_workers: int = 1

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"


def get_settings() -> Settings:
    return Settings()
