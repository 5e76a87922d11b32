"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - Secrets (cache password) come from environment variables, never hardcoded
    - get_settings() is cached (lru_cache) — single instance per process

Design Decisions:
    - Defaults work out-of-the-box against a local PostgREST + Valkey/Redis pair
    - Cache settings are consumed only by the lifespan, which builds the client
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # REST data gateway (PostgREST)
    gateway_url: str = "http://localhost:3000"
    gateway_timeout_seconds: float = 10.0
    gateway_max_retries: int = 2
    gateway_base_delay_ms: int = 200
    gateway_max_delay_ms: int = 2_000
    listing_resource: str = "public_items"

    @field_validator("gateway_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    # Cache backend (Valkey / Redis protocol)
    cache_host: str = "localhost"
    cache_port: int = 6379
    cache_password: str | None = None
    cache_db: int = 0
    cache_default_ttl_ms: int = 30_000
    cache_max_retries: int = 3
    cache_retry_delay_ms: int = 1_000
    cache_socket_timeout_seconds: float = 2.0
    cache_namespace: str = "marketplace:query"

    # API
    cors_origins: list[str] = ["http://localhost:4321"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
