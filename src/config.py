"""Application configuration loaded from environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All configuration is loaded from environment variables (or .env file)."""

    # --- App ---
    app_name: str = "Bloom"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"
    environment: str = "development"  # development | staging | production

    # --- Supabase ---
    supabase_url: str
    supabase_db_url: str  # direct postgres connection string for asyncpg

    # --- Database pool ---
    db_pool_min_size: int = 2
    db_pool_max_size: int = 20
    db_command_timeout: float = 30.0

    # --- Storage retries (I/O only; engine calls are never retried) ---
    storage_retry_attempts: int = 3
    storage_retry_backoff_seconds: float = 0.2

    # --- Clerk ---
    clerk_jwks_url: str = "https://api.clerk.com/v1/jwks"

    # --- CORS ---
    cors_origins: list[str] = ["http://localhost:8081"]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]
