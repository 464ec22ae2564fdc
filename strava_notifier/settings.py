from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    api_key: str
    app_url: str
    strava_client_id: str
    strava_client_secret: str
    strava_verify_token: str
    telegram_bot_token: str
    telegram_webhook_secret: Optional[str] = None
    project_url: Optional[str] = None

    credential_backend: Literal["sql", "redis"] = "sql"
    database_url: str = "sqlite:///./credentials.db"
    upstash_redis_rest_url: Optional[str] = None
    upstash_redis_rest_token: Optional[str] = None

    http_timeout_seconds: float = 10.0
    reauth_prompt_on_refresh_failure: bool = True
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000


@lru_cache()
def get_settings() -> Settings:
    return Settings()
