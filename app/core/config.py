"""
Configuration module - loads all env vars using pydantic-settings.
This is the SINGLE SOURCE OF TRUTH for all config values.
"""

from functools import lru_cache
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # MongoDB
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_db: str = "placedin"

    # JWT Auth (tokens carry the session id, see app.core.auth)
    jwt_secret_key: str = "change-this-secret"
    jwt_algorithm: str = "HS256"

    # Sessions
    session_ttl_minutes: int = 7 * 24 * 60
    session_cleanup_interval_seconds: int = 3600  # 0 disables the in-process sweeper

    # Shared secret presented by the auth gateway when issuing sessions
    service_api_key: str = "change-this-service-key"

    # CORS
    cors_origins: List[str] = [
        "https://placedin.netlify.app",
        "https://krishh.me",
        "http://localhost:5173",
        "http://localhost:5174",
        "http://localhost:5175",
    ]

    # App
    log_level: str = "INFO"
    debug: bool = False

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
