"""
Centralized configuration using Pydantic BaseSettings.
All environment variables are loaded here - no hardcoded values.

Only the wiring layer (app factory and dependency container) reads
settings; services receive the values they need as constructor arguments.
"""
from functools import lru_cache
from typing import Dict, Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Pluggable Feed API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Pagination
    DEFAULT_FEED_LIMIT: int = 20
    MAX_FEED_LIMIT: int = 100

    # Third-party ranking delegate
    THIRD_PARTY_TIMEOUT_SEC: float = 5.0

    # Malformed preference fields: "lenient" defaults them, "strict" rejects the request
    PREFERENCE_PARSE_MODE: Literal["lenient", "strict"] = "lenient"

    # Authentication: bearer token -> user id (JSON object in the environment)
    AUTH_TOKENS: Dict[str, str] = {}

    # Load demo posts, users and tokens into the in-memory store at startup
    SEED_DEMO_DATA: bool = True

    # Media URL resolution (client side)
    VIDEO_PLAYBACK_BASE_URL: str = "https://stream.example.com"
    PHOTO_PUBLIC_BASE_URL: str = "https://storage.example.com/photos"

    # Telemetry
    ENABLE_OTEL: bool = False  # Default to False to prevent gRPC errors in dev
    ENABLE_PROMETHEUS: bool = True

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Cached settings instance - singleton pattern."""
    return Settings()
