"""Application configuration from environment variables."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment (and .env file)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_name: str = "Body Composition Tracker"
    debug: bool = False
    environment: str = "development"

    # API
    api_v1_prefix: str = "/api/v1"

    # Server (PORT is the only variable the deployment is expected to set)
    host: str = "127.0.0.1"
    port: int = 3000

    # Storage: single JSON document, whole-document read/replace
    data_file: Path = Path("data.json")
    default_height_cm: float = 175.0

    # Goal timeline lookback window (days)
    timeline_window_days: int = 30

    # CORS: comma-separated list of allowed origins outside development
    cors_origins: str = ""

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()
