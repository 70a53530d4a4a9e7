from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Loading priority (highest to lowest):
    1. Environment variables
    2. .env file
    3. Default values below
    """

    # Environment
    environment: str = "development"
    debug: bool = False

    # Application
    app_name: str = "Short Link Service"
    app_version: str = "1.0.0"
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite:///./shortlinks.db"

    # Short links
    public_base_url: Optional[str] = None  # Falls back to the request's own origin
    access_password: Optional[str] = None  # Creation password, gate is off when empty
    slug_length: int = 4

    # Visit logging
    visit_log_backend: str = "database"  # Options: "database", "redis_streams", "null"
    redis_url: str = "redis://localhost:6379/0"
    queue_name: str = "link_visits"
    queue_consumer_group: str = "visit_workers"
    queue_batch_size: int = 100

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    @property
    def creation_password_required(self) -> bool:
        return bool(self.access_password)


settings = Settings()


@lru_cache()
def get_settings() -> Settings:
    """Settings dependency, overridden in tests."""
    return settings
