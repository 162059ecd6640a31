"""
Client configuration using Pydantic Settings.
Values come from environment variables or a local .env file.
"""
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Dashboard client settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Remote API
    api_base_url: str = Field(default="https://ufc.up.railway.app", alias="UFC_API_BASE_URL")
    socket_url: str = Field(default="https://ufc.up.railway.app", alias="UFC_SOCKET_URL")
    request_timeout: float = Field(default=10.0, alias="UFC_REQUEST_TIMEOUT")

    # Retry policy for transient failures
    fetch_retries: int = Field(default=2, ge=0, alias="UFC_FETCH_RETRIES")
    fetch_retry_delay: float = Field(default=1.0, ge=0, alias="UFC_FETCH_RETRY_DELAY")  # seconds

    # Listing
    page_size: int = Field(default=10, gt=0, alias="UFC_PAGE_SIZE")

    # Durable credential storage
    token_store_path: Path = Field(
        default=Path.home() / ".ufc_dashboard" / "session.json",
        alias="UFC_TOKEN_STORE_PATH"
    )

    # View caches
    cache_ttl_seconds: float = Field(default=30.0, ge=0, alias="UFC_CACHE_TTL_SECONDS")

    # Presentation
    currency: str = Field(default="Kes", alias="UFC_CURRENCY")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_dir: Path = Field(default=Path("logs"), alias="LOG_DIR")


settings = Settings()


def get_settings() -> Settings:
    return settings
