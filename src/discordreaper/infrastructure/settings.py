"""Application settings using Pydantic Settings for configuration management."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, SecretStr, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

from discordreaper.application.context import PAGE_SIZE


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
    )

    # Discord
    discord_bot_token: SecretStr
    discord_guild_id: str | None = None
    discord_api_base: str = "https://discord.com/api/v10"

    # Pipeline
    state_file: Path
    max_concurrent_workers: int = Field(default=5, ge=1)
    http_timeout_seconds: float | None = None

    # Storage
    storage_provider: Literal["gdrive", "onedrive", "s3"] = "gdrive"
    export_folder: str = "discord-export"

    google_token_file: Path | None = None

    onedrive_client_id: str | None = None
    onedrive_token_cache_file: Path | None = None
    onedrive_authority: str = "https://login.microsoftonline.com/consumers"

    s3_endpoint: str | None = None
    s3_region: str = "us-east-1"
    s3_access_key: SecretStr | None = None
    s3_secret_key: SecretStr | None = None
    s3_bucket: str | None = None
    s3_use_ssl: bool = False
    s3_force_path_style: bool = True

    # Logging
    log_level: str = "INFO"
    enable_file_logging: bool = False
    log_dir: Path = Path(".")

    # Daemon
    daemon_sleep_seconds: int = Field(default=3600, ge=1)

    @computed_field
    @property
    def page_size(self) -> int:
        """Pagination page size; fixed by the source API."""
        return PAGE_SIZE


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
