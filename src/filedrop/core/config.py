from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.filedrop.core.constants import DEFAULT_PAGE_SIZE, DEFAULT_THUMBNAIL_SIZE


class Settings(BaseSettings):
    """Runtime configuration, read from ``FILEDROP_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="FILEDROP_",
        env_file=".env",
        extra="ignore",
    )

    base_dir: Path = Field(
        default=Path("uploads"),
        description="Directory where uploaded files are stored and served from",
    )
    server_url: str = Field(
        default="http://localhost:8088",
        description="Public server URL used when generating links",
    )
    host: str = Field(default="0.0.0.0", description="Interface to listen on")
    port: int = Field(default=8088, ge=1, le=65535, description="Port to listen on")
    page_size: int = Field(
        default=DEFAULT_PAGE_SIZE,
        ge=1,
        description="Number of entries per listing page",
    )
    thumbnail_size: int = Field(
        default=DEFAULT_THUMBNAIL_SIZE,
        ge=1,
        description="Edge length of square thumbnails in pixels",
    )
    thumbnail_workers: int = Field(
        default=2,
        ge=1,
        description="Threads used for background thumbnail generation",
    )
    auth_user: str | None = Field(default=None, description="Basic auth username")
    auth_pass: str | None = Field(default=None, description="Basic auth password")
    log_level: str = Field(default="INFO", description="Root logging level")

    @property
    def auth_enabled(self) -> bool:
        """Authentication is required only when both credentials are set."""
        return self.auth_user is not None and self.auth_pass is not None


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Dependency to get application settings."""
    return settings
