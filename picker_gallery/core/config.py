"""Application settings parsed from environment variables and defaults."""

import json
from functools import lru_cache
from typing import Optional
from urllib.parse import urlparse

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ASSET_HOSTS = ["googleusercontent.com"]


def _split_list(value: str | list[str] | None) -> list[str]:
    """Normalize list-valued settings from JSON, CSV, or list inputs."""
    if isinstance(value, list):
        return [item.strip() for item in value if isinstance(item, str) and item.strip()]
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return []
        try:
            parsed = json.loads(stripped)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, list):
            return [str(item).strip() for item in parsed if str(item).strip()]
        return [item.strip() for item in stripped.split(",") if item.strip()]
    return []


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    app_name: str = "Picker Gallery API"
    environment: str = "development"
    api_prefix: str = "/api"

    database_url: str = "sqlite+aiosqlite:///./data/gallery.db"
    auto_create_tables: bool = True

    admin_username: Optional[str] = None
    admin_password: Optional[str] = None
    admin_password_hash: Optional[str] = None

    google_client_id: Optional[str] = None
    google_client_secret: Optional[str] = None
    google_token_path: str = "token.json"
    google_token_url: str = "https://oauth2.googleapis.com/token"
    google_tokeninfo_url: str = "https://oauth2.googleapis.com/tokeninfo"
    google_token_refresh_buffer_seconds: int = 300
    picker_api_base: str = "https://photospicker.googleapis.com/v1"
    picker_scope: str = "https://www.googleapis.com/auth/photospicker.mediaitems.readonly"
    picker_asset_hosts: list[str] | str = Field(default_factory=lambda: DEFAULT_ASSET_HOSTS.copy())
    picker_poll_interval_seconds: float = 1.0
    picker_poll_max_attempts: int = 60
    picker_timeout_seconds: float = 15.0
    transfer_timeout_seconds: float = 60.0

    cloudinary_url: Optional[str] = None
    cloudinary_cloud_name: Optional[str] = None
    cloudinary_api_key: Optional[str] = None
    cloudinary_api_secret: Optional[str] = None
    cloudinary_folder: str = "gallery/google-photos"

    gallery_replace_mode: bool = False

    log_level: str = "INFO"
    health_allowlist: list[str] | str = Field(default_factory=list)

    @field_validator("picker_asset_hosts", mode="before")
    @classmethod
    def _split_asset_hosts(cls, value: str | list[str] | None) -> list[str]:
        """Normalize trusted asset hosts, keeping the provider default when empty."""
        hosts = [host.lower().lstrip(".") for host in _split_list(value)]
        return hosts or DEFAULT_ASSET_HOSTS.copy()

    @field_validator("health_allowlist", mode="before")
    @classmethod
    def _split_health_allowlist(cls, value: str | list[str] | None) -> list[str]:
        """Normalize health allowlist entries from JSON, CSV, or list inputs."""
        return _split_list(value)

    @model_validator(mode="after")
    def _apply_cloudinary_url(self) -> "Settings":
        """Fill Cloudinary credentials from CLOUDINARY_URL when set explicitly."""
        if not self.cloudinary_url:
            return self
        parsed = urlparse(self.cloudinary_url)
        if parsed.scheme != "cloudinary" or not parsed.hostname:
            raise ValueError("CLOUDINARY_URL must look like cloudinary://<api_key>:<api_secret>@<cloud_name>")
        self.cloudinary_cloud_name = self.cloudinary_cloud_name or parsed.hostname
        self.cloudinary_api_key = self.cloudinary_api_key or parsed.username
        self.cloudinary_api_secret = self.cloudinary_api_secret or parsed.password
        return self

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()


settings = get_settings()
