"""Application configuration."""

import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from catalog_console.catalog import DEFAULT_MAX_IMAGE_BYTES, DEFAULT_MAX_VIDEO_BYTES

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Console settings loaded from ``CATALOG_*`` environment variables."""

    api_base_url: str = "https://api.arcdatum.com/api"
    storage_upload_url: str = "https://ftp.arcdatum.com/api/uploads"
    auth_login_path: str = "/auth/login"
    session_file: Path = Path("~/.config/catalog-console/session.json")
    request_timeout_seconds: float = 15.0
    upload_timeout_seconds: float = 300.0
    max_video_bytes: int = DEFAULT_MAX_VIDEO_BYTES
    max_image_bytes: int = DEFAULT_MAX_IMAGE_BYTES
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_prefix="CATALOG_",
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def login_url(self) -> str:
        """Full URL of the credential exchange endpoint."""
        return self.api_base_url.rstrip("/") + "/" + self.auth_login_path.lstrip("/")

    @property
    def session_path(self) -> Path:
        return self.session_file.expanduser()
