"""Application configuration."""

import os
import tempfile
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    storage_backend: str = "supabase"
    supabase_bucket: str = "media"
    github_token: str | None = None
    github_repo_owner: str | None = None
    github_repo_name: str | None = None
    github_branch: str = "main"
    public_base_url: str | None = None
    storage_prefix: str = "images/"
    upload_tmp_dir: str = str(Path(tempfile.gettempdir()) / "photo-albums")
    task_ttl_seconds: float = 600
    max_concurrent_ingestions: int = 4
    bulk_delete_concurrency: int = 1
    image_max_dimension: int = 2560
    jpeg_quality: int = 85
    normalize_images: bool = True
    transcode_video: bool = True
    ffmpeg_path: str = "ffmpeg"
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_storage_prefix(raw: str | None) -> str:
    """Normalize the object-store prefix to ``segment/`` form."""
    if raw is None:
        return ""
    cleaned = raw.strip().strip("/")
    if not cleaned:
        return ""
    return f"{cleaned}/"
