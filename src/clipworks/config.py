"""Application configuration for Clipworks.

Values come from ``CLIPWORKS_*`` environment variables. Storage credentials
and the listen port also honour the plain ``SUPABASE_URL``, ``SUPABASE_KEY``
and ``PORT`` names used by the hosting platform.
"""

from __future__ import annotations

import tempfile
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_scratch_dir() -> Path:
    return Path(tempfile.gettempdir()) / "clipworks"


class AppConfig(BaseSettings):
    """Pydantic settings container shared by every service of the process."""

    model_config = SettingsConfigDict(
        env_prefix="CLIPWORKS_", extra="ignore", populate_by_name=True
    )

    scratch_dir: Path = Field(
        default_factory=_default_scratch_dir,
        description="Directory holding uploaded inputs and transform outputs.",
    )
    max_upload_bytes: int = Field(
        default=20 * 1024 * 1024,
        ge=1,
        description="Maximum size of a single uploaded file in bytes.",
    )
    upload_chunk_bytes: int = Field(
        default=1 * 1024 * 1024,
        ge=1,
        description="Chunk size used when streaming uploads to scratch storage.",
    )
    storage_url: str = Field(
        default="",
        validation_alias=AliasChoices("CLIPWORKS_STORAGE_URL", "SUPABASE_URL"),
        description="Base URL of the Supabase project hosting the artifact bucket.",
    )
    storage_key: str = Field(
        default="",
        validation_alias=AliasChoices("CLIPWORKS_STORAGE_KEY", "SUPABASE_KEY"),
        description="Service key used to authenticate storage requests.",
    )
    storage_bucket: str = Field(
        default="videos",
        min_length=1,
        description="Bucket receiving published artifacts.",
    )
    storage_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Timeout applied to storage requests in seconds.",
    )
    artifact_content_type: str = Field(
        default="video/mp4",
        description="Content type attached to every published artifact.",
    )
    ffmpeg_binary: str = Field(
        default="ffmpeg",
        description="Executable invoked for transformations.",
    )
    ffmpeg_threads: int = Field(
        default=1,
        ge=1,
        description="Worker threads granted to a single ffmpeg invocation.",
    )
    ffmpeg_preset: str = Field(
        default="ultrafast",
        description="Encoder preset requested for every invocation.",
    )
    retention_hours: int = Field(
        default=24,
        ge=1,
        description="Age after which stored artifacts are swept.",
    )
    sweep_interval_seconds: float = Field(
        default=3600.0,
        gt=0,
        description="Period of the retention sweep; runs align to interval boundaries.",
    )
    host: str = Field(default="0.0.0.0")
    port: int = Field(
        default=3000,
        validation_alias=AliasChoices("CLIPWORKS_PORT", "PORT"),
    )
    log_level: str = Field(default="INFO")


def load_config() -> AppConfig:
    """Build configuration from the environment and prepare the scratch dir."""
    config = AppConfig()
    config.scratch_dir.mkdir(parents=True, exist_ok=True)
    return config


__all__ = ["AppConfig", "load_config"]
