"""
Fetcher configuration.

Loaded from ``SANDBOX_FETCHER_*`` environment variables (or a ``.env``
file) using pydantic-settings and passed explicitly to the orchestrator.
"""

import sys
from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_launcher_dir() -> Path:
    # Console scripts are installed next to the interpreter.
    return Path(sys.executable).parent


class Settings(BaseSettings):
    """Agent-side settings for launching the fetcher."""

    model_config = SettingsConfigDict(
        env_prefix="SANDBOX_FETCHER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    launcher_dir: Path = Field(
        default_factory=_default_launcher_dir,
        description="Directory holding the sandbox-fetcher executable",
    )
    frameworks_home: Optional[str] = Field(
        default=None, description="Base directory for relative resource paths"
    )
    hadoop_home: Optional[str] = Field(
        default=None, description="Hadoop installation used for distributed filesystem URIs"
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Logging level"
    )
    log_format: Literal["text", "json"] = Field(
        default="text", description="text for human-readable, json for structured logs"
    )

    http_timeout: float = Field(default=300.0, gt=0, description="HTTP download timeout in seconds")
    http_chunk_size: int = Field(default=8192, ge=1024, description="HTTP streaming chunk size in bytes")


@lru_cache
def get_settings() -> Settings:
    """Return the cached settings instance."""
    return Settings()
