"""
Centralized settings for Topic Spine.

All fields can be set through ``TOPIC_SPINE_*`` environment variables
(e.g. ``TOPIC_SPINE_DATA_DIR=/srv/topics``) or a ``.env`` file.

Fields
──────
data_dir           : Directory holding the flat-file collections
topics_collection  : Collection (file stem) topics are stored under
principals_file    : Principal directory file, relative to data_dir unless absolute
log_level          : structlog level
log_format         : json | console | auto
service_name       : ``service.name`` attached to every log line
json_indent        : Indentation of collection files (0 = compact)

Tags:
    configuration, settings, pydantic, environment, topic-spine
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TopicSpineSettings(BaseSettings):
    """Topic Spine configuration."""

    model_config = SettingsConfigDict(
        env_prefix="TOPIC_SPINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Storage ──────────────────────────────────────────────────
    data_dir: Path = Field(default=Path("data"), description="Flat-file collection directory")
    topics_collection: str = Field(default="topic")
    principals_file: Path = Field(default=Path("principals.json"))
    json_indent: int = Field(default=2, ge=0)

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: Literal["json", "console", "auto"] = Field(default="auto")
    service_name: str = Field(default="topic-spine")

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level {value!r}")
        return level

    @field_validator("topics_collection")
    @classmethod
    def _non_empty_collection(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("topics_collection must not be empty")
        return value

    # ── Derived properties ───────────────────────────────────────

    @property
    def principals_path(self) -> Path:
        if self.principals_file.is_absolute():
            return self.principals_file
        return self.data_dir / self.principals_file

    @property
    def json_logs(self) -> bool | None:
        """Tri-state flag for ``configure_logging(json_format=...)``."""
        if self.log_format == "auto":
            return None
        return self.log_format == "json"


_settings_cache: dict[str, TopicSpineSettings] = {}


def get_settings(*, _force_reload: bool = False) -> TopicSpineSettings:
    """Load, validate, and cache the process-wide settings."""
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]
    settings = TopicSpineSettings()
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    _settings_cache.clear()


__all__ = ["TopicSpineSettings", "get_settings", "clear_settings_cache"]
