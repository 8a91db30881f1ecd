"""
Centralized settings for music-spine.

:class:`MusicSpineSettings` is the single validated source for process
settings.  Values come from ``MUSIC_*`` environment variables or a
``.env`` file; the pre-set active profiles are read from
``MUSIC_PROFILES_ACTIVE`` as a comma-separated list.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from music_spine import __version__


class MusicSpineSettings(BaseSettings):
    """music-spine process configuration."""

    model_config = SettingsConfigDict(
        env_prefix="MUSIC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Profiles ─────────────────────────────────────────────────
    profiles_active: Annotated[list[str], NoDecode] = Field(
        default_factory=list,
        description="Pre-set active profiles (comma-separated in the environment)",
    )

    # ── API ──────────────────────────────────────────────────────
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8080)
    api_title: str = Field(default="music-spine")
    api_version: str = Field(default=__version__)
    debug: bool = Field(default=False)

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json", description="json or console")

    # ── Data ─────────────────────────────────────────────────────
    datasource_url: str | None = Field(
        default=None,
        description="Overrides the relational URL derived from bound services",
    )
    seed_data: Path | None = Field(
        default=None,
        description="Album catalog to seed an empty store with (default: packaged albums.json)",
    )

    @field_validator("profiles_active", mode="before")
    @classmethod
    def _split_profiles(cls, value: object) -> object:
        if isinstance(value, str):
            return [p.strip() for p in value.split(",") if p.strip()]
        return value

    @field_validator("log_format")
    @classmethod
    def _check_log_format(cls, value: str) -> str:
        if value not in ("json", "console"):
            raise ValueError("log_format must be 'json' or 'console'")
        return value

    @property
    def json_logs(self) -> bool:
        return self.log_format == "json"


# ── Settings factory with caching ────────────────────────────────────────

_settings_cache: dict[str, MusicSpineSettings] = {}


def get_settings(*, _force_reload: bool = False) -> MusicSpineSettings:
    """Load, validate, and cache a :class:`MusicSpineSettings` instance."""
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]
    settings = MusicSpineSettings()
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    _settings_cache.clear()
