"""
Shared pytest fixtures for music-spine tests.

Every test runs with the process environment scrubbed of the variables the
bootstrap layer reads, and with the settings cache cleared, so that a
developer's shell (or a real platform) cannot leak bindings into a test.
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from music_spine.core.config.settings import MusicSpineSettings, clear_settings_cache


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch: pytest.MonkeyPatch):
    """Remove platform and MUSIC_* variables; reset cached settings."""
    for key in list(os.environ):
        if key == "VCAP_SERVICES" or key.startswith("MUSIC_"):
            monkeypatch.delenv(key, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def settings() -> MusicSpineSettings:
    """Settings with no pre-set profiles, isolated from any .env on disk."""
    return MusicSpineSettings(_env_file=None, log_format="console")


@pytest.fixture
def empty_root(tmp_path: Path) -> Path:
    """A project root with no .env files."""
    root = tmp_path / "project"
    root.mkdir()
    return root
