"""Fixtures for API tests: an app wired to in-memory stores and fixed bindings."""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from music_spine.api import create_app
from music_spine.core.autoconfigure import AutoConfigured
from music_spine.core.config.settings import MusicSpineSettings
from tests._support.builders import binding


@pytest.fixture
def api_settings() -> MusicSpineSettings:
    return MusicSpineSettings(_env_file=None, log_format="console")


@pytest.fixture
def bindings():
    return [
        binding("my-redis", "redis", password="s3cret", hostname="cache.example"),
        binding("my-cups", "custom", apiKey="abc123", nested={"token": "t0k"}),
    ]


@pytest.fixture
def components() -> AutoConfigured:
    return AutoConfigured()


@pytest.fixture
def client(api_settings, bindings, components, empty_root, monkeypatch) -> Iterator[TestClient]:
    monkeypatch.chdir(empty_root)
    app = create_app(api_settings, environ={}, bindings=bindings, components=components)
    with TestClient(app) as c:
        yield c
