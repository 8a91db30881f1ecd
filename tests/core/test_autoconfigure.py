"""Tests for music_spine.core.autoconfigure — exclusions drive which stores get wired."""

from __future__ import annotations

import sys
import types

import pytest
from sqlalchemy.engine import Engine

from music_spine.core.autoconfigure import (
    DEFAULT_DATASOURCE_URL,
    DEFAULT_MONGODB_URI,
    DEFAULT_REDIS_URL,
    AutoConfigured,
    apply_auto_configuration,
    datasource_url,
    excluded_units,
    mongodb_uri,
    normalize_datasource_url,
    redis_url,
)
from music_spine.core.config.environment import Environment, PropertySource
from music_spine.core.config.resolver import initialize
from music_spine.core.errors import AutoConfigurationError
from music_spine.core.repositories import (
    InMemoryAlbumRepository,
    MongoAlbumRepository,
    RedisAlbumRepository,
    SqlAlbumRepository,
)
from tests._support.builders import binding
from tests._support.fakes import FakeMongoClient, FakeRedis


@pytest.fixture
def fake_pymongo(monkeypatch):
    module = types.ModuleType("pymongo")
    module.MongoClient = FakeMongoClient  # type: ignore[attr-defined]
    monkeypatch.setitem(sys.modules, "pymongo", module)
    return module


@pytest.fixture
def fake_redis(monkeypatch):
    module = types.ModuleType("redis")
    module.from_url = lambda url, decode_responses=False: FakeRedis(url)  # type: ignore[attr-defined]
    monkeypatch.setitem(sys.modules, "redis", module)
    return module


def _resolved(*bindings, profiles=(), properties=None) -> Environment:
    env = Environment(
        active_profiles=profiles,
        property_sources=[PropertySource("test", properties or {})],
        service_bindings=bindings,
    )
    initialize(env)
    return env


# ── Exclusion parsing ────────────────────────────────────────────────────


class TestExcludedUnits:
    def test_comma_string(self):
        env = Environment(property_sources=[PropertySource("s", {"autoconfigure.exclude": "a, b,,a"})])
        assert excluded_units(env) == ("a", "b")

    def test_sequence(self):
        env = Environment(property_sources=[PropertySource("s", {"autoconfigure.exclude": ["x", "y"]})])
        assert excluded_units(env) == ("x", "y")

    def test_absent(self):
        assert excluded_units(Environment()) == ()


# ── Applying units ───────────────────────────────────────────────────────


class TestApplyAutoConfiguration:
    def test_relational_by_default(self):
        components = apply_auto_configuration(_resolved())
        try:
            assert isinstance(components.get("datasource"), Engine)
            assert isinstance(components.album_repository, SqlAlbumRepository)
            assert "mongo" not in components
            assert "redis" not in components
        finally:
            components.close()

    def test_mongodb_binding(self, fake_pymongo):
        env = _resolved(binding("my-db", "mongodb", uri="mongodb://db.example/albums"))
        components = apply_auto_configuration(env)
        assert set(components.components) == {"mongo", "mongo.data", "mongo.repositories"}
        assert isinstance(components.album_repository, MongoAlbumRepository)
        client = components.get("mongo")
        assert client.uri == "mongodb://db.example/albums"
        assert client.connect is False
        components.close()
        assert client.closed

    def test_redis_binding(self, fake_redis):
        env = _resolved(binding("my-redis", "redis", uri="redis://cache.example:6379/1"))
        components = apply_auto_configuration(env)
        assert set(components.components) == {"redis", "redis.repositories"}
        assert isinstance(components.album_repository, RedisAlbumRepository)
        assert components.get("redis").url == "redis://cache.example:6379/1"

    def test_excluded_drivers_never_imported(self, monkeypatch):
        monkeypatch.setitem(sys.modules, "pymongo", None)
        monkeypatch.setitem(sys.modules, "redis", None)
        components = apply_auto_configuration(_resolved(profiles=["postgres"], properties={
            "datasource.url": "sqlite://",
        }))
        assert "datasource.repositories" in components
        components.close()

    def test_missing_driver_raises(self, monkeypatch):
        monkeypatch.setitem(sys.modules, "pymongo", None)
        env = _resolved(binding("my-db", "mongodb"))
        with pytest.raises(AutoConfigurationError) as exc_info:
            apply_auto_configuration(env)
        assert exc_info.value.unit == "mongo"
        assert "pip install music-spine[mongodb]" in exc_info.value.message

    def test_missing_relational_driver_raises(self, monkeypatch):
        monkeypatch.setitem(sys.modules, "psycopg2", None)
        monkeypatch.setitem(sys.modules, "psycopg", None)
        env = _resolved(binding("db", "postgres", uri="postgres://u:p@h:5432/music"))
        with pytest.raises(AutoConfigurationError) as exc_info:
            apply_auto_configuration(env)
        err = exc_info.value
        assert err.unit == "datasource"
        assert "postgresql datasource requires" in err.message
        assert "pip install psycopg" in err.message
        assert isinstance(err.__cause__, ImportError)

    def test_unknown_dialect_raises(self):
        env = _resolved(properties={"datasource.url": "nosuchdb://h/music"})
        with pytest.raises(AutoConfigurationError) as exc_info:
            apply_auto_configuration(env)
        assert exc_info.value.unit == "datasource"
        assert "nosuchdb" in exc_info.value.message

    def test_unmet_requirement_skips_unit(self):
        env = Environment(
            property_sources=[
                PropertySource(
                    "s",
                    {"autoconfigure.exclude": "datasource,mongo,mongo.data,mongo.repositories,"
                     "redis,redis.repositories"},
                )
            ]
        )
        components = apply_auto_configuration(env)
        assert components.components == {}
        assert components.excluded[0] == "datasource"

    def test_in_memory_fallback_is_stable(self):
        components = AutoConfigured()
        repo = components.album_repository
        assert isinstance(repo, InMemoryAlbumRepository)
        assert components.album_repository is repo


# ── Connection URLs ──────────────────────────────────────────────────────


class TestConnectionUrls:
    def test_defaults(self):
        env = _resolved()
        assert datasource_url(env) == DEFAULT_DATASOURCE_URL
        assert mongodb_uri(env) == DEFAULT_MONGODB_URI
        assert redis_url(env) == DEFAULT_REDIS_URL

    def test_explicit_property_wins(self):
        env = _resolved(
            binding("pg", "postgres", uri="postgres://bound/db"),
            properties={"datasource.url": "sqlite:///explicit.db"},
        )
        assert datasource_url(env) == "sqlite:///explicit.db"

    def test_bound_credential_normalised(self):
        env = _resolved(binding("pg", "postgres", "relational", uri="postgres://u:p@h:5432/music"))
        assert datasource_url(env) == "postgresql://u:p@h:5432/music"

    def test_binding_of_other_family_ignored(self):
        env = _resolved(binding("cache", "redis", uri="redis://bound:6379/0"))
        assert datasource_url(env) == DEFAULT_DATASOURCE_URL
        assert redis_url(env) == "redis://bound:6379/0"

    def test_bound_credential_of_unwired_family_ignored(self):
        env = _resolved(
            binding("pg", "postgres", uri="postgres://u:p@bound:5432/music"),
            profiles=["redis"],
        )
        assert env.active_profiles == ("redis", "postgres")
        assert datasource_url(env) == DEFAULT_DATASOURCE_URL
        assert redis_url(env) == DEFAULT_REDIS_URL

    def test_jdbc_url_credential(self):
        env = _resolved(binding("db", "mysql", jdbcUrl="mysql://h/music"))
        assert datasource_url(env) == "mysql+pymysql://h/music"

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("postgres://h/d", "postgresql://h/d"),
            ("sqlserver://h/d", "mssql+pyodbc://h/d"),
            ("oracle://h/d", "oracle+oracledb://h/d"),
            ("postgresql://h/d", "postgresql://h/d"),
            ("not-a-url", "not-a-url"),
        ],
    )
    def test_normalize(self, url, expected):
        assert normalize_datasource_url(url) == expected
