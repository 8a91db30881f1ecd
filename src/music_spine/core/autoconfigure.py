"""
Auto-configuration units for the backing stores.

Each :class:`AutoConfiguration` builds one component (a client, a
database handle, a repository).  :func:`apply_auto_configuration` runs
every registered unit in order, skipping the ones listed under
``autoconfigure.exclude`` and the ones whose requirements were not
built.  Profile resolution publishes that exclusion list, so only the
selected store's integration code is ever initialised.

The optional drivers (``pymongo``, ``redis``) are imported lazily inside
their factories so that an excluded store never needs its driver
installed.

Units::

    datasource               SQLAlchemy Engine
    datasource.repositories  SqlAlbumRepository        (requires datasource)
    mongo                    pymongo MongoClient
    mongo.data               pymongo Database           (requires mongo)
    mongo.repositories       MongoAlbumRepository       (requires mongo.data)
    redis                    redis client
    redis.repositories       RedisAlbumRepository       (requires redis)
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.exc import NoSuchModuleError
from sqlalchemy.pool import StaticPool

from music_spine.core.config.components import (
    DATASOURCE_REPOSITORIES_UNIT,
    DATASOURCE_UNIT,
    MONGO_DATA_UNIT,
    MONGO_REPOSITORIES_UNIT,
    MONGO_UNIT,
    PROFILE_RULES,
    REDIS_REPOSITORIES_UNIT,
    REDIS_UNIT,
    StoreFamily,
    StoreProfile,
    active_family,
    family_for,
)
from music_spine.core.config.environment import Environment
from music_spine.core.config.resolver import AUTOCONFIGURE_EXCLUDE_KEY
from music_spine.core.errors import AutoConfigurationError
from music_spine.core.logging import get_logger
from music_spine.core.repositories import (
    AlbumRepository,
    InMemoryAlbumRepository,
    MongoAlbumRepository,
    RedisAlbumRepository,
    SqlAlbumRepository,
)

logger = get_logger(__name__)

DEFAULT_DATASOURCE_URL = "sqlite://"
DEFAULT_MONGODB_URI = "mongodb://localhost:27017/music"
DEFAULT_REDIS_URL = "redis://localhost:6379/0"

_SCHEME_ALIASES = {
    "postgres": "postgresql",
    "mysql": "mysql+pymysql",
    "sqlserver": "mssql+pyodbc",
    "oracle": "oracle+oracledb",
}

Factory = Callable[[Environment, Mapping[str, Any]], Any]


@dataclass(frozen=True, slots=True)
class AutoConfiguration:
    """One named unit of integration code."""

    name: str
    family: StoreFamily
    factory: Factory
    requires: tuple[str, ...] = ()


@dataclass
class AutoConfigured:
    """Components built by :func:`apply_auto_configuration`, keyed by unit name."""

    components: dict[str, Any] = field(default_factory=dict)
    excluded: tuple[str, ...] = ()

    def __contains__(self, unit: str) -> bool:
        return unit in self.components

    def get(self, unit: str) -> Any | None:
        return self.components.get(unit)

    @property
    def album_repository(self) -> AlbumRepository:
        """The configured repository, or an in-memory one when no store was wired."""
        for unit in (DATASOURCE_REPOSITORIES_UNIT, MONGO_REPOSITORIES_UNIT, REDIS_REPOSITORIES_UNIT):
            if unit in self.components:
                return self.components[unit]
        repository = self.components.get("memory.repositories")
        if repository is None:
            repository = InMemoryAlbumRepository()
            self.components["memory.repositories"] = repository
        return repository

    def close(self) -> None:
        """Dispose of managed clients."""
        engine = self.components.get(DATASOURCE_UNIT)
        if engine is not None:
            engine.dispose()
        for unit in (MONGO_UNIT, REDIS_UNIT):
            client = self.components.get(unit)
            if client is not None and hasattr(client, "close"):
                client.close()


# ── Connection URLs ──────────────────────────────────────────────────────


def _bound_credential(environment: Environment, family: StoreFamily, *keys: str) -> str | None:
    """First ``uri``/``url`` credential of a binding that implies an active profile of *family*.

    Only the family actually wired for the active profiles uses bound credentials.
    """
    if active_family(environment.active_profiles) is not family:
        return None
    for name in environment.active_profiles:
        try:
            profile = StoreProfile(name)
        except ValueError:
            continue
        if family_for(profile) is not family:
            continue
        rule = PROFILE_RULES[profile]
        for binding in environment.service_bindings:
            if rule.matches(binding.tags):
                value = binding.credential(*keys)
                if value:
                    return str(value)
    return None


def normalize_datasource_url(url: str) -> str:
    """Map platform URL schemes (``postgres://``) to SQLAlchemy dialect names."""
    scheme, sep, rest = url.partition("://")
    if not sep:
        return url
    return f"{_SCHEME_ALIASES.get(scheme, scheme)}://{rest}"


def datasource_url(environment: Environment) -> str:
    explicit = environment.get_property("datasource.url")
    if explicit:
        return str(explicit)
    bound = _bound_credential(environment, StoreFamily.RELATIONAL, "uri", "url", "jdbcUrl")
    if bound:
        return normalize_datasource_url(bound)
    return DEFAULT_DATASOURCE_URL


def mongodb_uri(environment: Environment) -> str:
    explicit = environment.get_property("mongodb.uri")
    if explicit:
        return str(explicit)
    return _bound_credential(environment, StoreFamily.DOCUMENT, "uri", "url") or DEFAULT_MONGODB_URI


def redis_url(environment: Environment) -> str:
    explicit = environment.get_property("redis.url")
    if explicit:
        return str(explicit)
    return _bound_credential(environment, StoreFamily.CACHE, "uri", "url") or DEFAULT_REDIS_URL


# ── Unit factories ───────────────────────────────────────────────────────


def _create_datasource(environment: Environment, built: Mapping[str, Any]) -> Any:
    url = datasource_url(environment)
    dialect = url.partition("://")[0]
    try:
        if url.startswith("sqlite"):
            return create_engine(
                url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        return create_engine(url, pool_pre_ping=True)
    except ImportError as exc:
        package = exc.name or dialect
        raise AutoConfigurationError(
            DATASOURCE_UNIT,
            f"The {dialect} datasource requires the '{package}' package. "
            f"Install with: pip install {package}",
            cause=exc,
        ) from exc
    except NoSuchModuleError as exc:
        raise AutoConfigurationError(
            DATASOURCE_UNIT,
            f"No SQLAlchemy dialect is installed for '{dialect}'",
            cause=exc,
        ) from exc


def _create_sql_repository(environment: Environment, built: Mapping[str, Any]) -> Any:
    return SqlAlbumRepository(built[DATASOURCE_UNIT])


def _create_mongo_client(environment: Environment, built: Mapping[str, Any]) -> Any:
    try:
        from pymongo import MongoClient
    except ImportError as exc:
        raise AutoConfigurationError(
            MONGO_UNIT,
            "The mongodb profile requires the 'pymongo' package. "
            "Install with: pip install music-spine[mongodb]",
            cause=exc,
        ) from exc
    return MongoClient(mongodb_uri(environment), connect=False)


def _create_mongo_database(environment: Environment, built: Mapping[str, Any]) -> Any:
    client = built[MONGO_UNIT]
    return client.get_default_database(default="music")


def _create_mongo_repository(environment: Environment, built: Mapping[str, Any]) -> Any:
    return MongoAlbumRepository(built[MONGO_DATA_UNIT])


def _create_redis_client(environment: Environment, built: Mapping[str, Any]) -> Any:
    try:
        import redis
    except ImportError as exc:
        raise AutoConfigurationError(
            REDIS_UNIT,
            "The redis profile requires the 'redis' package. "
            "Install with: pip install music-spine[redis]",
            cause=exc,
        ) from exc
    return redis.from_url(redis_url(environment), decode_responses=True)


def _create_redis_repository(environment: Environment, built: Mapping[str, Any]) -> Any:
    return RedisAlbumRepository(built[REDIS_UNIT])


AUTO_CONFIGURATIONS: tuple[AutoConfiguration, ...] = (
    AutoConfiguration(DATASOURCE_UNIT, StoreFamily.RELATIONAL, _create_datasource),
    AutoConfiguration(
        DATASOURCE_REPOSITORIES_UNIT,
        StoreFamily.RELATIONAL,
        _create_sql_repository,
        requires=(DATASOURCE_UNIT,),
    ),
    AutoConfiguration(MONGO_UNIT, StoreFamily.DOCUMENT, _create_mongo_client),
    AutoConfiguration(
        MONGO_DATA_UNIT, StoreFamily.DOCUMENT, _create_mongo_database, requires=(MONGO_UNIT,)
    ),
    AutoConfiguration(
        MONGO_REPOSITORIES_UNIT,
        StoreFamily.DOCUMENT,
        _create_mongo_repository,
        requires=(MONGO_DATA_UNIT,),
    ),
    AutoConfiguration(REDIS_UNIT, StoreFamily.CACHE, _create_redis_client),
    AutoConfiguration(
        REDIS_REPOSITORIES_UNIT,
        StoreFamily.CACHE,
        _create_redis_repository,
        requires=(REDIS_UNIT,),
    ),
)


# ── Application ──────────────────────────────────────────────────────────


def excluded_units(environment: Environment) -> tuple[str, ...]:
    """Parse ``autoconfigure.exclude`` (comma-separated string or sequence)."""
    raw = environment.get_property(AUTOCONFIGURE_EXCLUDE_KEY, "")
    if isinstance(raw, str):
        items = raw.split(",")
    else:
        items = [str(item) for item in raw]
    return tuple(dict.fromkeys(item.strip() for item in items if item.strip()))


def apply_auto_configuration(
    environment: Environment,
    units: tuple[AutoConfiguration, ...] = AUTO_CONFIGURATIONS,
) -> AutoConfigured:
    """Build every unit that is neither excluded nor missing a requirement."""
    excluded = excluded_units(environment)
    result = AutoConfigured(excluded=excluded)
    for unit in units:
        if unit.name in excluded:
            continue
        if any(required not in result.components for required in unit.requires):
            continue
        result.components[unit.name] = unit.factory(environment, result.components)
        logger.debug("auto_configuration_applied", unit=unit.name, family=unit.family.value)
    logger.info(
        "auto_configuration_complete",
        applied=list(result.components),
        excluded=list(excluded),
    )
    return result
