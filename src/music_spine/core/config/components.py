"""
Backing-store profiles, service-tag rules, and auto-configuration groups.

Each :class:`StoreProfile` names one backing-store family the application
can be wired against.  :data:`PROFILE_RULES` says which service tags a
bound service must carry to imply that profile, and the ``*_UNITS``
tuples name the auto-configuration units that belong to each family.

All tables here are built once at import time and are read-only.

Example::

    from music_spine.core.config.components import PROFILE_RULES, StoreProfile

    rule = PROFILE_RULES[StoreProfile.MONGODB]
    rule.matches({"mongodb", "nosql"})   # True
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType

# ── Store profiles ───────────────────────────────────────────────────────


class StoreProfile(str, Enum):
    """Supported backing-store profiles."""

    MONGODB = "mongodb"
    POSTGRES = "postgres"
    MYSQL = "mysql"
    REDIS = "redis"
    ORACLE = "oracle"
    SQLSERVER = "sqlserver"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def names(cls) -> frozenset[str]:
        """The closed set of profile names."""
        return frozenset(p.value for p in cls)


class StoreFamily(str, Enum):
    """Integration-code families selected by the active profile."""

    RELATIONAL = "relational"
    DOCUMENT = "document"
    CACHE = "cache"


DOCUMENT_PROFILE = StoreProfile.MONGODB
CACHE_PROFILE = StoreProfile.REDIS


def family_for(profile: StoreProfile | str | None) -> StoreFamily:
    """Map a profile (or none) to the store family that serves it."""
    if profile == CACHE_PROFILE:
        return StoreFamily.CACHE
    if profile == DOCUMENT_PROFILE:
        return StoreFamily.DOCUMENT
    return StoreFamily.RELATIONAL


# Checked in order; a process with no cache or document profile is relational.
FAMILY_PRECEDENCE: tuple[StoreFamily, ...] = (StoreFamily.CACHE, StoreFamily.DOCUMENT)


def active_family(profiles: Iterable[str]) -> StoreFamily:
    """The store family wired for a set of active profiles.

    Unknown profile names are ignored.  If both a cache and a document
    profile are active, the cache family wins.
    """
    families = {family_for(p) for p in map(str, profiles) if p in StoreProfile.names()}
    for family in FAMILY_PRECEDENCE:
        if family in families:
            return family
    return StoreFamily.RELATIONAL


# ── Service-tag rules ────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class ProfileRule:
    """Service tags a binding must carry to imply *profile*."""

    profile: StoreProfile
    required_tags: frozenset[str]

    def __post_init__(self) -> None:
        if not self.required_tags:
            raise ValueError(f"Profile rule for {self.profile} needs at least one tag")

    def matches(self, tags: Iterable[str]) -> bool:
        """True when *tags* contains every required tag; extra tags are ignored."""
        return self.required_tags <= frozenset(tags)


def _build_rules() -> Mapping[StoreProfile, ProfileRule]:
    return MappingProxyType(
        {profile: ProfileRule(profile, frozenset({profile.value})) for profile in StoreProfile}
    )


PROFILE_RULES: Mapping[StoreProfile, ProfileRule] = _build_rules()


def describe_rules(rules: Mapping[StoreProfile, ProfileRule]) -> dict[str, list[str]]:
    """Render a rule table as ``{profile: [tags]}`` for messages and output."""
    return {str(profile): sorted(rule.required_tags) for profile, rule in rules.items()}


# ── Auto-configuration unit groups ───────────────────────────────────────

DATASOURCE_UNIT = "datasource"
DATASOURCE_REPOSITORIES_UNIT = "datasource.repositories"
MONGO_UNIT = "mongo"
MONGO_DATA_UNIT = "mongo.data"
MONGO_REPOSITORIES_UNIT = "mongo.repositories"
REDIS_UNIT = "redis"
REDIS_REPOSITORIES_UNIT = "redis.repositories"

RELATIONAL_UNITS: tuple[str, ...] = (DATASOURCE_UNIT,)
DOCUMENT_UNITS: tuple[str, ...] = (MONGO_UNIT, MONGO_DATA_UNIT, MONGO_REPOSITORIES_UNIT)
CACHE_UNITS: tuple[str, ...] = (REDIS_UNIT, REDIS_REPOSITORIES_UNIT)

EXCLUDED_GROUPS: Mapping[StoreFamily, tuple[tuple[str, ...], ...]] = MappingProxyType(
    {
        StoreFamily.CACHE: (RELATIONAL_UNITS, DOCUMENT_UNITS),
        StoreFamily.DOCUMENT: (RELATIONAL_UNITS, CACHE_UNITS),
        StoreFamily.RELATIONAL: (DOCUMENT_UNITS, CACHE_UNITS),
    }
)
