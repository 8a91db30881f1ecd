"""
The mutable configuration object the bootstrap steps operate on.

An :class:`Environment` holds the ordered list of active profiles, an
ordered list of property sources (first match wins), and the service
bindings discovered for the process.  It is assembled once by
:func:`~music_spine.core.config.bootstrap.bootstrap_environment` and
treated as read-only once bootstrap has finished.

Example::

    env = Environment(active_profiles=["dev"])
    env.property_sources.add_last(PropertySource("defaults", {"a.b": "1"}))
    env.property_sources.add_first(PropertySource("overrides", {"a.b": "2"}))
    env.get_property("a.b")   # "2"
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .bindings import ServiceBinding

_RELAXED_RE = re.compile(r"[.\-\[\]]+")


@dataclass(frozen=True)
class PropertySource:
    """A named, read-only mapping of configuration properties."""

    name: str
    properties: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.properties, MappingProxyType):
            object.__setattr__(self, "properties", MappingProxyType(dict(self.properties)))

    def contains(self, key: str) -> bool:
        return key in self.properties

    def get(self, key: str) -> Any | None:
        return self.properties.get(key)


@dataclass(frozen=True)
class SystemEnvironmentPropertySource(PropertySource):
    """Property source over process environment variables.

    Lookups are relaxed: ``datasource.url`` also matches ``DATASOURCE_URL``.
    """

    def _candidates(self, key: str) -> tuple[str, ...]:
        relaxed = _RELAXED_RE.sub("_", key).strip("_")
        return (key, relaxed, relaxed.upper())

    def contains(self, key: str) -> bool:
        return any(candidate in self.properties for candidate in self._candidates(key))

    def get(self, key: str) -> Any | None:
        for candidate in self._candidates(key):
            if candidate in self.properties:
                return self.properties[candidate]
        return None


class PropertySources:
    """Ordered property sources; index 0 has the highest precedence."""

    def __init__(self, sources: Iterable[PropertySource] = ()) -> None:
        self._sources: list[PropertySource] = []
        for source in sources:
            self.add_last(source)

    def add_first(self, source: PropertySource) -> None:
        self._remove(source.name)
        self._sources.insert(0, source)

    def add_last(self, source: PropertySource) -> None:
        self._remove(source.name)
        self._sources.append(source)

    def add_after(self, anchor: str, source: PropertySource) -> None:
        """Insert *source* just below *anchor*; append when *anchor* is absent."""
        self._remove(source.name)
        names = self.names()
        index = names.index(anchor) + 1 if anchor in names else len(names)
        self._sources.insert(index, source)

    def get(self, name: str) -> PropertySource | None:
        for source in self._sources:
            if source.name == name:
                return source
        return None

    def names(self) -> list[str]:
        return [source.name for source in self._sources]

    def _remove(self, name: str) -> None:
        self._sources = [s for s in self._sources if s.name != name]

    def __iter__(self) -> Iterator[PropertySource]:
        return iter(tuple(self._sources))

    def __len__(self) -> int:
        return len(self._sources)

    def __contains__(self, name: object) -> bool:
        return any(source.name == name for source in self._sources)


class Environment:
    """Active profiles, property sources, and service bindings for one process."""

    def __init__(
        self,
        active_profiles: Iterable[str] = (),
        property_sources: Iterable[PropertySource] = (),
        service_bindings: Iterable[ServiceBinding] = (),
    ) -> None:
        self._active_profiles: list[str] = []
        for profile in active_profiles:
            self.add_active_profile(profile)
        self.property_sources = PropertySources(property_sources)
        self.service_bindings: tuple[ServiceBinding, ...] = tuple(service_bindings)

    # ── Profiles ─────────────────────────────────────────────────

    @property
    def active_profiles(self) -> tuple[str, ...]:
        return tuple(self._active_profiles)

    def add_active_profile(self, profile: str) -> None:
        """Activate *profile*; activating it twice is a no-op."""
        name = str(profile).strip()
        if name and name not in self._active_profiles:
            self._active_profiles.append(name)

    def accepts_profile(self, profile: str) -> bool:
        return str(profile) in self._active_profiles

    # ── Properties ───────────────────────────────────────────────

    def contains_property(self, key: str) -> bool:
        return any(source.contains(key) for source in self.property_sources)

    def get_property(self, key: str, default: Any | None = None) -> Any | None:
        """Return the value from the first property source that has *key*."""
        for source in self.property_sources:
            if source.contains(key):
                return source.get(key)
        return default

    def __repr__(self) -> str:
        return (
            f"Environment(active_profiles={list(self._active_profiles)!r}, "
            f"property_sources={self.property_sources.names()!r})"
        )
