"""
Backing-store profile resolution.

Manifesto:
    Exactly one backing store may be wired into a process.  The choice
    comes either from a pre-set profile or from the services the platform
    has bound, and a conflict in either is fatal: a process that silently
    picked "the first" store would write data to the wrong place.

Runs once during bootstrap, in order, on the same :class:`Environment`::

    validate_active_profiles()     pre-set profiles: at most one store
            ↓
    add_service_profile()          bound services: at most one store,
            ↓                      activated as a profile
    exclude_auto_configuration()   suppress every other store's units
                                   via the highest-precedence source

Example::

    env = Environment()
    result = initialize(env, discover_service_bindings())
    result.profile        # StoreProfile.MONGODB or None
    result.exclusions     # ("datasource", "redis", "redis.repositories")

Tags:
    music-spine, configuration, profiles, service-bindings, bootstrap
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from music_spine.core.errors import (
    ConflictingInferredProfilesError,
    ConflictingManualProfilesError,
)
from music_spine.core.logging import get_logger

from .bindings import ServiceBinding
from .components import (
    EXCLUDED_GROUPS,
    PROFILE_RULES,
    ProfileRule,
    StoreProfile,
    active_family,
    describe_rules,
)
from .environment import Environment, PropertySource

logger = get_logger(__name__)

AUTOCONFIGURE_EXCLUDE_KEY = "autoconfigure.exclude"
AUTOCONFIG_SOURCE_NAME = "storeProfileAutoConfig"


@dataclass(frozen=True, slots=True)
class ResolutionResult:
    """Outcome of :func:`initialize`."""

    profile: StoreProfile | None
    active_profiles: tuple[str, ...]
    exclusions: tuple[str, ...]


# ── Step 1: pre-set profiles ─────────────────────────────────────────────


def validate_active_profiles(
    environment: Environment,
    rules: Mapping[StoreProfile, ProfileRule] = PROFILE_RULES,
) -> None:
    """Reject more than one store profile among the already-active profiles."""
    known = {str(profile) for profile in rules}
    selected = [p for p in environment.active_profiles if p in known]
    if len(selected) > 1:
        raise ConflictingManualProfilesError(known, selected)


# ── Step 2: bound services ───────────────────────────────────────────────


def infer_service_profiles(
    bindings: Iterable[ServiceBinding],
    rules: Mapping[StoreProfile, ProfileRule] = PROFILE_RULES,
) -> frozenset[StoreProfile]:
    """Return every profile implied by at least one binding."""
    implied: set[StoreProfile] = set()
    for binding in bindings:
        for profile, rule in rules.items():
            if rule.matches(binding.tags):
                implied.add(profile)
    return frozenset(implied)


def add_service_profile(
    environment: Environment,
    bindings: Iterable[ServiceBinding],
    rules: Mapping[StoreProfile, ProfileRule] = PROFILE_RULES,
) -> StoreProfile | None:
    """Activate the single profile implied by *bindings*, if any.

    Raises:
        ConflictingInferredProfilesError: if the bindings imply two or
            more distinct profiles.  The environment is left untouched.
    """
    bindings = tuple(bindings)
    logger.info("service_bindings_found", services=[b.name for b in bindings])

    implied = infer_service_profiles(bindings, rules)
    if len(implied) > 1:
        raise ConflictingInferredProfilesError(describe_rules(rules), implied)
    if not implied:
        return None

    (profile,) = implied
    logger.info("service_profile_set", profile=str(profile))
    environment.add_active_profile(str(profile))
    return profile


# ── Step 3: auto-configuration exclusions ────────────────────────────────


def compute_exclusions(environment: Environment) -> tuple[str, ...]:
    """Return the auto-configuration units to suppress, in a stable order."""
    ordered: dict[str, None] = {}
    for group in EXCLUDED_GROUPS[active_family(environment.active_profiles)]:
        ordered.update(dict.fromkeys(group))
    return tuple(ordered)


def exclude_auto_configuration(environment: Environment) -> tuple[str, ...]:
    """Publish the exclusions as the highest-precedence property source."""
    exclusions = compute_exclusions(environment)
    environment.property_sources.add_first(
        PropertySource(
            AUTOCONFIG_SOURCE_NAME,
            {AUTOCONFIGURE_EXCLUDE_KEY: ",".join(exclusions)},
        )
    )
    logger.info("auto_configuration_excluded", units=list(exclusions))
    return exclusions


# ── Orchestration ────────────────────────────────────────────────────────


def initialize(
    environment: Environment,
    bindings: Iterable[ServiceBinding] | None = None,
    rules: Mapping[StoreProfile, ProfileRule] = PROFILE_RULES,
) -> ResolutionResult:
    """Validate, infer, and exclude, in that order.

    *bindings* defaults to ``environment.service_bindings``.  Profile
    conflicts propagate; callers must not continue wiring the process.
    """
    validate_active_profiles(environment, rules)
    profile = add_service_profile(
        environment,
        environment.service_bindings if bindings is None else bindings,
        rules,
    )
    exclusions = exclude_auto_configuration(environment)
    return ResolutionResult(
        profile=profile,
        active_profiles=environment.active_profiles,
        exclusions=exclusions,
    )
