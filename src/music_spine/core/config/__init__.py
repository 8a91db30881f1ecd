"""Configuration, service bindings, and backing-store profile resolution.

Manifesto:
    The process must be wired against exactly one backing store, and that
    decision must be made once, before any store client exists.  This
    package owns the decision: it reads the pre-set profiles and the
    platform's bound services, resolves a single store profile, and
    publishes the list of auto-configuration units to suppress.

Architecture::

    components.py     StoreProfile enum, PROFILE_RULES, unit groups
    environment.py    Environment + ordered PropertySources
    bindings.py       VCAP_SERVICES → ServiceBinding, vcap.services.* properties
    resolver.py       validate → infer → exclude  (initialize)
    loader.py         .env file discovery + cascading load
    settings.py       MusicSpineSettings (pydantic-settings) + get_settings()
    bootstrap.py      build_environment() → validate → attach_service_bindings() → initialize

Tags:
    music-spine, configuration, profiles, service-bindings, pydantic
"""

from .bindings import (
    ServiceBinding,
    discover_service_bindings,
    flatten_service_bindings,
    parse_service_bindings,
)
from .bootstrap import attach_service_bindings, bootstrap_environment, build_environment
from .components import (
    CACHE_UNITS,
    DOCUMENT_UNITS,
    PROFILE_RULES,
    RELATIONAL_UNITS,
    ProfileRule,
    StoreFamily,
    StoreProfile,
    active_family,
)
from .environment import Environment, PropertySource, PropertySources
from .loader import discover_env_files, find_project_root, load_env_files
from .resolver import (
    AUTOCONFIGURE_EXCLUDE_KEY,
    ResolutionResult,
    add_service_profile,
    compute_exclusions,
    exclude_auto_configuration,
    infer_service_profiles,
    initialize,
    validate_active_profiles,
)
from .settings import MusicSpineSettings, clear_settings_cache, get_settings

__all__ = [
    # Components
    "StoreProfile",
    "StoreFamily",
    "ProfileRule",
    "PROFILE_RULES",
    "active_family",
    "RELATIONAL_UNITS",
    "DOCUMENT_UNITS",
    "CACHE_UNITS",
    # Environment
    "Environment",
    "PropertySource",
    "PropertySources",
    # Bindings
    "ServiceBinding",
    "parse_service_bindings",
    "discover_service_bindings",
    "flatten_service_bindings",
    # Resolution
    "AUTOCONFIGURE_EXCLUDE_KEY",
    "ResolutionResult",
    "validate_active_profiles",
    "infer_service_profiles",
    "add_service_profile",
    "compute_exclusions",
    "exclude_auto_configuration",
    "initialize",
    # Loader
    "find_project_root",
    "discover_env_files",
    "load_env_files",
    # Settings / bootstrap
    "MusicSpineSettings",
    "get_settings",
    "clear_settings_cache",
    "build_environment",
    "attach_service_bindings",
    "bootstrap_environment",
]
