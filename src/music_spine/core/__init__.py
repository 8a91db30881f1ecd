"""
Core primitives for music-spine.

Quick start::

    from music_spine.core import bootstrap_environment, get_settings

    environment, result = bootstrap_environment(get_settings())
    print(result.profile, result.exclusions)
"""

from music_spine.core.config import (
    Environment,
    ResolutionResult,
    ServiceBinding,
    StoreProfile,
    bootstrap_environment,
    get_settings,
    initialize,
)
from music_spine.core.errors import (
    ConfigError,
    ConflictingInferredProfilesError,
    ConflictingManualProfilesError,
    MusicSpineError,
)

__all__ = [
    "Environment",
    "ResolutionResult",
    "ServiceBinding",
    "StoreProfile",
    "bootstrap_environment",
    "get_settings",
    "initialize",
    "ConfigError",
    "ConflictingInferredProfilesError",
    "ConflictingManualProfilesError",
    "MusicSpineError",
]
