"""
Structured error types for music-spine.

Every failure the bootstrap layer can raise is a :class:`MusicSpineError`
carrying a category, a retry flag, and structured context, so that the
process entry points (``create_app``, the CLI) can report it uniformly.

Manifesto:
    - **Typed Error Hierarchy:** one class per failure mode
    - **Explicit Retry Semantics:** configuration errors are never retryable
    - **Rich Context:** conflicting profiles travel with the error
    - **Error Chaining:** parse failures keep their original exception

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────┐
        │                    MusicSpineError                        │
        │        (category, retryable, context, cause)              │
        ├──────────────────────────────────────────────────────────┤
        │  ConfigError (CONFIG, never retryable)                    │
        │     │                                                     │
        │     ├── InvalidConfigError                                │
        │     ├── AutoConfigurationError                            │
        │     └── ProfileConflictError                              │
        │            ├── ConflictingManualProfilesError             │
        │            └── ConflictingInferredProfilesError           │
        └──────────────────────────────────────────────────────────┘

Examples:
    >>> error = ConflictingManualProfilesError(["mongodb", "redis"], ["postgres", "redis"])
    >>> error.retryable
    False
    >>> error.conflicting
    ('postgres', 'redis')

Tags:
    error-handling, exception-hierarchy, profiles, bootstrap, music-spine

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing."""

    CONFIG = "CONFIG"             # Missing config, invalid settings, profile conflicts
    VALIDATION = "VALIDATION"     # Malformed input data
    DATABASE = "DATABASE"         # Backing-store client failures
    INTERNAL = "INTERNAL"         # Bugs, unexpected state
    UNKNOWN = "UNKNOWN"           # Uncategorized errors


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Only non-``None`` fields end up in :meth:`to_dict`, so the same
    context class serves profile conflicts, binding parse failures, and
    auto-configuration failures.

    Attributes:
        key: Configuration key or environment variable involved
        profiles: Profiles relevant to the failure
        service: Name of the bound service involved
        unit: Auto-configuration unit identifier
        metadata: Additional key-value pairs
    """

    key: str | None = None
    profiles: list[str] | None = None
    service: str | None = None
    unit: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result: dict[str, Any] = {}
        for key in ["key", "profiles", "service", "unit"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class MusicSpineError(Exception):
    """
    Base exception for all music-spine errors.

    Subclasses set ``default_category`` and ``default_retryable`` so that
    callers rarely pass them explicitly.

    Examples:
        >>> error = MusicSpineError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.with_context(service="my-db").context.service
        'my-db'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> MusicSpineError:
        """
        Add context to this error (fluent API).

        Usage:
            raise InvalidConfigError("VCAP_SERVICES", raw).with_context(service="my-db")
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(MusicSpineError):
    """
    Configuration error.

    Never retryable - configuration must be fixed.
    """

    default_category = ErrorCategory.CONFIG
    default_retryable = False


class InvalidConfigError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: Any, message: str | None = None, **kwargs: Any):
        self.key = key
        self.value = value
        super().__init__(message or f"Invalid configuration for {key}: {value!r}", **kwargs)
        self.context.key = key


class AutoConfigurationError(ConfigError):
    """A non-excluded auto-configuration unit could not be built."""

    def __init__(self, unit: str, message: str, **kwargs: Any):
        self.unit = unit
        super().__init__(message, **kwargs)
        self.context.unit = unit


class ProfileConflictError(ConfigError):
    """
    More than one backing-store profile was selected.

    Carries the closed set of known profiles and the offending subset.
    Both are stored as sorted tuples so the message is stable across runs.
    """

    def __init__(
        self,
        message: str,
        *,
        known_profiles: Iterable[str],
        conflicting: Iterable[str],
        **kwargs: Any,
    ):
        self.known_profiles = tuple(sorted(str(p) for p in known_profiles))
        self.conflicting = tuple(sorted(str(p) for p in conflicting))
        super().__init__(message, **kwargs)
        self.context.profiles = list(self.conflicting)


class ConflictingManualProfilesError(ProfileConflictError):
    """More than one known store profile is among the pre-set active profiles."""

    def __init__(self, known_profiles: Iterable[str], conflicting: Iterable[str]):
        known = sorted(str(p) for p in known_profiles)
        active = sorted(str(p) for p in conflicting)
        super().__init__(
            "Only one active profile may be set among the following: "
            f"[{', '.join(known)}]. These profiles are active: [{', '.join(active)}]",
            known_profiles=known,
            conflicting=active,
        )


class ConflictingInferredProfilesError(ProfileConflictError):
    """The bound services imply more than one store profile."""

    def __init__(
        self,
        rules: dict[str, Iterable[str]],
        conflicting: Iterable[str],
    ):
        table = ", ".join(
            f"{name}={sorted(tags)}" for name, tags in sorted(rules.items())
        )
        bound = sorted(str(p) for p in conflicting)
        super().__init__(
            "Only one service of the following types may be bound to this application: "
            f"[{table}]. These services are bound to the application: [{', '.join(bound)}]",
            known_profiles=rules.keys(),
            conflicting=bound,
        )
        self.rules = {name: tuple(sorted(tags)) for name, tags in rules.items()}


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def is_retryable(error: Exception) -> bool:
    """Check if an error is retryable."""
    if isinstance(error, MusicSpineError):
        return error.retryable
    return isinstance(error, (ConnectionError, TimeoutError))


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "MusicSpineError",
    "ConfigError",
    "InvalidConfigError",
    "AutoConfigurationError",
    "ProfileConflictError",
    "ConflictingManualProfilesError",
    "ConflictingInferredProfilesError",
    "is_retryable",
]
