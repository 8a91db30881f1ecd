"""
Process bootstrap: assemble the :class:`Environment` and resolve the store profile.

Order of work::

    build_environment()          pre-set profiles, systemEnvironment, applicationConfig
    validate_active_profiles()   fails before VCAP_SERVICES is read
    attach_service_bindings()    VCAP_SERVICES → bindings + vcapServices source
    initialize()                 infer the bound profile, publish exclusions

Property-source precedence after bootstrap (highest first)::

    storeProfileAutoConfig   added by exclude_auto_configuration()
    systemEnvironment        os.environ (relaxed lookup)
    vcapServices             flattened service bindings
    applicationConfig        merged .env files, plus MUSIC_DATASOURCE_URL as datasource.url
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping
from pathlib import Path

from .bindings import ServiceBinding, discover_service_bindings, flatten_service_bindings
from .environment import Environment, PropertySource, SystemEnvironmentPropertySource
from .loader import discover_env_files, load_env_files
from .resolver import ResolutionResult, initialize, validate_active_profiles
from .settings import MusicSpineSettings

SYSTEM_ENVIRONMENT_SOURCE = "systemEnvironment"
VCAP_SOURCE = "vcapServices"
APPLICATION_CONFIG_SOURCE = "applicationConfig"


def build_environment(
    settings: MusicSpineSettings,
    *,
    environ: Mapping[str, str] | None = None,
    project_root: Path | None = None,
) -> Environment:
    """Build the pre-resolution environment, without any service bindings."""
    environ = dict(os.environ if environ is None else environ)
    profiles = list(settings.profiles_active)

    application_config: dict[str, object] = dict(
        load_env_files(discover_env_files(project_root, profiles))
    )
    if settings.datasource_url:
        application_config["datasource.url"] = settings.datasource_url

    return Environment(
        active_profiles=profiles,
        property_sources=[
            SystemEnvironmentPropertySource(SYSTEM_ENVIRONMENT_SOURCE, environ),
            PropertySource(APPLICATION_CONFIG_SOURCE, application_config),
        ],
    )


def attach_service_bindings(environment: Environment, bindings: Iterable[ServiceBinding]) -> None:
    """Record *bindings* and expose them as ``vcap.services.*`` below the system environment."""
    environment.service_bindings = tuple(bindings)
    environment.property_sources.add_after(
        SYSTEM_ENVIRONMENT_SOURCE,
        PropertySource(VCAP_SOURCE, flatten_service_bindings(environment.service_bindings)),
    )


def bootstrap_environment(
    settings: MusicSpineSettings,
    *,
    environ: Mapping[str, str] | None = None,
    bindings: Iterable[ServiceBinding] | None = None,
    project_root: Path | None = None,
) -> tuple[Environment, ResolutionResult]:
    """Build the environment and run profile resolution on it.

    ``VCAP_SERVICES`` is only parsed once the pre-set profiles have been
    validated, so a manual conflict is reported even when the payload is
    malformed.

    Raises:
        ConflictingManualProfilesError: more than one store profile pre-set.
        ConflictingInferredProfilesError: bound services imply more than one store.
        InvalidConfigError: ``VCAP_SERVICES`` could not be parsed.
    """
    environ = dict(os.environ if environ is None else environ)
    environment = build_environment(settings, environ=environ, project_root=project_root)
    validate_active_profiles(environment)

    if bindings is None:
        bindings = discover_service_bindings(environ)
    attach_service_bindings(environment, bindings)

    result = initialize(environment)
    return environment, result
