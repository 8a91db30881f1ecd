"""
Service-binding discovery from the hosting platform.

The platform describes every bound service instance in the
``VCAP_SERVICES`` environment variable, a JSON object keyed by service
label::

    {
      "mongodb": [
        {"name": "my-db", "label": "mongodb", "plan": "shared",
         "tags": ["mongodb", "nosql"], "credentials": {"uri": "mongodb://..."}}
      ]
    }

:func:`discover_service_bindings` turns that payload into immutable
:class:`ServiceBinding` records, and :func:`flatten_service_bindings`
exposes them as ``vcap.services.<name>.*`` configuration properties.
"""

from __future__ import annotations

import json
import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from music_spine.core.errors import InvalidConfigError

VCAP_SERVICES_ENV = "VCAP_SERVICES"
VCAP_PROPERTY_PREFIX = "vcap.services"


class _ServiceEntry(BaseModel):
    """One service instance as it appears in ``VCAP_SERVICES``."""

    model_config = ConfigDict(extra="ignore")

    name: str
    label: str | None = None
    plan: str | None = None
    tags: list[str] = Field(default_factory=list)
    credentials: dict[str, Any] = Field(default_factory=dict)


_VCAP_ADAPTER = TypeAdapter(dict[str, list[_ServiceEntry]])


@dataclass(frozen=True)
class ServiceBinding:
    """A bound external service instance: a name plus capability tags."""

    name: str
    tags: frozenset[str] = frozenset()
    label: str | None = None
    plan: str | None = None
    credentials: Mapping[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "tags", frozenset(self.tags))
        object.__setattr__(self, "credentials", MappingProxyType(dict(self.credentials)))

    def credential(self, *keys: str) -> Any | None:
        """Return the first credential present among *keys*."""
        for key in keys:
            value = self.credentials.get(key)
            if value:
                return value
        return None


def parse_service_bindings(payload: str) -> tuple[ServiceBinding, ...]:
    """Parse a ``VCAP_SERVICES`` JSON document.

    Bindings are returned grouped by label in document order.

    Raises:
        InvalidConfigError: if the payload is not valid JSON or has the
            wrong shape.
    """
    if not payload.strip():
        return ()
    try:
        document = json.loads(payload)
    except json.JSONDecodeError as exc:
        raise InvalidConfigError(
            VCAP_SERVICES_ENV,
            payload[:80],
            f"{VCAP_SERVICES_ENV} is not valid JSON: {exc.msg}",
            cause=exc,
        ) from exc
    try:
        entries = _VCAP_ADAPTER.validate_python(document)
    except PydanticValidationError as exc:
        raise InvalidConfigError(
            VCAP_SERVICES_ENV,
            payload[:80],
            f"{VCAP_SERVICES_ENV} has an unexpected shape: {exc.error_count()} error(s)",
            cause=exc,
        ) from exc

    bindings: list[ServiceBinding] = []
    for label, services in entries.items():
        for service in services:
            bindings.append(
                ServiceBinding(
                    name=service.name,
                    tags=frozenset(service.tags),
                    label=service.label or label,
                    plan=service.plan,
                    credentials=service.credentials,
                )
            )
    return tuple(bindings)


def discover_service_bindings(environ: Mapping[str, str] | None = None) -> tuple[ServiceBinding, ...]:
    """Read the bindings visible to this process (empty when none are bound)."""
    source = os.environ if environ is None else environ
    return parse_service_bindings(source.get(VCAP_SERVICES_ENV, ""))


def _flatten(prefix: str, value: Any, out: dict[str, Any]) -> None:
    if isinstance(value, Mapping):
        for key, item in value.items():
            _flatten(f"{prefix}.{key}", item, out)
    elif isinstance(value, (list, tuple)):
        for index, item in enumerate(value):
            _flatten(f"{prefix}[{index}]", item, out)
    else:
        out[prefix] = value


def flatten_service_bindings(bindings: Iterable[ServiceBinding]) -> dict[str, Any]:
    """Expose bindings as ``vcap.services.<name>.*`` properties.

    ``credentials`` are flattened with ``.`` for nested objects and
    ``[i]`` for list items, e.g.
    ``vcap.services.my-redis.credentials.password``.
    """
    properties: dict[str, Any] = {}
    for binding in bindings:
        base = f"{VCAP_PROPERTY_PREFIX}.{binding.name}"
        properties[f"{base}.name"] = binding.name
        if binding.label is not None:
            properties[f"{base}.label"] = binding.label
        if binding.plan is not None:
            properties[f"{base}.plan"] = binding.plan
        if binding.tags:
            properties[f"{base}.tags"] = ",".join(sorted(binding.tags))
        _flatten(f"{base}.credentials", dict(binding.credentials), properties)
    return properties
