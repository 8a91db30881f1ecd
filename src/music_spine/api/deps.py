"""
FastAPI dependency injection — process-wide singletons set up by ``create_app``.

Usage in routers::

    from music_spine.api.deps import Env

    @router.get("/things")
    def list_things(env: Env):
        ...
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from music_spine.core.autoconfigure import AutoConfigured
from music_spine.core.config.environment import Environment
from music_spine.core.config.resolver import ResolutionResult
from music_spine.core.config.settings import MusicSpineSettings
from music_spine.core.config.settings import get_settings as _load_settings


def get_settings(request: Request) -> MusicSpineSettings:
    """Settings stashed on the app, falling back to the cached singleton."""
    return getattr(request.app.state, "settings", None) or _load_settings()


def get_environment(request: Request) -> Environment:
    """The environment resolved at startup (read-only from here on)."""
    return request.app.state.environment


def get_resolution(request: Request) -> ResolutionResult:
    return request.app.state.resolution


def get_components(request: Request) -> AutoConfigured:
    return request.app.state.components


# ── Convenience type aliases ─────────────────────────────────────────────

Settings = Annotated[MusicSpineSettings, Depends(get_settings)]
Env = Annotated[Environment, Depends(get_environment)]
Resolution = Annotated[ResolutionResult, Depends(get_resolution)]
Components = Annotated[AutoConfigured, Depends(get_components)]
