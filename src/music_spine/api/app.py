"""
FastAPI application factory.

``create_app()`` is the single composition root: it bootstraps the
environment (profile resolution), applies auto-configuration, and then
wires middleware, routers, error handlers, and lifespan events.

Bootstrap runs before the ``FastAPI`` instance is even created, so a
profile conflict raises out of ``create_app()`` and the process never
starts serving.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Iterable, Mapping
from contextlib import asynccontextmanager

from fastapi import FastAPI

from music_spine.api.middleware.errors import music_spine_error_handler, unhandled_exception_handler
from music_spine.api.middleware.request_id import RequestIDMiddleware
from music_spine.core.autoconfigure import AutoConfigured, apply_auto_configuration
from music_spine.core.config.bindings import ServiceBinding
from music_spine.core.config.bootstrap import bootstrap_environment
from music_spine.core.config.environment import Environment
from music_spine.core.config.resolver import initialize
from music_spine.core.config.settings import MusicSpineSettings, get_settings
from music_spine.core.errors import MusicSpineError
from music_spine.core.logging import get_logger
from music_spine.core.populator import AlbumRepositoryPopulator


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Seed the album store once, then dispose of store clients on shutdown."""
    log = get_logger("music_spine.api")
    components: AutoConfigured = app.state.components
    settings: MusicSpineSettings = app.state.settings

    log.info(
        "music-spine API starting",
        version=app.version,
        profile=str(app.state.resolution.profile) if app.state.resolution.profile else None,
    )
    AlbumRepositoryPopulator(settings.seed_data).populate_if_empty(components.album_repository)

    yield

    components.close()
    log.info("music-spine API shutting down")


def create_app(
    settings: MusicSpineSettings | None = None,
    *,
    environment: Environment | None = None,
    environ: Mapping[str, str] | None = None,
    bindings: Iterable[ServiceBinding] | None = None,
    components: AutoConfigured | None = None,
) -> FastAPI:
    """Build and return a fully-configured FastAPI application.

    Parameters
    ----------
    settings : MusicSpineSettings | None
        Override settings (useful for testing).  When ``None`` the cached
        singleton from :func:`get_settings` is used.
    environment : Environment | None
        A pre-built, not yet resolved environment.  When ``None`` one is
        built from *environ* (default ``os.environ``) and *bindings*
        (default: parsed from ``VCAP_SERVICES``).
    components : AutoConfigured | None
        Pre-built store components; skips auto-configuration.

    Raises
    ------
    ConflictingManualProfilesError, ConflictingInferredProfilesError
        The process must not start.
    """
    settings = settings or get_settings()

    if environment is None:
        environment, resolution = bootstrap_environment(
            settings, environ=environ, bindings=bindings
        )
    else:
        resolution = initialize(environment, bindings)

    if components is None:
        components = apply_auto_configuration(environment)

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.environment = environment
    app.state.resolution = resolution
    app.state.components = components

    # ── Middleware ───────────────────────────────────────────────────
    app.add_middleware(RequestIDMiddleware)

    # ── Exception handlers ───────────────────────────────────────────
    app.add_exception_handler(MusicSpineError, music_spine_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # ── Routers ──────────────────────────────────────────────────────
    from music_spine.api.routers import cups, info

    app.include_router(cups.router, tags=["credentials"])
    app.include_router(info.router, tags=["info"])

    return app
