"""
REST API layer for music-spine.

Quick start::

    from music_spine.api import create_app

    app = create_app()  # ready for uvicorn

The factory bootstraps the environment first, so a profile conflict
aborts before any route or store client exists.
"""

from music_spine.api.app import create_app

__all__ = ["create_app"]
