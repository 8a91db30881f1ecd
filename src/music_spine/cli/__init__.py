"""
CLI layer for music-spine.

Entry point::

    music-spine --help
"""

from music_spine.cli.app import app

__all__ = ["app"]
