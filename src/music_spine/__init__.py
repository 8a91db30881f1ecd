"""
music-spine - backing-store profile resolution for a sample album service.

Packages:
- music_spine.core: profile resolution, auto-configuration, persistence
- music_spine.api: FastAPI application factory
- music_spine.cli: Typer command-line interface
"""

__version__ = "0.1.0"
