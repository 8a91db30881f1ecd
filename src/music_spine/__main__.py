"""Allow ``python -m music_spine``."""

from music_spine.cli.app import app

if __name__ == "__main__":
    app()
