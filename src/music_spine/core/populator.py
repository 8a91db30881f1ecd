"""
One-shot seed loader for the album store.

Reads a static JSON catalog (a list of album objects, or a single album
object) and saves it into an :class:`AlbumRepository`.  Nothing is saved
unless the repository is empty, so a restart never duplicates data.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from music_spine.core.albums import Album
from music_spine.core.errors import InvalidConfigError
from music_spine.core.logging import get_logger
from music_spine.core.repositories import AlbumRepository

logger = get_logger(__name__)

DATA_DIR = Path(__file__).resolve().parent.parent / "data"


def default_catalog() -> Path:
    """The album catalog shipped with the package."""
    return DATA_DIR / "albums.json"


class AlbumRepositoryPopulator:
    """Populate an empty repository from a JSON catalog."""

    def __init__(self, source: Path | None = None) -> None:
        self.source = source if source is not None else default_catalog()

    def populate_if_empty(self, repository: AlbumRepository) -> int:
        """Seed *repository* when ``count() == 0``; return the number saved."""
        if repository.count() != 0:
            logger.debug("album_seed_skipped", reason="repository not empty")
            return 0
        saved = self.populate(repository)
        logger.info("album_seed_loaded", count=saved, source=str(self.source))
        return saved

    def populate(self, repository: AlbumRepository) -> int:
        """Save every non-null catalog record, in catalog order."""
        entity = self._read_catalog()
        if isinstance(entity, list):
            albums = [album for album in entity if album is not None]
            repository.save_all(albums)
            return len(albums)
        repository.save(entity)
        return 1

    def _read_catalog(self) -> list[Album | None] | Album:
        try:
            raw: Any = json.loads(self.source.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise InvalidConfigError(
                "seed_data", str(self.source), f"Cannot read album catalog {self.source}: {exc}",
                cause=exc,
            ) from exc
        try:
            if isinstance(raw, list):
                return [None if item is None else Album.model_validate(item) for item in raw]
            return Album.model_validate(raw)
        except PydanticValidationError as exc:
            raise InvalidConfigError(
                "seed_data", str(self.source), f"Album catalog {self.source} is malformed",
                cause=exc,
            ) from exc
