"""Album domain model."""

from __future__ import annotations

import uuid

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def _new_id() -> str:
    return uuid.uuid4().hex


class Album(BaseModel):
    """A music album.

    JSON uses camelCase (``releaseYear``, ``trackCount``, ``albumId``);
    unknown fields are ignored when reading a catalog.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    id: str = Field(default_factory=_new_id)
    title: str | None = None
    artist: str | None = None
    release_year: str | None = None
    genre: str | None = None
    track_count: int = 0
    album_id: str | None = None

    def to_document(self) -> dict[str, object]:
        """Serialise with camelCase keys, as stored in document/cache stores."""
        return self.model_dump(by_alias=True)
