"""
Album repositories, one per backing-store family.

Every repository satisfies the :class:`AlbumRepository` protocol, which is
all the seed loader needs.  The concrete class is chosen by
auto-configuration, never by application code.

Architecture::

    AlbumRepository (protocol)
        count() / save(album) / save_all(albums) / find_all()
            │
            ├── InMemoryAlbumRepository   no store bound
            ├── SqlAlbumRepository        SQLAlchemy engine
            ├── MongoAlbumRepository      pymongo database
            └── RedisAlbumRepository      redis hash "albums"
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from typing import Any, Protocol, runtime_checkable

from sqlalchemy import Integer, Text, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column

from music_spine.core.albums import Album


@runtime_checkable
class AlbumRepository(Protocol):
    """Persistence interface used by the seed loader."""

    def count(self) -> int:
        """Number of stored albums."""

    def save(self, album: Album) -> Album:
        """Insert or replace *album*."""

    def save_all(self, albums: Iterable[Album]) -> list[Album]:
        """Save each album in order."""

    def find_all(self) -> list[Album]:
        """Every stored album."""


class _SaveAllMixin:
    def save_all(self, albums: Iterable[Album]) -> list[Album]:
        return [self.save(album) for album in albums]  # type: ignore[attr-defined]


# ── In-memory ────────────────────────────────────────────────────────────


class InMemoryAlbumRepository(_SaveAllMixin):
    """Dict-backed repository preserving insertion order."""

    def __init__(self) -> None:
        self._albums: dict[str, Album] = {}

    def count(self) -> int:
        return len(self._albums)

    def save(self, album: Album) -> Album:
        self._albums[album.id] = album
        return album

    def find_all(self) -> list[Album]:
        return list(self._albums.values())


# ── Relational (SQLAlchemy) ──────────────────────────────────────────────


class AlbumBase(DeclarativeBase):
    """Declarative base for the relational album table."""

    type_annotation_map = {
        str: Text,
        int: Integer,
    }


class AlbumRecord(AlbumBase):
    __tablename__ = "album"

    id: Mapped[str] = mapped_column(primary_key=True)
    title: Mapped[str | None]
    artist: Mapped[str | None]
    release_year: Mapped[str | None]
    genre: Mapped[str | None]
    track_count: Mapped[int] = mapped_column(default=0)
    album_id: Mapped[str | None]

    @classmethod
    def from_album(cls, album: Album) -> AlbumRecord:
        return cls(**album.model_dump())

    def to_album(self) -> Album:
        return Album(
            id=self.id,
            title=self.title,
            artist=self.artist,
            release_year=self.release_year,
            genre=self.genre,
            track_count=self.track_count,
            album_id=self.album_id,
        )


class SqlAlbumRepository(_SaveAllMixin):
    """Repository over a SQLAlchemy engine; creates the table on first use."""

    def __init__(self, engine: Engine, *, create_schema: bool = True) -> None:
        self.engine = engine
        if create_schema:
            AlbumBase.metadata.create_all(engine)

    def count(self) -> int:
        with Session(self.engine) as session:
            return session.scalar(select(func.count()).select_from(AlbumRecord)) or 0

    def save(self, album: Album) -> Album:
        with Session(self.engine) as session, session.begin():
            session.merge(AlbumRecord.from_album(album))
        return album

    def find_all(self) -> list[Album]:
        with Session(self.engine) as session:
            records = session.scalars(select(AlbumRecord).order_by(AlbumRecord.title)).all()
            return [record.to_album() for record in records]


# ── Document store (pymongo) ─────────────────────────────────────────────


class MongoAlbumRepository(_SaveAllMixin):
    """Repository over a pymongo ``Database``; albums live in ``album``."""

    collection_name = "album"

    def __init__(self, database: Any) -> None:
        self.collection = database[self.collection_name]

    def count(self) -> int:
        return int(self.collection.count_documents({}))

    def save(self, album: Album) -> Album:
        document = album.to_document()
        document["_id"] = document.pop("id")
        self.collection.replace_one({"_id": document["_id"]}, document, upsert=True)
        return album

    def find_all(self) -> list[Album]:
        albums = []
        for document in self.collection.find({}):
            document = dict(document)
            document["id"] = str(document.pop("_id"))
            albums.append(Album.model_validate(document))
        return albums


# ── Cache store (redis) ──────────────────────────────────────────────────


class RedisAlbumRepository(_SaveAllMixin):
    """Repository over a redis client; albums are JSON values in one hash."""

    def __init__(self, client: Any, key: str = "albums") -> None:
        self.client = client
        self.key = key

    def count(self) -> int:
        return int(self.client.hlen(self.key))

    def save(self, album: Album) -> Album:
        self.client.hset(self.key, album.id, json.dumps(album.to_document()))
        return album

    def find_all(self) -> list[Album]:
        return [Album.model_validate_json(raw) for raw in self.client.hvals(self.key)]


__all__ = [
    "AlbumRepository",
    "InMemoryAlbumRepository",
    "SqlAlbumRepository",
    "MongoAlbumRepository",
    "RedisAlbumRepository",
    "AlbumBase",
    "AlbumRecord",
]
