"""Tests for music_spine.core.populator — seeding an empty album store."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from music_spine.core.albums import Album
from music_spine.core.errors import InvalidConfigError
from music_spine.core.populator import AlbumRepositoryPopulator, default_catalog
from music_spine.core.repositories import InMemoryAlbumRepository


class RecordingRepository(InMemoryAlbumRepository):
    """In-memory repository that records every save call."""

    def __init__(self, preloaded: int = 0) -> None:
        super().__init__()
        self.saved: list[Album] = []
        for i in range(preloaded):
            super().save(Album(title=f"existing-{i}"))

    def save(self, album: Album) -> Album:
        self.saved.append(album)
        return super().save(album)


def _write(path: Path, payload: object) -> Path:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


class TestDefaultCatalog:
    def test_packaged_catalog(self):
        records = json.loads(default_catalog().read_text(encoding="utf-8"))
        assert isinstance(records, list)
        assert len(records) > 0
        assert all("title" in r for r in records)

    def test_seeds_from_packaged_catalog(self):
        repo = RecordingRepository()
        saved = AlbumRepositoryPopulator().populate_if_empty(repo)
        assert saved == repo.count() > 0


class TestPopulateIfEmpty:
    def test_list_saved_in_order(self, tmp_path):
        source = _write(
            tmp_path / "albums.json",
            [{"title": "First"}, {"title": "Second"}, {"title": "Third"}],
        )
        repo = RecordingRepository()
        assert AlbumRepositoryPopulator(source).populate_if_empty(repo) == 3
        assert [a.title for a in repo.saved] == ["First", "Second", "Third"]

    def test_nulls_skipped(self, tmp_path):
        source = _write(tmp_path / "albums.json", [{"title": "A"}, None, {"title": "B"}])
        repo = RecordingRepository()
        assert AlbumRepositoryPopulator(source).populate_if_empty(repo) == 2
        assert [a.title for a in repo.saved] == ["A", "B"]

    def test_single_object(self, tmp_path):
        source = _write(tmp_path / "album.json", {"title": "Only", "trackCount": 9})
        repo = RecordingRepository()
        assert AlbumRepositoryPopulator(source).populate_if_empty(repo) == 1
        assert repo.saved[0].track_count == 9

    def test_non_empty_repository_untouched(self, tmp_path):
        source = _write(tmp_path / "albums.json", [{"title": "A"}])
        repo = RecordingRepository(preloaded=1)
        assert AlbumRepositoryPopulator(source).populate_if_empty(repo) == 0
        assert repo.saved == []
        assert repo.count() == 1

    def test_second_run_is_a_no_op(self, tmp_path):
        source = _write(tmp_path / "albums.json", [{"title": "A"}, {"title": "B"}])
        repo = RecordingRepository()
        populator = AlbumRepositoryPopulator(source)
        populator.populate_if_empty(repo)
        assert populator.populate_if_empty(repo) == 0
        assert repo.count() == 2

    def test_empty_list(self, tmp_path):
        source = _write(tmp_path / "albums.json", [])
        assert AlbumRepositoryPopulator(source).populate_if_empty(RecordingRepository()) == 0


class TestCatalogErrors:
    def test_missing_file(self, tmp_path):
        populator = AlbumRepositoryPopulator(tmp_path / "missing.json")
        with pytest.raises(InvalidConfigError, match="Cannot read album catalog"):
            populator.populate_if_empty(RecordingRepository())

    def test_invalid_json(self, tmp_path):
        source = tmp_path / "albums.json"
        source.write_text("[{", encoding="utf-8")
        with pytest.raises(InvalidConfigError):
            AlbumRepositoryPopulator(source).populate_if_empty(RecordingRepository())

    def test_wrong_record_type(self, tmp_path):
        source = _write(tmp_path / "albums.json", [{"title": "A", "trackCount": "many"}])
        repo = RecordingRepository()
        with pytest.raises(InvalidConfigError, match="malformed"):
            AlbumRepositoryPopulator(source).populate_if_empty(repo)
        assert repo.saved == []
