"""Tests for music_spine.core.config.loader — .env discovery and cascading load."""

from __future__ import annotations

from pathlib import Path

from music_spine.core.config.loader import (
    _parse_env_file,
    discover_env_files,
    find_project_root,
    load_env_files,
)


class TestFindProjectRoot:
    def test_pyproject_marker(self, tmp_path: Path):
        (tmp_path / "pyproject.toml").write_text("[project]\n")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert find_project_root(nested) == tmp_path.resolve()

    def test_git_marker(self, tmp_path: Path):
        (tmp_path / ".git").mkdir()
        nested = tmp_path / "src"
        nested.mkdir()
        assert find_project_root(nested) == tmp_path.resolve()


class TestDiscoverEnvFiles:
    def test_cascade_order(self, tmp_path: Path):
        for name in (".env", ".env.local", ".env.base", ".env.postgres", ".env.dev"):
            (tmp_path / name).write_text("")
        files = discover_env_files(tmp_path, ["postgres", "dev"])
        assert [f.name for f in files] == [
            ".env.base",
            ".env.postgres",
            ".env.dev",
            ".env.local",
            ".env",
        ]

    def test_only_existing_files(self, tmp_path: Path):
        (tmp_path / ".env.local").write_text("")
        assert [f.name for f in discover_env_files(tmp_path, ["mongodb"])] == [".env.local"]

    def test_no_files(self, tmp_path: Path):
        assert discover_env_files(tmp_path) == []


class TestParseEnvFile:
    def test_formats(self, tmp_path: Path):
        path = tmp_path / ".env"
        path.write_text(
            "# comment\n"
            "\n"
            "PLAIN=value\n"
            "export EXPORTED=1\n"
            'QUOTED="hello # world"\n'
            "SINGLE='x'\n"
            "INLINE=abc # trailing\n"
            "datasource.url=sqlite:///music.db\n"
            "redis-url = redis://h:1/0\n"
            "not a pair\n"
        )
        assert _parse_env_file(path) == {
            "PLAIN": "value",
            "EXPORTED": "1",
            "QUOTED": "hello # world",
            "SINGLE": "x",
            "INLINE": "abc",
            "datasource.url": "sqlite:///music.db",
            "redis-url": "redis://h:1/0",
        }


class TestLoadEnvFiles:
    def test_later_files_win(self, tmp_path: Path):
        base = tmp_path / ".env.base"
        base.write_text("A=base\nB=base\n")
        local = tmp_path / ".env.local"
        local.write_text("B=local\n")
        assert load_env_files([base, local]) == {"A": "base", "B": "local"}

    def test_empty(self):
        assert load_env_files([]) == {}
