"""
Project-local property files for the ``applicationConfig`` source.

Files are read from the project root in this order, later ones winning::

    .env.base, .env.<profile> for each pre-set profile, .env.local, .env

Keys may be environment-variable names or dotted property names
(``datasource.url``).  Every other property source outranks these files.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path

_ASSIGNMENT_RE = re.compile(
    r"^\s*(?:export\s+)?(?P<key>[A-Za-z_][\w.\-]*)\s*=\s*(?P<value>.*)$"
)
_QUOTES = ("\"", "'")
_ROOT_MARKERS = ("pyproject.toml", ".git")


def find_project_root(start: Path | None = None) -> Path:
    """Nearest directory at or above *start* holding ``pyproject.toml`` or ``.git``."""
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        if any((directory / marker).exists() for marker in _ROOT_MARKERS):
            return directory
    return current


def discover_env_files(
    project_root: Path | None = None,
    profiles: Iterable[str] = (),
) -> list[Path]:
    """Existing property files under *project_root*, lowest precedence first."""
    root = (project_root or find_project_root()).resolve()

    names = [".env.base", *(f".env.{profile}" for profile in profiles), ".env.local", ".env"]
    return [root / name for name in dict.fromkeys(names) if (root / name).is_file()]


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in _QUOTES:
        return value[1:-1]
    if " #" in value:
        return value.split(" #", 1)[0].rstrip()
    return value


def _parse_env_file(path: Path) -> dict[str, str]:
    """Read ``key=value`` assignments; keys may be dotted property names."""
    assignments: dict[str, str] = {}
    for raw in path.read_text(encoding="utf-8").splitlines():
        match = _ASSIGNMENT_RE.match(raw)
        if match is None or raw.lstrip().startswith("#"):
            continue
        assignments[match["key"]] = _unquote(match["value"].strip())
    return assignments


def load_env_files(files: Iterable[Path]) -> dict[str, str]:
    """Property mapping for the ``applicationConfig`` source (last file wins)."""
    return {key: value for path in files for key, value in _parse_env_file(path).items()}
