"""
CLI utility helpers — output consoles and rendering.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any

from rich.console import Console
from rich.table import Table

from music_spine.core.config.resolver import ResolutionResult

console = Console()
err_console = Console(stderr=True)


class OutputFormat(str, Enum):
    TABLE = "table"
    JSON = "json"


def resolution_to_dict(result: ResolutionResult, services: list[str]) -> dict[str, Any]:
    return {
        "profile": str(result.profile) if result.profile else None,
        "active_profiles": list(result.active_profiles),
        "services": services,
        "exclusions": list(result.exclusions),
    }


def render_resolution(
    result: ResolutionResult,
    services: list[str],
    fmt: OutputFormat = OutputFormat.TABLE,
) -> None:
    """Print a resolution as a table or JSON."""
    data = resolution_to_dict(result, services)
    if fmt is OutputFormat.JSON:
        console.print_json(json.dumps(data))
        return

    table = Table(title="Backing-store resolution", show_header=False)
    table.add_column("Key", style="bold")
    table.add_column("Value")
    table.add_row("Resolved profile", data["profile"] or "[dim](none)[/dim]")
    table.add_row("Active profiles", ", ".join(data["active_profiles"]) or "-")
    table.add_row("Bound services", ", ".join(services) or "-")
    table.add_row("Excluded units", "\n".join(data["exclusions"]))
    console.print(table)
