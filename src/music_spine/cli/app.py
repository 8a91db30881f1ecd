"""
Root Typer application for the music-spine CLI.
"""

from __future__ import annotations

import sys

import typer
from rich.markup import escape

from music_spine import __version__
from music_spine.cli.utils import OutputFormat, console, err_console, render_resolution
from music_spine.core.config.bootstrap import bootstrap_environment
from music_spine.core.config.settings import get_settings
from music_spine.core.errors import MusicSpineError
from music_spine.core.logging import configure_logging

app = typer.Typer(
    name="music-spine",
    help="music-spine — backing-store profile resolution for the album service.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"music-spine {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """music-spine CLI — inspect profile resolution and run the API."""


@app.command("resolve")
def resolve(
    profile: list[str] = typer.Option(
        [], "--profile", "-p", help="Pre-set active profile (repeatable)"
    ),
    format: OutputFormat = typer.Option(
        OutputFormat.TABLE, "--format", "-f", case_sensitive=False, help="Output format"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log bootstrap decisions"),
) -> None:
    """Resolve the backing-store profile against the current environment."""
    settings = get_settings()
    configure_logging(
        level="DEBUG" if verbose else "WARNING",
        json_format=settings.json_logs,
        stream=sys.stderr,
    )
    if profile:
        settings = settings.model_copy(
            update={"profiles_active": [*settings.profiles_active, *profile]}
        )

    try:
        environment, result = bootstrap_environment(settings)
    except MusicSpineError as exc:
        err_console.print(f"[red]{exc.__class__.__name__}:[/red] {escape(exc.message)}")
        raise typer.Exit(code=1) from exc

    render_resolution(result, [b.name for b in environment.service_bindings], format)


@app.command("serve")
def serve(
    host: str | None = typer.Option(None, "--host", "-h", help="Bind address"),
    port: int | None = typer.Option(None, "--port", "-p", help="Bind port"),
    log_level: str | None = typer.Option(None, "--log-level"),
) -> None:
    """Start the music-spine REST API server."""
    import uvicorn

    settings = get_settings()
    level = (log_level or settings.log_level).upper()
    configure_logging(level=level, json_format=settings.json_logs)

    host = host or settings.api_host
    port = port or settings.api_port
    console.print(f"[bold green]Starting music-spine API[/bold green] on {host}:{port}")
    uvicorn.run(
        "music_spine.api:create_app",
        factory=True,
        host=host,
        port=port,
        log_level=level.lower(),
    )
