"""
slycer.cli - Typer CLI entry point.

    slycer INPUT [options]

INPUT is a video URL or a file listing one URL per line.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from slycer import __version__
from slycer.config import build_config, find_config_file
from slycer.dependencies import ensure_dependencies
from slycer.exceptions import (
    ConfigError,
    DependencyError,
    FilesystemError,
    InputError,
)
from slycer.inputs import classify_input
from slycer.logging import configure_logging
from slycer.models import RunSummary
from slycer.pipeline import run_batch

app = typer.Typer(
    name="slycer",
    help="Download a video's audio and split it into one track per chapter.\n\n"
    "INPUT is a single URL or a text file with one URL per line.",
    add_completion=False,
)
console = Console()


def version_callback(value: bool) -> None:
    if value:
        console.print(f"slycer {__version__}")
        raise typer.Exit()


def confirm_install(message: str) -> bool:
    try:
        return typer.confirm(message, default=False, err=True)
    except typer.Abort:
        return False


def print_summary(summary: RunSummary) -> None:
    table = Table(title="Summary")
    table.add_column("#", style="dim")
    table.add_column("URL", style="cyan")
    table.add_column("Title")
    table.add_column("Tracks", style="green")
    table.add_column("Status", style="yellow")

    for outcome in summary.outcomes:
        if outcome.succeeded:
            status = "[green]✓ Done[/green]"
        else:
            status = f"[red]✗ {escape(outcome.error or '')}[/red]"
        tracks = str(len(outcome.written))
        if outcome.failed_tracks:
            tracks += f" [red]({len(outcome.failed_tracks)} failed)[/red]"
        table.add_row(
            str(outcome.item.position),
            escape(outcome.item.url),
            escape(outcome.video_title or "-"),
            tracks,
            status,
        )

    console.print()
    console.print(table)
    console.print(
        f"\nProcessed {summary.total} item(s): "
        f"[green]{summary.succeeded} succeeded[/green], "
        f"[red]{summary.failed} failed[/red], "
        f"{summary.tracks_written} track(s) written"
    )


@app.command()
def main(
    input: str = typer.Argument(..., help="Video URL or path to a file with one URL per line"),
    output: str | None = typer.Option(
        None, "--output", "-o", help="Combined audio file path [default: out.mp3]"
    ),
    audio_format: str | None = typer.Option(
        None, "--audio-format", "-f", help="Audio format for extraction [default: mp3]"
    ),
    dest: str | None = typer.Option(
        None, "--dest", "-d", help="Destination directory for split tracks"
    ),
    keep: bool = typer.Option(False, "--keep", "-k", help="Keep the combined audio file"),
    yes: bool = typer.Option(
        False, "--yes", "-y", help="Install missing yt-dlp/ffmpeg without asking"
    ),
    prefix: str | None = typer.Option(None, "--prefix", help="Prefix for track filenames"),
    prefix_name: bool = typer.Option(
        False, "--prefix-name", help="Use the shortened video title as filename prefix"
    ),
    numbers: bool = typer.Option(
        False, "--numbers", help="Prepend zero-padded track numbers to filenames"
    ),
    config_file: str | None = typer.Option(
        None, "--config", "-c", help="YAML file with default options [default: ./slycer.yaml]"
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging"),
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """Download audio and split it into per-chapter tracks."""
    configure_logging(verbose)

    # False flags mean "not given" so config-file values can apply
    cli_values = {
        "output": Path(output) if output else None,
        "audio_format": audio_format,
        "dest": Path(dest) if dest else None,
        "keep": keep or None,
        "auto_install": yes or None,
        "prefix": prefix,
        "prefix_name": prefix_name or None,
        "numbers": numbers or None,
    }

    try:
        config_path = Path(config_file) if config_file else find_config_file()
        config = build_config(cli_values, config_path)
        items = list(classify_input(input))
        installed = ensure_dependencies(config.auto_install, confirm=confirm_install)
    except (ConfigError, InputError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)
    except DependencyError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        if e.install_hint:
            console.print(f"[dim]{escape(e.install_hint)}[/dim]")
        raise typer.Exit(1)

    if installed:
        console.print(f"[green]✓[/green] Installed {', '.join(installed)}")

    if len(items) > 1:
        console.print(f"[cyan]Processing {len(items)} URLs...[/cyan]")

    try:
        summary = run_batch(items, config, console=console)
    except (FilesystemError, DependencyError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    print_summary(summary)

    if summary.succeeded == 0:
        raise typer.Exit(1)
