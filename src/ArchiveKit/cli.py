# === NAVMAP v1 ===
# {
#   "module": "ArchiveKit.cli",
#   "purpose": "Typer CLI for scanning and safely extracting archives",
#   "sections": [
#     {"id": "main", "name": "main", "anchor": "function-main", "kind": "function"},
#     {"id": "extract", "name": "extract", "anchor": "function-extract", "kind": "function"},
#     {"id": "scan", "name": "scan", "anchor": "function-scan", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""Typer CLI for scanning and safely extracting archives.

Example:
    $ archivekit extract bundle.zip ./out --hash "Images/*" --format json
    $ archivekit scan bundle.zip
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import libarchive
import typer
from rich.console import Console
from rich.table import Table

from . import __version__
from .errors import ArchiveKitError
from .io import (
    ExtractionOptions,
    extract_archive_to_folder,
    glob_file_filter,
    glob_naming_mode_selector,
    manifest_to_json,
    scan_entries,
)
from .logging_utils import setup_logging
from .settings import get_default_options, load_environment

app = typer.Typer(
    name="archivekit",
    help="Safely extract archives and report what was written",
    no_args_is_help=True,
)

_console = Console()
_err_console = Console(stderr=True)


def _format_bytes(num: int) -> str:
    value = float(num)
    for unit in ("B", "KB", "MB", "GB", "TB"):
        if value < 1024.0 or unit == "TB":
            return f"{value:.2f} {unit}"
        value /= 1024.0
    return f"{value:.2f} TB"


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"archivekit {__version__}")
        raise typer.Exit(0)


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """ArchiveKit CLI - safe archive extraction."""


@app.command()
def extract(
    archive: Path = typer.Argument(..., help="Archive to extract"),
    destination: Path = typer.Argument(..., help="Destination directory"),
    include: List[str] = typer.Option([], "--include", "-i", help="Only extract entries matching GLOB"),
    exclude: List[str] = typer.Option([], "--exclude", "-e", help="Skip entries matching GLOB"),
    hash_globs: List[str] = typer.Option([], "--hash", help="Hash names of entries matching GLOB"),
    unescape_globs: List[str] = typer.Option(
        [], "--unescape", help="Percent-decode names of entries matching GLOB"
    ),
    max_bytes: Optional[int] = typer.Option(
        None, "--max-bytes", min=0, help="Maximum total declared size in bytes"
    ),
    format_output: str = typer.Option("table", "--format", "-f", help="Output format: table, json"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level"),
    log_dir: Optional[Path] = typer.Option(None, "--log-dir", help="Write JSON logs to this directory"),
) -> None:
    """Extract ARCHIVE into DESTINATION and print the manifest."""

    if format_output not in ("table", "json"):
        _err_console.print(f"[red]Unknown format: {format_output}[/red]")
        raise typer.Exit(2)

    try:
        env = load_environment()
        logger = setup_logging(level=log_level or env.log_level, log_dir=log_dir or env.log_dir)

        defaults = get_default_options()
        options = ExtractionOptions(
            max_allowed_data_length=(
                max_bytes if max_bytes is not None else defaults.max_allowed_data_length
            ),
            max_file_name_length=defaults.max_file_name_length,
            enforce_written_limit=defaults.enforce_written_limit,
            file_filter=glob_file_filter(include, exclude) if include or exclude else None,
            naming_mode_selector=glob_naming_mode_selector(hash_globs, unescape_globs),
        )
        manifest = extract_archive_to_folder(archive, destination, options, logger=logger)
    except (ArchiveKitError, libarchive.ArchiveError, OSError) as exc:
        _err_console.print(f"[red]✗ {exc}[/red]")
        raise typer.Exit(1)

    if format_output == "json":
        typer.echo(manifest_to_json(manifest))
        return

    table = Table(title=f"Extracted {len(manifest)} file(s) to {destination}")
    table.add_column("Archive path")
    table.add_column("Output path")
    table.add_column("Size", justify="right")
    for key, record in manifest.items():
        table.add_row(key, record.output_path, _format_bytes(record.size))
    _console.print(table)


@app.command()
def scan(archive: Path = typer.Argument(..., help="Archive to inspect")) -> None:
    """List ARCHIVE entries and their declared sizes without extracting."""

    try:
        entries = scan_entries(archive)
    except (libarchive.ArchiveError, OSError) as exc:
        _err_console.print(f"[red]✗ {exc}[/red]")
        raise typer.Exit(1)

    table = Table(title=str(archive))
    table.add_column("Entry")
    table.add_column("Kind")
    table.add_column("Declared size", justify="right")
    for entry in entries:
        table.add_row(entry.full_path, entry.kind.value, str(entry.length))
    _console.print(table)
    total = sum(entry.length for entry in entries)
    _console.print(f"{len(entries)} entries, {total} bytes declared ({_format_bytes(total)})")


__all__ = ["app", "main", "extract", "scan"]
