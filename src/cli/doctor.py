"""Doctor command for environment diagnostics."""

from __future__ import annotations

import os
import shutil
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from adapters.rclone_mount import find_rclone, rclone_version
from core.config import AppSettings, load_settings
from core.domain.errors import RomfuError
from core.services.library_scanner import list_title_entries, normalize_root

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()
_err_console = Console(stderr=True)

_FUSE_HELPERS = ("fusermount3", "fusermount", "umount")


def _check_rclone(settings: AppSettings) -> tuple[bool, str]:
    path = find_rclone(settings)
    if path is None:
        return False, f"'{settings.rclone_binary}' not found in PATH"
    try:
        return True, f"{rclone_version(settings)} ({path})"
    except RomfuError as exc:
        return False, str(exc)


def _check_fuse() -> tuple[bool, str]:
    for helper in _FUSE_HELPERS:
        found = shutil.which(helper)
        if found:
            return True, found
    return False, "no FUSE unmount helper found"


def _check_library(root: Path | None) -> tuple[str, str]:
    if root is None:
        return "OPTIONAL", "Not configured -> pass --input-dir"
    try:
        entries = list_title_entries(normalize_root(root))
    except RomfuError as exc:
        return "FAIL", str(exc)
    return "OK", f"{len(entries)} entries in {root}"


@app.command()
def run(
    input_dir: Path | None = typer.Option(None, "--input-dir", "-i", help="library to check"),
) -> None:
    """Run baseline diagnostics and show recommended fixes."""

    try:
        settings = load_settings()
    except RomfuError as exc:
        _err_console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=exc.exit_code) from exc

    table = Table(title="ROMFU Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    ok_rclone, detail_rclone = _check_rclone(settings)
    table.add_row("rclone", "OK" if ok_rclone else "FAIL", Text(detail_rclone))

    ok_fuse, detail_fuse = _check_fuse()
    table.add_row("FUSE", "OK" if ok_fuse else "WARN", Text(detail_fuse))

    status, detail = _check_library(input_dir or settings.library_root)
    table.add_row("Library root", status, Text(detail))

    mount_point = settings.mount_point
    if mount_point is None:
        table.add_row("Mount point", "OPTIONAL", "Not configured -> pass --output-dir")
    elif mount_point.is_dir() and os.access(mount_point, os.W_OK):
        table.add_row("Mount point", "OK", Text(str(mount_point)))
    else:
        table.add_row("Mount point", "FAIL", Text(f"{mount_point} is not a writable directory"))

    _console.print(table)

    if not ok_rclone:
        _console.print("\n[yellow]Note:[/yellow] Install rclone or set ROMFU_RCLONE_BINARY to its path.")
