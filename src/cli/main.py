"""CLI principal (Typer).

Comandos:
- `switch fs`: escanea la biblioteca, construye la unión y la monta con rclone.
- `scan`: solo informa de los títulos resueltos.
- `doctor`: diagnóstico del entorno.
"""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from adapters.json_exporter import export_overlay_json
from adapters.rclone_mount import RcloneMountInvoker
from cli import doctor
from cli.ui_components import (
    build_rclone_panel,
    build_titles_table,
    build_upstreams_table,
    format_title_line,
    print_banner,
)
from core.config import load_settings
from core.domain.errors import ConfigurationError, RomfuError
from core.domain.models import ResolvedTitle
from core.services.library_scanner import normalize_root
from core.services.mount_pipeline import (
    MountRequest,
    PipelineHooks,
    assemble_overlay,
    ensure_titles,
    scanner_from_settings,
    sort_titles,
)

app = typer.Typer(no_args_is_help=True, help="Flat, union-mounted view over a library of game folders.")
switch_app = typer.Typer(no_args_is_help=True, help="Nintendo Switch libraries.")
app.add_typer(switch_app, name="switch")
app.add_typer(doctor.app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=_err_console, show_path=False)],
        force=True,
    )


def _fail(exc: RomfuError) -> typer.Exit:
    _err_console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
    return typer.Exit(code=exc.exit_code)


@switch_app.command("fs")
def switch_fs(
    input_dir: Path | None = typer.Option(
        None,
        "--input-dir",
        "-i",
        help="path to directory containing subdirectories of switch games",
    ),
    output_dir: Path | None = typer.Option(
        None,
        "--output-dir",
        "-o",
        help="path to directory for mounting the flat filesystem",
    ),
    enable_write: bool | None = typer.Option(
        None,
        "--enable-write/--read-only",
        "-w",
        help="enable writing to output directory",
    ),
    sort: bool | None = typer.Option(
        None,
        "--sort/--no-sort",
        help="order titles by name instead of directory-listing order",
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="print the rclone setup without mounting"),
    export_json: Path | None = typer.Option(
        None,
        "--export-json",
        help="write the overlay specification to a JSON file",
    ),
    no_banner: bool = typer.Option(False, "--no-banner", help="hide the banner"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="debug logging"),
) -> None:
    """Mount every game's `merged` (or `base`) folder as one flat filesystem."""

    _configure_logging(verbose)
    if not no_banner:
        print_banner(_console)

    report: list[ResolvedTitle] = []

    try:
        settings = load_settings()
        request = MountRequest.from_settings(
            settings,
            library_root=input_dir,
            mount_point=output_dir,
            enable_write=enable_write,
            sort_titles=sort,
        )
        result = assemble_overlay(
            request,
            settings,
            hooks=PipelineHooks(title_resolved=report.append),
        )
    except RomfuError as exc:
        raise _fail(exc) from exc

    _console.print("Games:")
    for title in report:
        _console.print(format_title_line(title))
    _console.print()
    _console.print(build_upstreams_table(result.spec))

    if export_json is not None:
        path = export_overlay_json(spec=result.spec, output_path=export_json, settings=settings)
        _console.print(f"[green]Overlay spec written to:[/green] {escape(str(path))}")

    invoker = RcloneMountInvoker(settings)
    if dry_run:
        command, config = invoker.prepare(result.spec)
        _console.print(build_rclone_panel(command, config))
        return

    _console.print("Rclone command output:")
    try:
        invoker.mount(result.spec)
    except RomfuError as exc:
        raise _fail(exc) from exc


@app.command("scan")
def scan(
    input_dir: Path | None = typer.Option(
        None,
        "--input-dir",
        "-i",
        help="path to directory containing subdirectories of games",
    ),
    sort: bool | None = typer.Option(None, "--sort/--no-sort", help="order titles by name"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="debug logging"),
) -> None:
    """Report which content folder would be used for every game, without mounting."""

    _configure_logging(verbose)

    try:
        settings = load_settings()
        root = input_dir or settings.library_root
        if root is None:
            raise ConfigurationError("library root is required (--input-dir or ROMFU_LIBRARY_ROOT)")
        root = normalize_root(root)
        titles = scanner_from_settings(settings).scan(root)
        ensure_titles(titles, root)
    except RomfuError as exc:
        raise _fail(exc) from exc

    if settings.sort_titles if sort is None else sort:
        titles = sort_titles(titles)
    _console.print(build_titles_table(titles))


def run() -> None:
    app()


if __name__ == "__main__":
    run()
