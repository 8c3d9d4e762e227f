"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en `switch fs`, `scan` y `doctor`.
"""

from __future__ import annotations

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from adapters.rclone_mount import RcloneConfig
from core.domain.models import AccessMode, OverlaySpec, ResolvedTitle


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida.

    Se puede desactivar con `--no-banner` (scripts, logs).
    """

    title = Text("ROMFU", style="bold cyan")
    subtitle = Text("Biblioteca de juegos • Unión de capas • rclone", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def format_title_line(title: ResolvedTitle) -> Text:
    """Línea de informe por título: `"<juego>" -> "<subdir>"`."""

    return Text.assemble('"', (title.name, "blue"), '" -> "', title.selected_subdir_name, '"')


def build_titles_table(titles: list[ResolvedTitle]) -> Table:
    table = Table(title="Games")
    table.add_column("Title", style="blue", no_wrap=True)
    table.add_column("Subdir", style="white")
    table.add_column("Content path", style="dim")
    for title in titles:
        table.add_row(Text(title.name), Text(title.selected_subdir_name), Text(str(title.content_path)))
    return table


def build_upstreams_table(spec: OverlaySpec) -> Table:
    """Tabla con las capas de la unión en orden de prioridad."""

    table = Table(title=Text(f"Union -> {spec.mount_point}"))
    table.add_column("#", style="dim", justify="right")
    table.add_column("Mode", no_wrap=True)
    table.add_column("Source", style="white")
    for index, upstream in enumerate(spec.upstreams, start=1):
        style = "yellow" if upstream.access_mode is AccessMode.READ_WRITE else "green"
        table.add_row(str(index), Text(upstream.access_mode.label(), style=style), Text(str(upstream.source_path)))
    return table


def build_rclone_panel(command: list[str], config: RcloneConfig) -> Panel:
    """Panel para `--dry-run`: entorno de rclone y comando que se lanzaría."""

    body = Text()
    for key, value in config.to_env().items():
        body.append(key, style="bold")
        body.append(f"={value}\n")
    body.append("\n$ ", style="dim")
    body.append(" ".join(command))
    return Panel(body, title=Text("rclone (dry run)", style="bold yellow"), border_style="yellow")
