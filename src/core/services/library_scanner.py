"""Escaneo de la biblioteca de juegos.

Por qué aquí:
- Recorre solo los hijos directos de la raíz y elige, por cada juego, el
  primer subdirectorio de contenido que exista según una prioridad fija.
- Los juegos sin candidato se descartan en silencio: es lo normal en títulos
  a medio preparar y no se informa en ningún sitio.
"""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path
from typing import Callable, Iterable, Sequence

from core.domain.errors import ConfigurationError, DirectoryReadError
from core.domain.models import ResolvedTitle, TitleEntry

logger = logging.getLogger(__name__)

DEFAULT_CANDIDATE_PRIORITY: tuple[str, ...] = ("merged", "base")
DEFAULT_EXCLUDED_NAMES: frozenset[str] = frozenset({"rw", "titles"})


def normalize_root(library_root: Path | str) -> Path:
    return Path(library_root).expanduser().resolve()


def list_title_entries(library_root: Path) -> list[TitleEntry]:
    """Lista los hijos directos de `library_root` en el orden del listado.

    Que sea directorio se decide con el propio listado, sin seguir symlinks.
    Lanza `DirectoryReadError` si no se puede obtener el listado.
    """

    try:
        with os.scandir(library_root) as it:
            entries = []
            for entry in it:
                try:
                    is_dir = entry.is_dir(follow_symlinks=False)
                except OSError:
                    is_dir = False
                entries.append(TitleEntry(name=entry.name, is_directory=is_dir))
    except OSError as exc:
        raise DirectoryReadError(Path(library_root), exc.strerror or str(exc)) from exc
    return entries


def is_title_candidate(entry: TitleEntry, excluded_names: Iterable[str]) -> bool:
    """Directorio, no oculto y fuera de la lista de bloqueo (coincidencia exacta)."""

    if not entry.is_directory:
        return False
    if entry.is_hidden:
        return False
    return entry.name not in set(excluded_names)


def _is_directory(path: Path) -> bool:
    # Cualquier error de stat (permisos, I/O) cuenta como "no existe".
    try:
        return stat.S_ISDIR(os.stat(path).st_mode)
    except OSError:
        return False


def select_content_subdir(title_root: Path, candidate_priority: Sequence[str]) -> str | None:
    """Primer candidato que existe y es directorio (siguiendo symlinks), o None."""

    for subdir_name in candidate_priority:
        if _is_directory(title_root / subdir_name):
            return subdir_name
    return None


def scan_library(
    library_root: Path | str,
    candidate_priority: Sequence[str] = DEFAULT_CANDIDATE_PRIORITY,
    excluded_names: Iterable[str] = DEFAULT_EXCLUDED_NAMES,
    *,
    on_resolved: Callable[[ResolvedTitle], None] | None = None,
) -> list[ResolvedTitle]:
    """Resuelve todos los juegos bajo `library_root`.

    El resultado mantiene el orden del listado, que depende del sistema de
    ficheros; quien necesite un orden estable lo ordena después
    (ver `core.services.mount_pipeline.sort_titles`).

    `on_resolved` se llama una vez por juego resuelto, en orden de emisión;
    la CLI lo usa para imprimir la línea de informe de cada juego.
    """

    candidates = [name for name in candidate_priority if name]
    if not candidates:
        raise ConfigurationError("candidate subdirectory list must not be empty")
    excluded = frozenset(excluded_names)

    root = normalize_root(library_root)
    entries = list_title_entries(root)
    logger.debug("Listed %d entries under %s", len(entries), root)

    resolved: list[ResolvedTitle] = []
    for entry in entries:
        if not is_title_candidate(entry, excluded):
            continue

        title_root = root / entry.name
        subdir_name = select_content_subdir(title_root, candidates)
        if subdir_name is None:
            continue

        title = ResolvedTitle(root_path=title_root, selected_subdir_name=subdir_name)
        resolved.append(title)
        if on_resolved is not None:
            on_resolved(title)

    logger.debug("Resolved %d titles under %s", len(resolved), root)
    return resolved


class LibraryScanner:
    """`TitleScanner` sobre el sistema de ficheros local."""

    def __init__(
        self,
        candidate_priority: Sequence[str] = DEFAULT_CANDIDATE_PRIORITY,
        excluded_names: Iterable[str] = DEFAULT_EXCLUDED_NAMES,
    ) -> None:
        self.candidate_priority = tuple(candidate_priority)
        self.excluded_names = frozenset(excluded_names)

    def scan(
        self,
        library_root: Path,
        *,
        on_resolved: Callable[[ResolvedTitle], None] | None = None,
    ) -> list[ResolvedTitle]:
        return scan_library(
            library_root,
            self.candidate_priority,
            self.excluded_names,
            on_resolved=on_resolved,
        )
