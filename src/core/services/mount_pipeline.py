"""Orquestación de escaneo + unión.

Por qué existe:
- La CLI delega aquí todo el flujo de descubrimiento y solo se ocupa de
  presentar resultados y de entregar el `OverlaySpec` a un montador.
- Los efectos secundarios (imprimir) se quedan en la CLI vía `PipelineHooks`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Sequence

from core.config import AppSettings
from core.domain.errors import ConfigurationError, NoTitlesFoundError
from core.domain.models import OverlaySpec, ResolvedTitle
from core.interfaces.scanner import TitleScanner
from core.services.library_scanner import LibraryScanner, normalize_root
from core.services.overlay_builder import build_overlay


@dataclass
class MountRequest:
    """Parámetros de una ejecución."""

    library_root: Path
    mount_point: Path
    enable_write: bool = False
    sort_titles: bool = True

    @classmethod
    def from_settings(
        cls,
        settings: AppSettings,
        *,
        library_root: Path | None = None,
        mount_point: Path | None = None,
        enable_write: bool | None = None,
        sort_titles: bool | None = None,
    ) -> "MountRequest":
        """Combina las opciones de la CLI sobre `settings`; sin rutas es `ConfigurationError`."""

        root = library_root or settings.library_root
        target = mount_point or settings.mount_point
        if root is None:
            raise ConfigurationError("library root is required (--input-dir or ROMFU_LIBRARY_ROOT)")
        if target is None:
            raise ConfigurationError("mount point is required (--output-dir or ROMFU_MOUNT_POINT)")
        return cls(
            library_root=root,
            mount_point=target,
            enable_write=settings.enable_write if enable_write is None else enable_write,
            sort_titles=settings.sort_titles if sort_titles is None else sort_titles,
        )


@dataclass
class PipelineHooks:
    """Callbacks opcionales para la capa de UI."""

    title_resolved: Callable[[ResolvedTitle], None] | None = None


@dataclass
class PipelineResult:
    """Salida de una ejecución del pipeline."""

    request: MountRequest
    titles: list[ResolvedTitle]
    spec: OverlaySpec
    discovered_order: list[ResolvedTitle] = field(default_factory=list)


def sort_titles(titles: Sequence[ResolvedTitle]) -> list[ResolvedTitle]:
    """Ordena por nombre sin distinguir mayúsculas; empate por el nombre exacto."""

    return sorted(titles, key=lambda t: (t.name.casefold(), t.name))


def ensure_titles(titles: Sequence[ResolvedTitle], library_root: Path) -> None:
    if not titles:
        raise NoTitlesFoundError(library_root)


def scanner_from_settings(settings: AppSettings) -> LibraryScanner:
    # El directorio escribible nunca es un juego, se llame como se llame.
    excluded = {*settings.excluded_names, settings.writable_dir_name}
    return LibraryScanner(settings.candidate_subdirs, excluded)


def _without_writable_dir(
    titles: Sequence[ResolvedTitle],
    library_root: Path,
    writable_dir_name: str,
) -> list[ResolvedTitle]:
    writable_root = library_root / writable_dir_name
    return [t for t in titles if t.root_path != writable_root]


def assemble_overlay(
    request: MountRequest,
    settings: AppSettings | None = None,
    *,
    scanner: TitleScanner | None = None,
    hooks: PipelineHooks | None = None,
) -> PipelineResult:
    """Escanea la biblioteca y construye el `OverlaySpec`.

    Lanza `NoTitlesFoundError` antes de escribir nada en disco si el escaneo
    no resuelve ningún juego. Con escritura activada, el directorio escribible
    nunca aparece además como capa de solo lectura.
    """

    settings = settings or AppSettings()
    scanner = scanner or scanner_from_settings(settings)
    hooks = hooks or PipelineHooks()

    root = normalize_root(request.library_root)
    discovered = list(scanner.scan(root, on_resolved=hooks.title_resolved))
    if request.enable_write:
        discovered = _without_writable_dir(discovered, root, settings.writable_dir_name)
    ensure_titles(discovered, root)

    titles = sort_titles(discovered) if request.sort_titles else list(discovered)
    spec = build_overlay(
        titles,
        request.enable_write,
        root,
        request.mount_point,
        writable_dir_name=settings.writable_dir_name,
    )
    return PipelineResult(request=request, titles=titles, spec=spec, discovered_order=discovered)
