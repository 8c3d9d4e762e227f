"""Construcción de la unión.

Por qué aquí:
- Convierte los juegos resueltos en la lista ordenada de capas que consume
  la herramienta de montaje.
- La capa escribible, si se pide, va siempre primera para que las escrituras
  caigan en ella; las de solo lectura mantienen el orden recibido.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from core.domain.errors import WritableOverlayCreateError
from core.domain.models import AccessMode, OverlaySpec, OverlayUpstream, ResolvedTitle

logger = logging.getLogger(__name__)

WRITABLE_DIR_NAME = "rw"


def ensure_writable_dir(library_root: Path, dir_name: str = WRITABLE_DIR_NAME) -> Path:
    """Crea `<library_root>/<dir_name>` si hace falta y devuelve su ruta."""

    rw_path = library_root / dir_name
    try:
        rw_path.mkdir(mode=0o755, parents=True, exist_ok=True)
    except OSError as exc:
        raise WritableOverlayCreateError(rw_path, exc.strerror or str(exc)) from exc
    return rw_path


def build_overlay(
    resolved: Sequence[ResolvedTitle],
    enable_write: bool,
    library_root: Path,
    mount_point: Path,
    *,
    writable_dir_name: str = WRITABLE_DIR_NAME,
) -> OverlaySpec:
    """Construye el `OverlaySpec` para `resolved`.

    Se espera `resolved` no vacío: quien llama informa antes de un escaneo
    vacío. `mount_point` se pasa tal cual.
    """

    upstreams: list[OverlayUpstream] = []

    if enable_write:
        root = Path(library_root).expanduser().resolve()
        rw_path = ensure_writable_dir(root, writable_dir_name)
        logger.debug("Writable layer at %s", rw_path)
        upstreams.append(OverlayUpstream(source_path=rw_path, access_mode=AccessMode.READ_WRITE))

    for title in resolved:
        upstreams.append(OverlayUpstream(source_path=title.content_path, access_mode=AccessMode.READ_ONLY))

    return OverlaySpec(upstreams=tuple(upstreams), mount_point=mount_point)
