"""Contrato del escáner de bibliotecas.

Por qué Protocol:
- Define un contrato estructural (duck typing) sin herencia rígida.
- Permite sustituir el escáner del sistema de ficheros por uno en memoria
  en tests sin acoplar el pipeline a la implementación concreta.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Protocol, Sequence, runtime_checkable

from core.domain.models import ResolvedTitle


@runtime_checkable
class TitleScanner(Protocol):
    """Contrato mínimo para descubrir títulos.

    Reglas de diseño:
    - `scan` es síncrono: solo hace `stat`/listados locales.
    - Devuelve como mucho un `ResolvedTitle` por entrada de la biblioteca.
    """

    def scan(
        self,
        library_root: Path,
        *,
        on_resolved: Callable[[ResolvedTitle], None] | None = None,
    ) -> Sequence[ResolvedTitle]:
        """Escanea `library_root` y devuelve los títulos resueltos en orden."""

        ...
