"""Contrato del montador externo.

El Core entrega un `OverlaySpec` terminado; cómo se traduce a la herramienta
externa (variables de entorno, fichero, flags) es cosa del adaptador.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from core.domain.models import OverlaySpec


@runtime_checkable
class MountInvoker(Protocol):
    """Consume un `OverlaySpec` exactamente una vez y bloquea hasta que el montaje termina."""

    def mount(self, spec: OverlaySpec) -> None:
        ...
