"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Validación estricta de invariantes (orden de capas, rutas absolutas) en el
  mismo sitio donde se definen los datos.
- Facilita exportar la especificación de montaje a JSON sin código extra.

Nota:
- Estos modelos describen *qué* se monta, no *cómo* se monta.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic.config import ConfigDict


class AccessMode(str, Enum):
    """Access mode of an upstream inside the union."""

    READ_WRITE = "rw"
    READ_ONLY = "ro"

    def label(self) -> str:
        """Human readable label for tables and logging."""

        return "read-write" if self is AccessMode.READ_WRITE else "read-only"


class TitleEntry(BaseModel):
    """Entrada encontrada directamente bajo la raíz de la biblioteca.

    Es transitoria: se produce y se consume dentro de un mismo escaneo.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Nombre de la entrada.")
    is_directory: bool = Field(
        default=False,
        description="True si la entrada es un directorio (sin seguir symlinks).",
    )

    @property
    def is_hidden(self) -> bool:
        return self.name.startswith(".")


class ResolvedTitle(BaseModel):
    """Título con un subdirectorio de contenido elegido.

    Por qué existe:
    - Une la raíz del título con el candidato que ganó por prioridad
      (p.ej. `merged` antes que `base`).
    """

    model_config = ConfigDict(frozen=True)

    root_path: Path = Field(
        ...,
        description="Ruta absoluta al directorio del título.",
    )
    selected_subdir_name: str = Field(
        ...,
        min_length=1,
        description="Candidato elegido (uno de la lista de prioridad).",
    )

    @field_validator("root_path")
    @classmethod
    def _must_be_absolute(cls, value: Path) -> Path:
        if not value.is_absolute():
            raise ValueError(f"root_path must be absolute: {value}")
        return value

    @property
    def name(self) -> str:
        return self.root_path.name

    @property
    def content_path(self) -> Path:
        """Raíz del título unida al subdirectorio elegido."""

        return self.root_path / self.selected_subdir_name


class OverlayUpstream(BaseModel):
    """Una capa de la unión final."""

    model_config = ConfigDict(frozen=True)

    source_path: Path = Field(..., description="Ruta absoluta de la capa.")
    access_mode: AccessMode = Field(
        default=AccessMode.READ_ONLY,
        description="Modo de acceso con el que la herramienta externa monta la capa.",
    )

    @property
    def is_writable(self) -> bool:
        return self.access_mode is AccessMode.READ_WRITE


class OverlaySpec(BaseModel):
    """Especificación completa y ordenada que consume el montador.

    Reglas:
    - Se construye una vez por ejecución y es inmutable.
    - Como mucho una capa read-write, y si existe va la primera.
    """

    model_config = ConfigDict(frozen=True)

    upstreams: tuple[OverlayUpstream, ...] = Field(
        ...,
        min_length=1,
        description="Capas en orden de prioridad (la primera se consulta antes).",
    )
    mount_point: Path = Field(
        ...,
        description="Ruta destino donde se monta la unión.",
    )

    @model_validator(mode="after")
    def _check_writable_layer(self) -> "OverlaySpec":
        writable = [i for i, upstream in enumerate(self.upstreams) if upstream.is_writable]
        if len(writable) > 1:
            raise ValueError("at most one read-write upstream is allowed")
        if writable and writable[0] != 0:
            raise ValueError("the read-write upstream must come first")
        return self

    @property
    def writable_upstream(self) -> OverlayUpstream | None:
        first = self.upstreams[0]
        return first if first.is_writable else None

    @property
    def read_only_upstreams(self) -> tuple[OverlayUpstream, ...]:
        return tuple(u for u in self.upstreams if not u.is_writable)
