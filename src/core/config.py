"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Permite que el escáner, el builder y el adaptador de rclone lean la misma
  configuración de forma consistente.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict, SettingsError

from core.domain.errors import ConfigurationError


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "romfu"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "romfu"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "romfu"
    return Path.home() / ".config" / "romfu"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core con lógica.
    - Un único contrato de configuración para CLI/adapters.

    Las opciones de la CLI tienen prioridad sobre estos valores.
    """

    model_config = SettingsConfigDict(
        env_prefix="ROMFU_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    library_root: Path | None = Field(
        default=None,
        description="Directorio con un subdirectorio por juego.",
    )
    mount_point: Path | None = Field(
        default=None,
        description="Directorio donde se monta el sistema de ficheros plano.",
    )
    enable_write: bool = Field(
        default=False,
        description="Añadir una capa escribible (`rw`) delante de la unión.",
    )

    candidate_subdirs: list[str] = Field(
        default_factory=lambda: ["merged", "base"],
        min_length=1,
        description="Subdirectorios de contenido aceptados, en orden de prioridad.",
    )
    excluded_names: list[str] = Field(
        default_factory=lambda: ["rw", "titles"],
        description="Nombres de primer nivel que nunca son juegos.",
    )
    writable_dir_name: str = Field(
        default="rw",
        min_length=1,
        description="Nombre del directorio escribible dentro de la biblioteca.",
    )
    sort_titles: bool = Field(
        default=True,
        description="Ordenar los títulos por nombre antes de construir la unión.",
    )

    rclone_binary: str = Field(
        default="rclone",
        min_length=1,
        description="Ejecutable de rclone (nombre en PATH o ruta).",
    )
    rclone_extra_args: list[str] = Field(
        default_factory=list,
        description="Argumentos extra para `rclone mount` (p.ej. --allow-other).",
    )
    local_remote_prefix: str = Field(
        default="ROMFULOCAL",
        pattern=r"^[A-Za-z0-9_]+$",
        description="Prefijo de los remotes `local` sintéticos.",
    )
    union_remote_name: str = Field(
        default="ROMFUUNION",
        pattern=r"^[A-Za-z0-9_]+$",
        description="Nombre del remote `union` sintético.",
    )

    @field_validator("writable_dir_name")
    @classmethod
    def _plain_name(cls, value: str) -> str:
        if "/" in value or "\\" in value or value in (".", ".."):
            raise ValueError("writable_dir_name must be a plain directory name")
        return value


def load_settings(**overrides: object) -> AppSettings:
    """Carga `AppSettings` y traduce errores de validación a `ConfigurationError`.

    Un `ROMFU_*` o una línea de `.env` inválidos deben acabar en un error
    legible de la CLI, no en una traza de pydantic.
    """

    try:
        return AppSettings(**overrides)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or 'settings'}: {error['msg']}"
            for error in exc.errors()
        )
        raise ConfigurationError(f"invalid configuration: {problems}") from exc
    except SettingsError as exc:
        raise ConfigurationError(f"invalid configuration: {exc}") from exc
