"""Montaje de la unión con rclone.

Por qué un adaptador:
- El Core solo produce un `OverlaySpec`; aquí se traduce a remotes de rclone
  (`local` + `union`) y se lanza `rclone mount`.
- La configuración viaja como `RCLONE_CONFIG_<REMOTE>_<OPCION>` en el entorno
  del proceso hijo, sin tocar `os.environ` del proceso actual.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Mapping

from core.config import AppSettings
from core.domain.errors import MountProcessError
from core.domain.models import AccessMode, OverlaySpec

logger = logging.getLogger(__name__)

ENV_PREFIX = "RCLONE_CONFIG_"


def format_upstream(remote: str, path: Path | str, *options: str) -> str:
    """Formatea una capa de la unión: `"<remote>:<ruta>[:<opción>...]"` (entre comillas)."""

    rendered = f"{remote}:{path}"
    for option in options:
        rendered += f":{option}"
    return f'"{rendered}"'


@dataclass(frozen=True)
class RcloneConfig:
    """Remotes sintéticos para un montaje.

    `remotes` mapea nombre de remote -> opciones (`TYPE`, `UPSTREAMS`, ...),
    en el orden en que se declaran.
    """

    union_remote: str
    remotes: dict[str, dict[str, str]] = field(default_factory=dict)

    @property
    def upstreams(self) -> str:
        return self.remotes[self.union_remote]["UPSTREAMS"]

    def to_env(self) -> dict[str, str]:
        env: dict[str, str] = {}
        for remote_name, options in self.remotes.items():
            for option_name, value in options.items():
                env[f"{ENV_PREFIX}{remote_name}_{option_name}"] = value
        return env


def render_rclone_config(spec: OverlaySpec, settings: AppSettings | None = None) -> RcloneConfig:
    """Traduce `spec` a remotes de rclone respetando orden y modo de acceso.

    Se declara un remote `local` por cada ruta física distinta; el remote
    `union` los lista en el orden de `spec`, con `:ro` en las capas de solo lectura.
    """

    settings = settings or AppSettings()
    remotes: dict[str, dict[str, str]] = {}
    local_names: dict[Path, str] = {}
    entries: list[str] = []

    for upstream in spec.upstreams:
        name = local_names.get(upstream.source_path)
        if name is None:
            name = f"{settings.local_remote_prefix}{len(local_names)}"
            local_names[upstream.source_path] = name
            remotes[name] = {"TYPE": "local"}

        options = () if upstream.access_mode is AccessMode.READ_WRITE else (AccessMode.READ_ONLY.value,)
        entries.append(format_upstream(name, upstream.source_path, *options))

    remotes[settings.union_remote_name] = {
        "TYPE": "union",
        "UPSTREAMS": " ".join(entries),
    }
    return RcloneConfig(union_remote=settings.union_remote_name, remotes=remotes)


def build_mount_command(spec: OverlaySpec, settings: AppSettings | None = None) -> list[str]:
    settings = settings or AppSettings()
    return [
        settings.rclone_binary,
        "mount",
        f"{settings.union_remote_name}:",
        str(spec.mount_point),
        *settings.rclone_extra_args,
    ]


def find_rclone(settings: AppSettings | None = None) -> str | None:
    settings = settings or AppSettings()
    return shutil.which(settings.rclone_binary)


def rclone_version(settings: AppSettings | None = None) -> str:
    """Primera línea de `rclone version`; `MountProcessError` si no se puede ejecutar."""

    settings = settings or AppSettings()
    try:
        completed = subprocess.run(
            [settings.rclone_binary, "version"],
            capture_output=True,
            text=True,
            check=False,
            timeout=15,
        )
    except (OSError, subprocess.TimeoutExpired) as exc:
        raise MountProcessError(f"cannot run {settings.rclone_binary}: {exc}") from exc
    if completed.returncode != 0:
        raise MountProcessError(
            f"{settings.rclone_binary} version exited with {completed.returncode}",
            returncode=completed.returncode,
        )
    lines = completed.stdout.strip().splitlines()
    return lines[0] if lines else ""


class RcloneMountInvoker:
    """`MountInvoker` que lanza `rclone mount` y bloquea hasta que termina.

    stdin/stdout/stderr se heredan del proceso actual.
    """

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        base_env: Mapping[str, str] | None = None,
        run: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    ) -> None:
        self.settings = settings or AppSettings()
        self._base_env = base_env
        self._run = run

    def prepare(self, spec: OverlaySpec) -> tuple[list[str], RcloneConfig]:
        return build_mount_command(spec, self.settings), render_rclone_config(spec, self.settings)

    def build_env(self, config: RcloneConfig) -> dict[str, str]:
        base = os.environ if self._base_env is None else self._base_env
        env = dict(base)
        env.update(config.to_env())
        return env

    def mount(self, spec: OverlaySpec) -> None:
        command, config = self.prepare(spec)
        logger.debug("Running %s", " ".join(command))
        try:
            completed = self._run(command, env=self.build_env(config), check=False)
        except OSError as exc:
            raise MountProcessError(f"cannot start {command[0]}: {exc}") from exc

        if completed.returncode != 0:
            raise MountProcessError(
                f"{command[0]} mount exited with status {completed.returncode}",
                returncode=completed.returncode,
            )
