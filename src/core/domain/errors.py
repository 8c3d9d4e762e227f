"""Errores del dominio.

Todos son terminales para una ejecución: la CLI los informa y sale con
código distinto de cero. No hay reintentos internos.
"""

from __future__ import annotations

from pathlib import Path


class RomfuError(Exception):
    """Base class for every fatal error of a run."""

    exit_code: int = 1


class ConfigurationError(RomfuError):
    """Required configuration (paths, candidate list) is missing or invalid."""


class DirectoryReadError(RomfuError):
    """The library root could not be listed."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"cannot read library directory {path}: {reason}")


class NoTitlesFoundError(RomfuError):
    """The scan resolved zero titles."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"no valid game folders found in {path}")


class WritableOverlayCreateError(RomfuError):
    """The writable overlay directory could not be created."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"cannot create writable directory {path}: {reason}")


class MountProcessError(RomfuError):
    """The external mount process could not be started or exited with an error."""

    def __init__(self, message: str, *, returncode: int | None = None) -> None:
        self.returncode = returncode
        if returncode is not None and returncode > 0:
            self.exit_code = returncode
        super().__init__(message)
