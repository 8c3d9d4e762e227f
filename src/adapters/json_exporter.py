"""Exportación JSON de un montaje.

Por qué JSON:
- Permite revisar (o versionar) qué capas se montarían y con qué remotes de
  rclone, sin lanzar el montaje.
- El bloque `rclone` es exactamente lo que recibiría el proceso hijo.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from adapters.rclone_mount import build_mount_command, render_rclone_config
from core.config import AppSettings
from core.domain.models import OverlaySpec


def build_overlay_payload(spec: OverlaySpec, settings: AppSettings | None = None) -> dict[str, Any]:
    """`OverlaySpec` + configuración de rclone renderizada (remotes, entorno, comando)."""

    settings = settings or AppSettings()
    config = render_rclone_config(spec, settings)
    return {
        "overlay": spec.model_dump(mode="json"),
        "rclone": {
            "union_remote": config.union_remote,
            "remotes": config.remotes,
            "upstreams": config.upstreams,
            "env": config.to_env(),
            "command": build_mount_command(spec, settings),
        },
    }


def export_overlay_json(
    *,
    spec: OverlaySpec,
    output_path: Path,
    settings: AppSettings | None = None,
) -> Path:
    """Escribe el payload de `build_overlay_payload` como JSON UTF-8 estable."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = build_overlay_payload(spec, settings)
    output_path.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n",
        encoding="utf-8",
    )
    return output_path
