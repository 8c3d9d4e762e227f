from __future__ import annotations

import json
from pathlib import Path
import sys
import tempfile
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from adapters.json_exporter import build_overlay_payload, export_overlay_json
from core.config import AppSettings
from core.domain.models import AccessMode, OverlaySpec, OverlayUpstream


class JsonExporterTests(unittest.TestCase):
    def setUp(self) -> None:
        self.settings = AppSettings(_env_file=None)
        self.spec = OverlaySpec(
            upstreams=(
                OverlayUpstream(source_path=Path("/lib/rw"), access_mode=AccessMode.READ_WRITE),
                OverlayUpstream(source_path=Path("/lib/a/merged")),
            ),
            mount_point=Path("/mnt/switch"),
        )

    def test_payload_includes_rendered_rclone_setup(self) -> None:
        payload = build_overlay_payload(self.spec, self.settings)

        self.assertEqual(payload["rclone"]["upstreams"], '"ROMFULOCAL0:/lib/rw" "ROMFULOCAL1:/lib/a/merged:ro"')
        self.assertEqual(payload["rclone"]["command"], ["rclone", "mount", "ROMFUUNION:", "/mnt/switch"])
        self.assertEqual(payload["rclone"]["env"]["RCLONE_CONFIG_ROMFUUNION_TYPE"], "union")
        self.assertEqual(payload["overlay"]["upstreams"][0]["access_mode"], "rw")

    def test_export_writes_utf8_json(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            path = export_overlay_json(
                spec=self.spec,
                output_path=Path(temp_dir) / "nested" / "spec.json",
                settings=self.settings,
            )

            payload = json.loads(path.read_text(encoding="utf-8"))

        self.assertEqual(payload["overlay"]["mount_point"], "/mnt/switch")
        self.assertEqual(payload["rclone"]["union_remote"], "ROMFUUNION")


if __name__ == "__main__":
    unittest.main()
