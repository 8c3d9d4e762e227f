from __future__ import annotations

import json
from pathlib import Path
import sys
import tempfile
import unittest
from unittest import mock

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from typer.testing import CliRunner

from cli.main import app
from core.domain.errors import MountProcessError


class SwitchFsCommandTests(unittest.TestCase):
    def setUp(self) -> None:
        self.runner = CliRunner()
        self.temp = tempfile.TemporaryDirectory()
        self.root = Path(self.temp.name).resolve() / "library"
        self.mount_point = Path(self.temp.name).resolve() / "mnt"
        self.root.mkdir()
        self.mount_point.mkdir()

    def tearDown(self) -> None:
        self.temp.cleanup()

    def _invoke(self, *extra: str):
        return self.runner.invoke(
            app,
            ["switch", "fs", "-i", str(self.root), "-o", str(self.mount_point), "--no-banner", *extra],
        )

    def test_empty_library_exits_non_zero_without_mounting(self) -> None:
        with mock.patch("cli.main.RcloneMountInvoker") as invoker_cls:
            result = self._invoke()

        self.assertNotEqual(result.exit_code, 0)
        self.assertIn("no valid game folders found", result.output)
        invoker_cls.return_value.mount.assert_not_called()

    def test_mounts_resolved_titles(self) -> None:
        (self.root / "gameA" / "merged").mkdir(parents=True)
        (self.root / "gameB" / "base").mkdir(parents=True)

        with mock.patch("cli.main.RcloneMountInvoker") as invoker_cls:
            result = self._invoke("-w")

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn('"gameA" -> "merged"', result.output)
        self.assertIn('"gameB" -> "base"', result.output)
        self.assertIn("Rclone command output:", result.output)
        spec = invoker_cls.return_value.mount.call_args.args[0]
        self.assertEqual(len(spec.upstreams), 3)
        self.assertTrue((self.root / "rw").is_dir())

    def test_mount_failure_exits_with_process_code(self) -> None:
        (self.root / "gameA" / "base").mkdir(parents=True)

        with mock.patch("cli.main.RcloneMountInvoker") as invoker_cls:
            invoker_cls.return_value.mount.side_effect = MountProcessError("rclone mount exited with status 2", returncode=2)
            result = self._invoke()

        self.assertEqual(result.exit_code, 2)
        self.assertIn("rclone mount exited with status 2", result.output)

    def test_dry_run_prints_config_and_does_not_mount(self) -> None:
        (self.root / "gameA" / "base").mkdir(parents=True)
        export_path = Path(self.temp.name) / "out" / "spec.json"

        with mock.patch("adapters.rclone_mount.subprocess.run") as run:
            result = self._invoke("--dry-run", "--export-json", str(export_path))

        self.assertEqual(result.exit_code, 0, result.output)
        run.assert_not_called()
        self.assertIn("RCLONE_CONFIG_ROMFUUNION_TYPE", result.output)
        payload = json.loads(export_path.read_text(encoding="utf-8"))
        self.assertEqual(len(payload["overlay"]["upstreams"]), 1)
        self.assertEqual(payload["overlay"]["upstreams"][0]["access_mode"], "ro")
        self.assertTrue(payload["rclone"]["upstreams"].endswith('/base:ro"'))

    def test_missing_library_root_is_reported(self) -> None:
        result = self.runner.invoke(
            app,
            ["switch", "fs", "-i", str(self.root / "nope"), "-o", str(self.mount_point), "--no-banner"],
        )

        self.assertEqual(result.exit_code, 1)
        self.assertIn("cannot read library directory", result.output)

    def test_invalid_setting_is_reported_as_configuration_error(self) -> None:
        (self.root / "gameA" / "base").mkdir(parents=True)

        with mock.patch("cli.main.RcloneMountInvoker") as invoker_cls:
            result = self.runner.invoke(
                app,
                ["switch", "fs", "-i", str(self.root), "-o", str(self.mount_point), "--no-banner"],
                env={"ROMFU_SORT_TITLES": "maybe"},
            )

        self.assertEqual(result.exit_code, 1)
        self.assertIn("invalid configuration", result.output)
        self.assertIsInstance(result.exception, SystemExit)
        invoker_cls.return_value.mount.assert_not_called()


class ScanCommandTests(unittest.TestCase):
    def test_scan_lists_titles(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            root = Path(temp_dir)
            (root / "Kirby" / "base").mkdir(parents=True)

            result = CliRunner().invoke(app, ["scan", "-i", str(root)])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Kirby", result.output)

    def test_scan_keeps_bracketed_title_names(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            root = Path(temp_dir)
            (root / "Zelda [0100ABC][v0]" / "base").mkdir(parents=True)

            result = CliRunner().invoke(app, ["scan", "-i", str(root)], env={"COLUMNS": "400"})

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Zelda [0100ABC][v0]", result.output)

    def test_scan_reports_invalid_setting(self) -> None:
        result = CliRunner().invoke(app, ["scan", "-i", "."], env={"ROMFU_CANDIDATE_SUBDIRS": "merged,base"})

        self.assertEqual(result.exit_code, 1)
        self.assertIn("invalid configuration", result.output)


class DoctorCommandTests(unittest.TestCase):
    def test_reports_missing_rclone(self) -> None:
        result = CliRunner().invoke(
            app,
            ["doctor", "run"],
            env={"ROMFU_RCLONE_BINARY": "romfu-no-such-rclone"},
        )

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("FAIL", result.output)


if __name__ == "__main__":
    unittest.main()
