import io
import json
import os
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path
from unittest.mock import patch

from medicita import cli
from medicita.config import load_settings


class CommandLineTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        root = Path(self._tmp.name)
        self.env_patcher = patch.dict(
            os.environ,
            {
                "MEDICITA_DATA_DIR": str(root / "data"),
                "MEDICITA_REPORTS_DIR": str(root / "reports"),
                "MEDICITA_LOG_LEVEL": "warning",
            },
        )
        self.env_patcher.start()

    def tearDown(self) -> None:
        self.env_patcher.stop()
        self._tmp.cleanup()

    def _run(self, *argv: str) -> tuple:
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            code = cli.main(list(argv))
        return code, buffer.getvalue()

    def test_seed_then_list(self) -> None:
        code, _ = self._run("seed")
        self.assertEqual(code, 0)
        self.assertTrue((Path(self._tmp.name) / "data" / "med_doctors.json").exists())

        code, output = self._run("list", "doctors", "--query", "luis")
        self.assertEqual(code, 0)
        rows = json.loads(output)
        self.assertEqual([row["nombre"] for row in rows], ["Dr. Luis García"])

    def test_report_without_history_fails(self) -> None:
        code, _ = self._run("report", "pac_missing")
        self.assertEqual(code, 1)

    def test_settings_from_environment(self) -> None:
        with patch.dict(os.environ, {"MEDICITA_RECHECK_CONFLICTS_ON_UPDATE": "yes", "PORT": "8080"}):
            settings = load_settings()
        self.assertTrue(settings.recheck_conflicts_on_update)
        self.assertEqual(settings.port, 8080)
        self.assertEqual(settings.key_prefix, "med_")
        self.assertEqual(settings.log_level, "WARNING")

        with patch.dict(os.environ, {"PORT": "abc"}):
            with self.assertRaises(ValueError):
                load_settings()


if __name__ == "__main__":
    unittest.main()
