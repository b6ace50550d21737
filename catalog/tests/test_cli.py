import csv
from pathlib import Path
from tempfile import TemporaryDirectory
from unittest.mock import patch

from django.test import TestCase

from catalog.models import ImportRun, University
from scripts.etl.aishe import cli


# Already running inside the Django test runner; cmd_import must not call
# django.setup() again.
@patch("scripts.etl.aishe.cli.setup_django", autospec=True)
class StandaloneCliTests(TestCase):
    def test_parse_args(self, _setup):
        ns = cli.parse_args(["colleges", "data/colleges.xlsx", "--batch-size", "1000"])
        self.assertEqual(ns.cmd, "colleges")
        self.assertEqual(ns.path, "data/colleges.xlsx")
        self.assertEqual(ns.batch_size, 1000)
        self.assertIsNone(ns.config)

    def test_missing_file_exits_nonzero(self, _setup):
        ns = cli.parse_args(["universities", "/nonexistent/University.xlsx"])
        with self.assertLogs("aishe_import", level="ERROR"):
            self.assertEqual(cli.cmd_import(ns), 1)
        self.assertFalse(ImportRun.objects.exists())

    def test_imports_from_config_inputs(self, _setup):
        with TemporaryDirectory() as tmp:
            tmp_path = Path(tmp)
            with (tmp_path / "University.csv").open("w", newline="", encoding="utf-8") as f:
                w = csv.writer(f)
                w.writerow(["Aishe Code", "Name", "State", "District"])
                w.writerow(["U-0001", "Acme University", "Goa", "North Goa"])
            cfg = tmp_path / "config.yaml"
            cfg.write_text("batch_size: 50\ninputs:\n  universities: University.csv\n", encoding="utf-8")
            ns = cli.parse_args(["universities", "--config", str(cfg)])
            self.assertEqual(cli.cmd_import(ns), 0)
        self.assertTrue(University.objects.filter(aishe_code="U-0001").exists())
        self.assertEqual(ImportRun.objects.get().batch_size, 50)

    def test_zero_batch_size_exits_nonzero(self, _setup):
        with TemporaryDirectory() as tmp:
            path = Path(tmp) / "University.csv"
            with path.open("w", newline="", encoding="utf-8") as f:
                w = csv.writer(f)
                w.writerow(["Aishe Code", "Name", "State", "District"])
                w.writerow(["U-0001", "Acme University", "Goa", "North Goa"])
            ns = cli.parse_args(["universities", str(path), "--batch-size", "0"])
            with self.assertLogs("aishe_import", level="ERROR"):
                self.assertEqual(cli.cmd_import(ns), 1)
        self.assertFalse(ImportRun.objects.exists())
        self.assertFalse(University.objects.exists())
