import unittest
from pathlib import Path
from tempfile import TemporaryDirectory

from scripts.etl.aishe.normalize import (
    COL_CODE,
    COL_DISTRICT,
    COL_NAME,
    COL_STATE,
    COL_UNIV_CODE,
    COL_UNIV_NAME,
)
from scripts.etl.aishe.progress import ProgressReporter
from scripts.etl.aishe.results import ImportAbort
from scripts.etl.aishe.seed import ImportConfig, RunState, Seeder, seed_colleges, seed_universities

from .fakes import FakeStore

ACME = {COL_CODE: "U1", COL_NAME: "Acme College", COL_STATE: "X", COL_DISTRICT: "Y", COL_UNIV_CODE: "UNIV1"}
SCENARIO_ROWS = [dict(ACME), dict(ACME), {COL_CODE: "", COL_NAME: "Bad"}]
UNIVERSITIES = [("u-1", "UNIV1", "Acme University")]


def quiet():
    return ProgressReporter(sink=lambda line: None)


class TestSeedColleges(unittest.TestCase):
    def test_scenario_fresh_store(self):
        store = FakeStore(universities=UNIVERSITIES)
        stats = seed_colleges(SCENARIO_ROWS, store, reporter=quiet())
        self.assertEqual(stats.inserted, 1)
        self.assertEqual(stats.duplicates, 1)
        self.assertEqual(stats.rejected, 1)
        self.assertEqual(stats.rejections, {"missing:aishe_code": 1})
        self.assertEqual(stats.linked, 1)
        self.assertEqual(store.written["U1"].university_id, "u-1")
        self.assertEqual(store.bulk_calls, [["U1"]])

    def test_scenario_code_already_stored(self):
        store = FakeStore(existing={"U1"}, universities=UNIVERSITIES)
        stats = seed_colleges(SCENARIO_ROWS, store, reporter=quiet())
        self.assertEqual(stats.inserted, 0)
        self.assertEqual(stats.existing, 2)
        self.assertEqual(store.bulk_calls, [])

    def test_rerun_inserts_nothing(self):
        rows = [
            {COL_CODE: f"C-{i}", COL_NAME: f"College {i}", COL_STATE: "Goa", COL_DISTRICT: "North Goa"}
            for i in range(25)
        ]
        store = FakeStore()
        first = seed_colleges(rows, store, batch_size=10, reporter=quiet())
        second = seed_colleges(rows, store, batch_size=10, reporter=quiet())
        self.assertEqual(first.inserted, 25)
        self.assertEqual(first.batches, 3)
        self.assertEqual(second.inserted, 0)
        self.assertEqual(second.existing, 25)
        self.assertEqual(len(store.bulk_calls), 3)

    def test_resume_after_partial_run(self):
        rows = [
            {COL_CODE: f"C-{i}", COL_NAME: f"College {i}", COL_STATE: "Goa", COL_DISTRICT: "North Goa"}
            for i in range(5)
        ]
        store = FakeStore(existing={"C-0", "C-1"})
        stats = seed_colleges(rows, store, reporter=quiet())
        self.assertEqual(stats.inserted, 3)
        self.assertEqual(sorted(store.written), ["C-2", "C-3", "C-4"])

    def test_name_resolution_and_unresolved(self):
        rows = [
            {COL_CODE: "C-1", COL_NAME: "One", COL_STATE: "Goa", COL_DISTRICT: "N", COL_UNIV_NAME: "acme university"},
            {COL_CODE: "C-2", COL_NAME: "Two", COL_STATE: "Goa", COL_DISTRICT: "N", COL_UNIV_NAME: "Unknown University"},
        ]
        store = FakeStore(universities=UNIVERSITIES)
        stats = seed_colleges(rows, store, reporter=quiet())
        self.assertEqual(stats.linked, 1)
        self.assertEqual(stats.unresolved, 1)
        self.assertEqual(store.written["C-1"].university_id, "u-1")
        self.assertIsNone(store.written["C-2"].university_id)
        self.assertEqual(store.written["C-2"].university_name, "Unknown University")

    def test_nothing_to_seed(self):
        lines = []
        stats = seed_colleges([{COL_CODE: "", COL_NAME: "Bad"}], FakeStore(), reporter=ProgressReporter(sink=lines.append))
        self.assertEqual(stats.inserted, 0)
        self.assertIn("Nothing to seed - all records already exist!", lines)
        self.assertIn("=== COMPLETE ===", lines)


class TestSeedUniversities(unittest.TestCase):
    def test_universities_are_not_linked(self):
        rows = [{COL_CODE: "UNIV1", COL_NAME: "Acme University", COL_STATE: "X", COL_DISTRICT: "Y"}]
        store = FakeStore(universities=UNIVERSITIES)
        stats = seed_universities(rows, store, reporter=quiet())
        self.assertEqual(stats.inserted, 1)
        self.assertEqual(stats.linked, 0)
        self.assertNotIn("university_id", store.written["UNIV1"].as_model_kwargs())


class TestSeederStateMachine(unittest.TestCase):
    def test_states_move_forward_only(self):
        seeder = Seeder(FakeStore(), reporter=quiet())
        self.assertIsNone(seeder.state)
        seeder.run([])
        self.assertIs(seeder.state, RunState.DONE)
        with self.assertRaises(RuntimeError):
            seeder.run([])

    def test_cannot_write_before_filtering(self):
        seeder = Seeder(FakeStore(), reporter=quiet())
        with self.assertRaises(RuntimeError):
            seeder.write([])

    def test_unreachable_store_aborts_before_writes(self):
        store = FakeStore(down=True)
        seeder = Seeder(store, reporter=quiet())
        with self.assertRaises(ImportAbort):
            seeder.run([dict(ACME)])
        self.assertIs(seeder.state, RunState.FAILED)
        self.assertEqual(store.bulk_calls, [])

    def test_unknown_action(self):
        with self.assertRaises(ValueError):
            Seeder(FakeStore(), action="programs")


class TestImportConfig(unittest.TestCase):
    def test_from_yaml(self):
        with TemporaryDirectory() as tmp:
            tmp_path = Path(tmp)
            cfg_path = tmp_path / "config.yaml"
            cfg_path.write_text(
                "batch_size: 250\nlogs_dir: logs\ninputs:\n  colleges: data/colleges.xlsx\n",
                encoding="utf-8",
            )
            cfg = ImportConfig.from_yaml(cfg_path)
            self.assertEqual(cfg.batch_size, 250)
            self.assertEqual(cfg.logs_dir, (tmp_path / "logs").resolve())
            self.assertEqual(cfg.input_for("colleges", base=tmp_path), tmp_path / "data" / "colleges.xlsx")
            self.assertIsNone(cfg.input_for("universities", base=tmp_path))

    def test_empty_yaml_uses_defaults(self):
        with TemporaryDirectory() as tmp:
            cfg_path = Path(tmp) / "config.yaml"
            cfg_path.write_text("", encoding="utf-8")
            cfg = ImportConfig.from_yaml(cfg_path)
            self.assertEqual(cfg.batch_size, 500)
            self.assertIsNone(cfg.logs_dir)
            self.assertEqual(cfg.inputs, {})

    def test_zero_batch_size_rejected(self):
        with TemporaryDirectory() as tmp:
            cfg_path = Path(tmp) / "config.yaml"
            cfg_path.write_text("batch_size: 0\n", encoding="utf-8")
            with self.assertRaises(ValueError):
                ImportConfig.from_yaml(cfg_path)


if __name__ == "__main__":
    unittest.main()
