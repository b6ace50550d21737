"""
AISHE fast seeder

Reconciles an AISHE "Institution Directory" export (universities or affiliated
colleges) into the catalog tables:

  LOADING    read existing institution codes (+ universities, for colleges)
  FILTERING  normalize rows, resolve the parent university, drop known codes
  WRITING    batched bulk insert, per-record fallback for a failing batch
  DONE

A run never overwrites: a code that is already stored is skipped. Rerunning the
same file after a crash only writes what the first run did not get to.

Usage (from the project root):
  python manage.py import_colleges "data/College-Affiliated College.xlsx"
  python manage.py import_universities data/University.xlsx --batch-size 1000
  python scripts/etl/aishe/cli.py colleges data/colleges.csv --config scripts/etl/aishe/config.yaml
"""
from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

import yaml

from .normalize import Candidate, Rejection, normalize_college_row, normalize_university_row
from .progress import ProgressReporter
from .reader import read_first_sheet
from .resolve import DedupFilter, ImportSnapshot, ResolutionIndex, resolve_university
from .results import ImportAbort, ImportStats, RecordOutcome, RecordResult
from .store import RecordStore
from .writer import DEFAULT_BATCH_SIZE, BatchWriter


ACTION_COLLEGES = "colleges"
ACTION_UNIVERSITIES = "universities"
ACTIONS = (ACTION_COLLEGES, ACTION_UNIVERSITIES)

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"

logger = logging.getLogger("aishe_import")


def configure_logging(logs_dir: Optional[Path] = None, level: int = logging.INFO) -> logging.Logger:
    """Attach stdout (and optionally a timestamped file) handlers once."""
    logger.setLevel(level)
    fmt = logging.Formatter(LOG_FORMAT)
    if not logger.handlers:
        sh = logging.StreamHandler(sys.stdout)
        sh.setFormatter(fmt)
        logger.addHandler(sh)
    if logs_dir is not None and not any(isinstance(h, logging.FileHandler) for h in logger.handlers):
        logs_dir.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(logs_dir / f"import_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log")
        fh.setFormatter(fmt)
        logger.addHandler(fh)
    return logger


@dataclass
class ImportConfig:
    """Importer settings loaded from YAML with sensible defaults."""
    batch_size: int = DEFAULT_BATCH_SIZE
    logs_dir: Optional[Path] = None
    inputs: Dict[str, str] = field(default_factory=dict)

    @staticmethod
    def from_yaml(path: Path) -> "ImportConfig":
        path = Path(path)
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        raw_batch = data.get("batch_size")
        batch_size = DEFAULT_BATCH_SIZE if raw_batch is None else int(raw_batch)
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        logs_val = data.get("logs_dir")
        logs_dir = None
        if logs_val and str(logs_val).strip():
            logs_dir = Path(logs_val)
            if not logs_dir.is_absolute():
                logs_dir = (path.parent / logs_dir).resolve()
        inputs = {str(k): str(v) for k, v in (data.get("inputs") or {}).items()}
        return ImportConfig(batch_size=batch_size, logs_dir=logs_dir, inputs=inputs)

    def input_for(self, action: str, base: Optional[Path] = None) -> Optional[Path]:
        rel = self.inputs.get(action)
        if not rel:
            return None
        p = Path(rel)
        if not p.is_absolute() and base is not None:
            p = base / p
        return p


class RunState(str, Enum):
    LOADING = "loading"
    FILTERING = "filtering"
    WRITING = "writing"
    DONE = "done"
    FAILED = "failed"


_ORDER = [RunState.LOADING, RunState.FILTERING, RunState.WRITING, RunState.DONE]


class Seeder:
    """One import run over one dataset. Not reusable: the state only moves forward."""

    def __init__(
        self,
        store: RecordStore,
        action: str = ACTION_COLLEGES,
        batch_size: int = DEFAULT_BATCH_SIZE,
        reporter: Optional[ProgressReporter] = None,
    ):
        if action not in ACTIONS:
            raise ValueError(f"Unknown action: {action}")
        self.store = store
        self.action = action
        self.reporter = reporter or ProgressReporter()
        self.writer = BatchWriter(store, batch_size=batch_size, reporter=self.reporter)
        self.state: Optional[RunState] = None
        self.stats = ImportStats()

    def _enter(self, state: RunState) -> None:
        if state is not RunState.FAILED:
            current = _ORDER.index(self.state) if self.state in _ORDER else -1
            if _ORDER.index(state) != current + 1:
                raise RuntimeError(f"Invalid transition {self.state} -> {state}")
        logger.debug("%s import: %s -> %s", self.action, self.state, state)
        self.state = state

    def load_snapshot(self) -> ImportSnapshot:
        self._enter(RunState.LOADING)
        try:
            existing = frozenset(self.store.existing_codes())
            if self.action == ACTION_COLLEGES:
                index = ResolutionIndex.build(self.store.universities())
            else:
                index = ResolutionIndex.build([])
        except Exception as exc:
            raise ImportAbort(f"Cannot load snapshot from store: {exc.__class__.__name__}: {exc}") from exc
        self.reporter.emit(f"Already seeded: {len(existing)} {self.action}")
        if self.action == ACTION_COLLEGES:
            self.reporter.emit(f"Loaded {len(index)} universities for linking")
        return ImportSnapshot(existing_codes=existing, index=index)

    def filter_rows(self, rows: Sequence[Mapping[str, Any]], snapshot: ImportSnapshot) -> List[Candidate]:
        self._enter(RunState.FILTERING)
        normalize = normalize_college_row if self.action == ACTION_COLLEGES else normalize_university_row
        dedup = DedupFilter(snapshot.existing_codes)
        out: List[Candidate] = []
        for row_number, row in enumerate(rows, start=2):
            self.stats.total_rows += 1
            cand = normalize(row, row_number)
            if isinstance(cand, Rejection):
                logger.debug("Row %d rejected (%s)", row_number, cand.reason)
                self.stats.record(RecordResult("", RecordOutcome.SKIPPED_INVALID, cand.reason))
                continue
            code = cand.aishe_code
            if dedup.is_existing(code):
                self.stats.record(RecordResult(code, RecordOutcome.SKIPPED_EXISTING))
                continue
            if not dedup.is_new(code):
                self.stats.record(RecordResult(code, RecordOutcome.SKIPPED_DUPLICATE, "duplicate_in_input"))
                continue
            if self.action == ACTION_COLLEGES:
                uid = resolve_university(snapshot.index, cand.university_aishe_code, cand.university_name)
                if uid is None:
                    self.stats.unresolved += 1
                else:
                    self.stats.linked += 1
                    cand = replace(cand, university_id=uid)
            dedup.accept(code)
            out.append(cand)
        self.reporter.emit(f"New {self.action} to seed: {len(out)}")
        self.reporter.emit(f"Skipping: {self.stats.total_rows - len(out)} (already seeded, duplicate or invalid)")
        return out

    def write(self, records: Sequence[Candidate]) -> ImportStats:
        self._enter(RunState.WRITING)
        if records:
            self.writer.write(records, self.stats)
        else:
            self.reporter.emit("Nothing to seed - all records already exist!")
        self._enter(RunState.DONE)
        return self.stats

    def run(self, rows: Sequence[Mapping[str, Any]]) -> ImportStats:
        try:
            snapshot = self.load_snapshot()
            records = self.filter_rows(rows, snapshot)
            stats = self.write(records)
        except Exception:
            self._enter(RunState.FAILED)
            raise
        self.reporter.summary(stats)
        return stats


def seed_colleges(rows, store: RecordStore, batch_size: int = DEFAULT_BATCH_SIZE, reporter: Optional[ProgressReporter] = None) -> ImportStats:
    return Seeder(store, ACTION_COLLEGES, batch_size=batch_size, reporter=reporter).run(rows)


def seed_universities(rows, store: RecordStore, batch_size: int = DEFAULT_BATCH_SIZE, reporter: Optional[ProgressReporter] = None) -> ImportStats:
    return Seeder(store, ACTION_UNIVERSITIES, batch_size=batch_size, reporter=reporter).run(rows)


def default_batch_size() -> int:
    """AISHE_IMPORT_BATCH_SIZE from Django settings when set, else 500. Not validated here."""
    from django.conf import settings
    from django.core.exceptions import ImproperlyConfigured

    try:
        value = getattr(settings, "AISHE_IMPORT_BATCH_SIZE", None)
    except ImproperlyConfigured:
        return DEFAULT_BATCH_SIZE
    return DEFAULT_BATCH_SIZE if value is None else int(value)


def run_import(
    path: Path,
    action: str,
    batch_size: Optional[int] = None,
    sink: Optional[Callable[[str], None]] = None,
    store: Optional[RecordStore] = None,
) -> ImportStats:
    """Read ``path`` and seed it into the catalog, keeping an ImportRun audit row.

    Raises ImportAbort for anything that stops the run before or during writes.
    Batches committed before an abort stay committed.
    """
    from django.db import DatabaseError
    from django.utils import timezone

    from catalog.models import ImportRun
    from .store import DjangoStore

    if action not in ACTIONS:
        raise ImportAbort(f"Unknown action: {action}")
    path = Path(path).resolve()
    if batch_size is None:
        batch_size = default_batch_size()
    if batch_size < 1:
        raise ImportAbort(f"batch_size must be >= 1, got {batch_size}")
    reporter = ProgressReporter(sink=sink)
    reporter.emit(f"Reading file: {path}")
    rows = read_first_sheet(path)
    reporter.emit(f"Total records in file: {len(rows)}")

    if store is None:
        store = DjangoStore.for_colleges() if action == ACTION_COLLEGES else DjangoStore.for_universities()
    try:
        run = ImportRun.objects.create(
            action=action,
            source_path=str(path),
            batch_size=batch_size,
            status=ImportRun.Status.RUNNING,
            started_at=timezone.now(),
        )
    except DatabaseError as exc:
        raise ImportAbort(f"Cannot reach the database: {exc.__class__.__name__}: {exc}") from exc

    seeder = Seeder(store, action, batch_size=batch_size, reporter=reporter)
    try:
        stats = seeder.run(rows)
    except Exception as exc:
        run.status = ImportRun.Status.FAILED
        run.error = f"{exc.__class__.__name__}: {exc}"
        run.stats = seeder.stats.as_dict({"state": RunState.FAILED.value})
        run.finished_at = timezone.now()
        try:
            run.save(update_fields=["status", "error", "stats", "finished_at", "updated_at"])
        except DatabaseError:
            logger.exception("Could not record failed import run %s", run.pk)
        if isinstance(exc, ImportAbort):
            raise
        raise ImportAbort(run.error) from exc

    run.status = ImportRun.Status.DONE
    run.stats = stats.as_dict({"state": RunState.DONE.value})
    run.finished_at = timezone.now()
    run.save(update_fields=["status", "stats", "finished_at", "updated_at"])
    logger.info("%s import finished: inserted=%d skipped=%d failed=%d", action, stats.inserted, stats.skipped, stats.failed)
    return stats
