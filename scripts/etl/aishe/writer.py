"""Batched writer for new AISHE records.

Each batch is tried once as a single bulk insert that skips rows whose code is
already taken. If that insert fails outright the batch degrades to FALLBACK
mode and its records are written one at a time, so one bad record never takes
its siblings down with it. Store-connectivity errors are not recovered here;
they abort the run with every earlier batch still committed.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Iterator, List, Optional, Sequence, Tuple

from .normalize import Candidate
from .progress import ProgressReporter
from .results import ImportStats, RecordOutcome, RecordResult
from .store import RecordStore

logger = logging.getLogger("aishe_import")

DEFAULT_BATCH_SIZE = 500


class WriteMode(str, Enum):
    BULK = "bulk"
    FALLBACK = "fallback"


def partition(records: Sequence[Candidate], batch_size: int) -> Iterator[Tuple[int, Sequence[Candidate]]]:
    """Yield ``(offset, batch)`` in input order; every batch has at most batch_size items."""
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")
    for start in range(0, len(records), batch_size):
        yield start, records[start:start + batch_size]


class BatchWriter:
    def __init__(self, store: RecordStore, batch_size: int = DEFAULT_BATCH_SIZE, reporter: Optional[ProgressReporter] = None):
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        self.store = store
        self.batch_size = batch_size
        self.reporter = reporter or ProgressReporter()

    def _is_fatal(self, exc: BaseException) -> bool:
        return isinstance(exc, tuple(getattr(self.store, "fatal_errors", ()) or ()))

    def write_bulk(self, batch: Sequence[Candidate]) -> List[RecordResult]:
        """BULK mode: one call for the whole batch. Exceptions propagate to the caller."""
        skipped = self.store.bulk_insert(batch)
        results = []
        for rec in batch:
            if rec.aishe_code in skipped:
                results.append(RecordResult(rec.aishe_code, RecordOutcome.SKIPPED_CONFLICT, "already present"))
            else:
                results.append(RecordResult(rec.aishe_code, RecordOutcome.INSERTED))
        return results

    def write_fallback(self, batch: Sequence[Candidate]) -> List[RecordResult]:
        """FALLBACK mode: one insert per record; a failure only affects that record."""
        results = []
        for rec in batch:
            try:
                self.store.insert_one(rec)
            except Exception as exc:
                if self._is_fatal(exc):
                    raise
                logger.error("  Skip: %s - %s", rec.aishe_code, exc)
                results.append(RecordResult(rec.aishe_code, RecordOutcome.FAILED, f"{exc.__class__.__name__}: {exc}"))
                continue
            results.append(RecordResult(rec.aishe_code, RecordOutcome.INSERTED))
        return results

    def write_batch(self, offset: int, batch: Sequence[Candidate]) -> Tuple[WriteMode, List[RecordResult]]:
        try:
            return WriteMode.BULK, self.write_bulk(batch)
        except Exception as exc:
            if self._is_fatal(exc):
                raise
            logger.error("Batch error at %d: %s", offset, exc)
        return WriteMode.FALLBACK, self.write_fallback(batch)

    def write(self, records: Sequence[Candidate], stats: Optional[ImportStats] = None) -> ImportStats:
        stats = stats if stats is not None else ImportStats()
        total = len(records)
        self.reporter.start(total, self.batch_size)
        try:
            for offset, batch in partition(records, self.batch_size):
                mode, results = self.write_batch(offset, batch)
                for res in results:
                    stats.record(res)
                stats.batches += 1
                if mode is WriteMode.FALLBACK:
                    stats.fallback_batches += 1
                self.reporter.batch_done(stats, total, fallback=mode is WriteMode.FALLBACK)
        finally:
            stats.elapsed = self.reporter.elapsed()
        return stats
