from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from .results import ImportStats

logger = logging.getLogger("aishe_import")


class ProgressReporter:
    """Emits throughput and completion lines as batches land.

    ``sink`` receives plain strings (logger.info by default; management
    commands pass ``self.stdout.write``). ``clock`` is injectable for tests.
    """

    def __init__(self, sink: Optional[Callable[[str], None]] = None, clock: Callable[[], float] = time.monotonic):
        self.sink = sink or logger.info
        self.clock = clock
        self._started: Optional[float] = None
        self.lines: int = 0

    def emit(self, line: str) -> None:
        self.lines += 1
        self.sink(line)

    def start(self, total: int, batch_size: int) -> None:
        self._started = self.clock()
        self.emit(f"Starting bulk insert of {total} records (batch size: {batch_size})")

    def elapsed(self) -> float:
        if self._started is None:
            return 0.0
        return max(0.0, self.clock() - self._started)

    def batch_done(self, stats: ImportStats, total: int, fallback: bool = False) -> None:
        elapsed = self.elapsed()
        rate = stats.inserted / elapsed if elapsed > 0 else 0.0
        line = f"Progress: {stats.inserted}/{total} ({rate:.0f} records/sec, {elapsed:.1f}s)"
        if fallback:
            line += " [per-record fallback]"
        self.emit(line)

    def summary(self, stats: ImportStats) -> None:
        self.emit("=== COMPLETE ===")
        self.emit(f"Inserted: {stats.inserted}")
        self.emit(
            f"Skipped: {stats.skipped} (invalid={stats.rejected} existing={stats.existing} "
            f"duplicate={stats.duplicates} conflict={stats.conflicts})"
        )
        if stats.failed:
            self.emit(f"Failed: {stats.failed}")
        self.emit(f"Time: {stats.elapsed:.1f} seconds")
        self.emit(f"Rate: {stats.rate:.0f} records/sec")
