"""Per-record outcomes and run statistics for the AISHE importer."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class ImportAbort(RuntimeError):
    """Run-aborting condition: unreadable input or unreachable store."""


class IncompleteBulkWrite(RuntimeError):
    """A bulk insert returned without error but some records are not in the store.

    Raised by stores whose skip-on-conflict insert also swallows other
    constraint failures (SQLite INSERT OR IGNORE drops CHECK violations).
    The writer treats it like any other bulk failure.
    """

    def __init__(self, missing):
        self.missing = sorted(missing)
        super().__init__(f"{len(self.missing)} record(s) not written: {', '.join(self.missing[:10])}")


class RecordOutcome(str, Enum):
    INSERTED = "inserted"
    SKIPPED_INVALID = "skipped_invalid"
    SKIPPED_EXISTING = "skipped_existing"
    SKIPPED_DUPLICATE = "skipped_duplicate"
    SKIPPED_CONFLICT = "skipped_conflict"
    FAILED = "failed"


@dataclass(frozen=True)
class RecordResult:
    code: str
    outcome: RecordOutcome
    detail: str = ""


@dataclass
class ImportStats:
    """Counters accumulated over one run. ``record`` is the only mutator."""
    total_rows: int = 0
    rejected: int = 0
    existing: int = 0
    duplicates: int = 0
    conflicts: int = 0
    inserted: int = 0
    failed: int = 0
    batches: int = 0
    fallback_batches: int = 0
    linked: int = 0
    unresolved: int = 0
    elapsed: float = 0.0
    rejections: Dict[str, int] = field(default_factory=dict)
    failures: List[Dict[str, str]] = field(default_factory=list)

    def record(self, result: RecordResult) -> None:
        outcome = result.outcome
        if outcome is RecordOutcome.INSERTED:
            self.inserted += 1
        elif outcome is RecordOutcome.SKIPPED_INVALID:
            self.rejected += 1
            reason = result.detail or "invalid"
            self.rejections[reason] = self.rejections.get(reason, 0) + 1
        elif outcome is RecordOutcome.SKIPPED_EXISTING:
            self.existing += 1
        elif outcome is RecordOutcome.SKIPPED_DUPLICATE:
            self.duplicates += 1
        elif outcome is RecordOutcome.SKIPPED_CONFLICT:
            self.conflicts += 1
        elif outcome is RecordOutcome.FAILED:
            self.failed += 1
            self.failures.append({"code": result.code, "error": result.detail})

    @property
    def skipped(self) -> int:
        return self.rejected + self.existing + self.duplicates + self.conflicts

    @property
    def rate(self) -> float:
        return self.inserted / self.elapsed if self.elapsed > 0 else 0.0

    def as_dict(self, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        out = asdict(self)
        out["rejections"] = dict(self.rejections)
        out["skipped"] = self.skipped
        out["rate"] = round(self.rate, 1)
        out["elapsed"] = round(self.elapsed, 3)
        if extra:
            out.update(extra)
        return out
