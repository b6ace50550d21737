"""Run-start snapshot: university resolution index and dedup filter.

Both are built once per import run from two store reads and passed around
explicitly. Nothing here refreshes itself; a university or college written by
another process after the snapshot is simply not seen.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import AbstractSet, Iterable, Mapping, Optional, Set, Tuple

from .normalize import UniversityId

logger = logging.getLogger("aishe_import")


@dataclass(frozen=True)
class ResolutionIndex:
    """Read-only maps: institution code -> university id, lower(name) -> university id."""
    by_code: Mapping[str, UniversityId]
    by_name: Mapping[str, UniversityId]

    @classmethod
    def build(cls, universities: Iterable[Tuple[UniversityId, str, str]]) -> "ResolutionIndex":
        by_code: dict = {}
        by_name: dict = {}
        for uid, code, name in universities:
            code = (code or "").strip()
            key = (name or "").strip().lower()
            if code and code not in by_code:
                by_code[code] = uid
            if not key:
                continue
            if key in by_name:
                if by_name[key] != uid:
                    logger.warning("Duplicate university name in index, keeping first: %r", key)
                continue
            by_name[key] = uid
        return cls(by_code=MappingProxyType(by_code), by_name=MappingProxyType(by_name))

    def __len__(self) -> int:
        return len(self.by_code)


def resolve_university(
    index: ResolutionIndex,
    university_code: Optional[str],
    university_name: Optional[str],
) -> Optional[UniversityId]:
    """Return the linked university id, or None when unresolved.

    Code lookup wins over name lookup; the name is only consulted when the code
    is absent or unknown.
    """
    if university_code and university_code in index.by_code:
        return index.by_code[university_code]
    if university_name:
        return index.by_name.get(university_name.lower())
    return None


@dataclass(frozen=True)
class ImportSnapshot:
    """Everything the filtering stage needs, captured at run start."""
    existing_codes: AbstractSet[str]
    index: ResolutionIndex

    @classmethod
    def empty(cls) -> "ImportSnapshot":
        return cls(existing_codes=frozenset(), index=ResolutionIndex.build([]))


@dataclass
class DedupFilter:
    """Exact-code membership test against the snapshot.

    Codes accepted earlier in the same run are remembered so a dataset that
    lists one institution twice only submits it once.
    """
    existing: AbstractSet[str]
    _seen: Set[str] = field(default_factory=set, init=False)

    def is_existing(self, code: str) -> bool:
        return code in self.existing

    def is_new(self, code: str) -> bool:
        return code not in self.existing and code not in self._seen

    def accept(self, code: str) -> None:
        self._seen.add(code)
