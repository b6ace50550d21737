"""Persistent store collaborator for the importer.

``RecordStore`` is what the engine needs; ``DjangoStore`` implements it on the
catalog models. Django must already be configured before a DjangoStore is
built (management commands get that for free; the standalone CLI calls
``setup_django`` first).
"""
from __future__ import annotations

from typing import AbstractSet, Iterable, List, Protocol, Sequence, Tuple, Type

from .normalize import Candidate, UniversityId
from .results import IncompleteBulkWrite


class RecordStore(Protocol):
    # Exceptions that mean the store itself is gone; these abort the run.
    fatal_errors: Tuple[Type[BaseException], ...]

    def existing_codes(self) -> AbstractSet[str]:
        ...

    def universities(self) -> Iterable[Tuple[UniversityId, str, str]]:
        ...

    def bulk_insert(self, records: Sequence[Candidate]) -> AbstractSet[str]:
        """Insert all records, skipping codes that already exist.

        Returns the codes that were skipped because they were already present.
        Raises (rolling the batch back) if any other record was not written.
        """
        ...

    def insert_one(self, record: Candidate) -> None:
        ...


class DjangoStore:
    """Catalog ORM store for one entity (College or University)."""

    def __init__(self, model):
        from django.db import InterfaceError, OperationalError

        self.model = model
        self.fatal_errors = (OperationalError, InterfaceError)

    @classmethod
    def for_colleges(cls) -> "DjangoStore":
        from catalog.models import College

        return cls(College)

    @classmethod
    def for_universities(cls) -> "DjangoStore":
        from catalog.models import University

        return cls(University)

    def existing_codes(self) -> AbstractSet[str]:
        return frozenset(self.model.objects.values_list("aishe_code", flat=True).iterator())

    def universities(self) -> List[Tuple[UniversityId, str, str]]:
        from catalog.models import University

        return list(University.objects.order_by("aishe_code").values_list("id", "aishe_code", "name"))

    def bulk_insert(self, records: Sequence[Candidate]) -> AbstractSet[str]:
        from django.db import transaction

        codes = [r.aishe_code for r in records]
        objs = [self.model(**r.as_model_kwargs()) for r in records]
        stored = self.model.objects.filter(aishe_code__in=codes)
        with transaction.atomic():
            present = frozenset(stored.values_list("aishe_code", flat=True))
            self.model.objects.bulk_create(objs, ignore_conflicts=True)
            after = frozenset(stored.values_list("aishe_code", flat=True))
            missing = set(codes) - after
            if missing:
                raise IncompleteBulkWrite(missing)
        return present

    def insert_one(self, record: Candidate) -> None:
        from django.db import transaction

        # own savepoint so a failed row leaves the connection usable
        with transaction.atomic():
            self.model.objects.create(**record.as_model_kwargs())
