from __future__ import annotations

import csv
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .results import ImportAbort

EXCEL_SUFFIXES = (".xlsx", ".xlsm")
TEXT_SUFFIXES = (".csv", ".tsv", ".txt")


def _detect_reader(f) -> csv.DictReader:
    """TSV/CSV reader: explicit tab when the header has one, else sniff, else comma."""
    head = f.readline()
    rest = f.read(8192)
    f.seek(0)
    if "\t" in head:
        return csv.DictReader(f, delimiter="\t")
    try:
        dialect = csv.Sniffer().sniff(head + rest, delimiters=",;|\t")
    except csv.Error:
        return csv.DictReader(f)
    return csv.DictReader(f, dialect=dialect)


def _is_blank(values: Iterable[Any]) -> bool:
    return all(v is None or (isinstance(v, str) and not v.strip()) for v in values)


def _rows_from_values(header: Sequence[Any], values: Iterable[Sequence[Any]]) -> List[Dict[str, Any]]:
    labels = [str(h).strip() if h is not None else "" for h in header]
    rows: List[Dict[str, Any]] = []
    for raw in values:
        if raw is None or _is_blank(raw):
            continue
        rows.append({label: cell for label, cell in zip(labels, raw) if label})
    return rows


def read_excel_first_sheet(path: Path) -> List[Dict[str, Any]]:
    import openpyxl

    wb = openpyxl.load_workbook(path, read_only=True, data_only=True)
    try:
        ws = wb.worksheets[0]
        it = ws.iter_rows(values_only=True)
        header: Optional[Sequence[Any]] = next(it, None)
        if header is None:
            return []
        return _rows_from_values(header, it)
    finally:
        wb.close()


def read_delimited(path: Path) -> List[Dict[str, Any]]:
    with open(path, encoding="utf-8-sig", newline="") as f:
        reader = _detect_reader(f)
        header = reader.fieldnames or []
        return _rows_from_values(header, ([row.get(h) for h in header] for row in reader))


def read_first_sheet(path: Path) -> List[Dict[str, Any]]:
    """Read the first sheet of a workbook (or a delimited file) into label->value rows.

    Missing or unreadable input is fatal for the run and raised as ImportAbort.
    """
    path = Path(path)
    if not path.exists():
        raise ImportAbort(f"File not found: {path}")
    suffix = path.suffix.lower()
    try:
        if suffix in EXCEL_SUFFIXES:
            return read_excel_first_sheet(path)
        if suffix in TEXT_SUFFIXES:
            return read_delimited(path)
    except Exception as exc:
        raise ImportAbort(f"Cannot read {path}: {exc.__class__.__name__}: {exc}") from exc
    raise ImportAbort(f"Unsupported input format '{suffix}' for {path}")
