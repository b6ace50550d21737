"""Row normalization for AISHE spreadsheet exports.

Turns one raw sheet row (column label -> raw cell value) into a typed candidate
record, or a Rejection naming the first missing required column. Pure
functions only; nothing here touches the database.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union

# Column labels as they appear in the AISHE "Institution Directory" exports.
COL_CODE = "Aishe Code"
COL_NAME = "Name"
COL_STATE = "State"
COL_DISTRICT = "District"
COL_WEBSITE = "Website"
COL_YEAR = "Year Of Establishment"
COL_LOCATION = "Location"
COL_COLLEGE_TYPE = "College Type"
COL_MANAGEMENT = "Management"
COL_UNIV_CODE = "University Aishe Code"
COL_UNIV_NAME = "University Name"
COL_UNIV_TYPE = "University Type"

# Primary key of a University row (int for the ORM store).
UniversityId = Union[int, str]

REQUIRED_COLUMNS = (
    ("aishe_code", COL_CODE),
    ("name", COL_NAME),
    ("state", COL_STATE),
    ("district", COL_DISTRICT),
)


@dataclass(frozen=True)
class UniversityCandidate:
    aishe_code: str
    name: str
    state: str
    district: str
    website: Optional[str] = None
    year_of_establishment: Optional[int] = None
    location: Optional[str] = None

    def as_model_kwargs(self) -> Dict[str, Any]:
        return {
            "aishe_code": self.aishe_code,
            "name": self.name,
            "state": self.state,
            "district": self.district,
            "website": self.website,
            "year_of_establishment": self.year_of_establishment,
            "location": self.location,
        }


@dataclass(frozen=True)
class CollegeCandidate:
    """A parsed college row that has not been written yet.

    ``university_id`` stays None until the resolver links it; the three
    ``university_*`` text fields are kept verbatim either way.
    """
    aishe_code: str
    name: str
    state: str
    district: str
    website: Optional[str] = None
    year_of_establishment: Optional[int] = None
    location: Optional[str] = None
    college_type: Optional[str] = None
    management: Optional[str] = None
    university_aishe_code: Optional[str] = None
    university_name: Optional[str] = None
    university_type: Optional[str] = None
    university_id: Optional[UniversityId] = None

    def as_model_kwargs(self) -> Dict[str, Any]:
        return {
            "aishe_code": self.aishe_code,
            "name": self.name,
            "state": self.state,
            "district": self.district,
            "website": self.website,
            "year_of_establishment": self.year_of_establishment,
            "location": self.location,
            "college_type": self.college_type,
            "management": self.management,
            "university_aishe_code": self.university_aishe_code,
            "university_name": self.university_name,
            "university_type": self.university_type,
            "university_id": self.university_id,
        }


@dataclass(frozen=True)
class Rejection:
    """A structurally invalid row; ``reason`` is e.g. ``missing:name``."""
    reason: str
    row_number: Optional[int] = None


Candidate = Union[UniversityCandidate, CollegeCandidate]


def _text(value: Any) -> str:
    """Raw textual form of a cell, trimmed. None becomes ''."""
    if value is None:
        return ""
    # openpyxl hands back floats for numeric cells; 531.0 is code "531"
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def _optional(value: Any) -> Optional[str]:
    s = _text(value)
    return s or None


def parse_year(value: Any) -> Optional[int]:
    """Parse Year Of Establishment; anything non-numeric is treated as absent."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    s = str(value).strip()
    if not s:
        return None
    try:
        return int(s)
    except ValueError:
        pass
    try:
        f = float(s)
    except ValueError:
        return None
    return int(f) if f.is_integer() else None


def _required(row: Mapping[str, Any], row_number: Optional[int]) -> Union[Dict[str, str], Rejection]:
    out: Dict[str, str] = {}
    for attr, column in REQUIRED_COLUMNS:
        val = _text(row.get(column))
        if not val:
            return Rejection(reason=f"missing:{attr}", row_number=row_number)
        out[attr] = val
    return out


def normalize_university_row(row: Mapping[str, Any], row_number: Optional[int] = None) -> Union[UniversityCandidate, Rejection]:
    req = _required(row, row_number)
    if isinstance(req, Rejection):
        return req
    return UniversityCandidate(
        website=_optional(row.get(COL_WEBSITE)),
        year_of_establishment=parse_year(row.get(COL_YEAR)),
        location=_optional(row.get(COL_LOCATION)),
        **req,
    )


def normalize_college_row(row: Mapping[str, Any], row_number: Optional[int] = None) -> Union[CollegeCandidate, Rejection]:
    req = _required(row, row_number)
    if isinstance(req, Rejection):
        return req
    return CollegeCandidate(
        website=_optional(row.get(COL_WEBSITE)),
        year_of_establishment=parse_year(row.get(COL_YEAR)),
        location=_optional(row.get(COL_LOCATION)),
        college_type=_optional(row.get(COL_COLLEGE_TYPE)),
        management=_optional(row.get(COL_MANAGEMENT)),
        university_aishe_code=_optional(row.get(COL_UNIV_CODE)),
        university_name=_optional(row.get(COL_UNIV_NAME)),
        university_type=_optional(row.get(COL_UNIV_TYPE)),
        **req,
    )
