import unittest

from scripts.etl.aishe.normalize import (
    COL_CODE,
    COL_DISTRICT,
    COL_MANAGEMENT,
    COL_NAME,
    COL_STATE,
    COL_UNIV_CODE,
    COL_UNIV_NAME,
    COL_WEBSITE,
    COL_YEAR,
    CollegeCandidate,
    Rejection,
    UniversityCandidate,
    normalize_college_row,
    normalize_university_row,
    parse_year,
)


def college_row(**over):
    row = {
        COL_CODE: "C-1001",
        COL_NAME: "Acme College",
        COL_STATE: "Kerala",
        COL_DISTRICT: "Ernakulam",
    }
    row.update(over)
    return row


class TestParseYear(unittest.TestCase):
    def test_numeric_forms(self):
        for raw in (1998, "1998", 1998.0, " 1998 ", "1998.0"):
            self.assertEqual(parse_year(raw), 1998, raw)

    def test_non_numeric_is_absent(self):
        for raw in (None, "", "  ", "N/A", "19-98", 1998.5, True):
            self.assertIsNone(parse_year(raw), raw)


class TestNormalizeCollegeRow(unittest.TestCase):
    def test_required_fields_trimmed(self):
        cand = normalize_college_row(college_row(**{COL_NAME: "  Acme College  ", COL_STATE: " Kerala"}))
        self.assertIsInstance(cand, CollegeCandidate)
        self.assertEqual(cand.name, "Acme College")
        self.assertEqual(cand.state, "Kerala")
        self.assertIsNone(cand.university_id)

    def test_missing_required_fields_rejected(self):
        for column, attr in ((COL_CODE, "aishe_code"), (COL_NAME, "name"), (COL_STATE, "state"), (COL_DISTRICT, "district")):
            res = normalize_college_row(college_row(**{column: "   "}), row_number=7)
            self.assertIsInstance(res, Rejection)
            self.assertEqual(res.reason, f"missing:{attr}")
            self.assertEqual(res.row_number, 7)

    def test_absent_column_rejected(self):
        row = college_row()
        del row[COL_DISTRICT]
        self.assertEqual(normalize_college_row(row).reason, "missing:district")

    def test_numeric_code_from_spreadsheet(self):
        cand = normalize_college_row(college_row(**{COL_CODE: 531.0, COL_UNIV_CODE: 2001}))
        self.assertEqual(cand.aishe_code, "531")
        self.assertEqual(cand.university_aishe_code, "2001")

    def test_blank_optionals_become_none(self):
        cand = normalize_college_row(college_row(**{COL_WEBSITE: "   ", COL_MANAGEMENT: "", COL_YEAR: "unknown"}))
        self.assertIsNone(cand.website)
        self.assertIsNone(cand.management)
        self.assertIsNone(cand.year_of_establishment)
        self.assertIsNone(cand.university_name)

    def test_university_reference_kept_verbatim(self):
        cand = normalize_college_row(college_row(**{COL_UNIV_NAME: " Mahatma Gandhi University ", COL_YEAR: 1964.0}))
        self.assertEqual(cand.university_name, "Mahatma Gandhi University")
        self.assertEqual(cand.year_of_establishment, 1964)
        self.assertEqual(cand.as_model_kwargs()["university_name"], "Mahatma Gandhi University")


class TestNormalizeUniversityRow(unittest.TestCase):
    def test_university_candidate(self):
        row = {COL_CODE: "U-0001", COL_NAME: "Acme University", COL_STATE: "Goa", COL_DISTRICT: "North Goa", COL_YEAR: "1985"}
        cand = normalize_university_row(row)
        self.assertIsInstance(cand, UniversityCandidate)
        self.assertEqual(cand.year_of_establishment, 1985)
        self.assertNotIn("university_id", cand.as_model_kwargs())

    def test_university_missing_state(self):
        row = {COL_CODE: "U-0001", COL_NAME: "Acme University", COL_DISTRICT: "North Goa"}
        self.assertEqual(normalize_university_row(row).reason, "missing:state")


if __name__ == "__main__":
    unittest.main()
