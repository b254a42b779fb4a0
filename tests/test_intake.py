"""Pure normalization of intake and visit payloads."""
from datetime import date

from dentflow.services.intake import (
    TEETH,
    build_findings_from_grids,
    normalize_procedures,
    normalize_visit_payload,
    pad_findings,
    parse_num,
    split_intake,
    to_date_only,
    upcoming_appts,
)


class TestScalars:
    def test_parse_num(self):
        assert parse_num("1,200.50") == 1200.5
        assert parse_num("") == 0
        assert parse_num(None) == 0
        assert parse_num("abc") == 0
        assert parse_num("nan") == 0
        assert parse_num("inf") == 0
        assert parse_num(300) == 300

    def test_to_date_only(self):
        assert to_date_only("2024-05-01T10:30:00Z") == date(2024, 5, 1)
        assert to_date_only("2024-05-01") == date(2024, 5, 1)
        assert to_date_only("") is None
        assert to_date_only("not a date") is None


class TestFindings:
    def test_grids_fill_both_arches(self):
        f = build_findings_from_grids(["A", "B"], None, ["caries"], None)
        assert len(f["upper"]) == len(TEETH) == 16
        assert len(f["lower"]) == 16
        assert f["upper"][0] == {"tooth": 8, "grade": "A", "status": "caries"}
        assert f["upper"][1] == {"tooth": 7, "grade": "B", "status": ""}
        assert f["lower"][15] == {"tooth": 8, "grade": "", "status": ""}

    def test_pad_short_findings(self):
        f = pad_findings({"upper": [{"tooth": 8, "grade": "B"}], "lower": "junk"})
        assert len(f["upper"]) == 16 and len(f["lower"]) == 16
        assert f["upper"][0]["grade"] == "B"
        assert f["lower"][3] == {"tooth": 5, "grade": "", "status": ""}


class TestProcedures:
    def test_rows_shape_drops_empty_rows(self):
        rows = normalize_procedures({"procedures": {"rows": [
            {"visitDate": "2024-01-10T00:00:00Z", "procedure": " RCT ", "total": "1,000", "paid": "1,500"},
            {"procedure": "", "total": "", "paid": ""},
        ], "summary": {"total": 1000}}})
        assert rows == [{
            "visit_date": "2024-01-10",
            "procedure": "RCT",
            "next_appt_date": None,
            "total": 1000.0,
            "paid": 1500.0,
            "due": 0,
        }]

    def test_bare_rows_and_nothing_left(self):
        assert normalize_procedures({"rows": [{"total": "500"}]})[0]["due"] == 500.0
        assert normalize_procedures({"procedures": [{}]}) is None
        assert normalize_procedures({}) is None


class TestVisitPayload:
    def test_full_payload_defaults(self):
        out = normalize_visit_payload({"chiefComplaint": "Pain", "triggerFactors": "Sweet"})
        assert out["trigger_factors"] == ["Sweet"]
        assert out["findings"] is None
        assert out["procedures"] is None

    def test_partial_leaves_unsent_keys_absent(self):
        out = normalize_visit_payload({"diagnosisNotes": "ok"}, partial=True)
        assert "findings" not in out
        assert "procedures" not in out
        assert "trigger_factors" not in out

    def test_grids_become_findings(self):
        out = normalize_visit_payload({"upperGrades": ["C"] * 16, "lowerStatus": ["x"]})
        assert out["findings"]["upper"][5]["grade"] == "C"
        assert out["findings"]["lower"][0]["status"] == "x"
        assert "upperGrades" not in out


class TestSplitIntake:
    def test_review_shape(self):
        body = {
            "patientProfile": {"firstName": "Ravi", "lastName": "K"},
            "medicalHistory": {"asthma": True},
            "dentalExam": {"chiefComplaint": "Swelling", "upperGrades": ["A"]},
            "procedures": {"rows": [{"procedure": "Extraction", "total": "800"}]},
        }
        parts = split_intake(body)
        assert parts["patient"] == {"firstName": "Ravi", "lastName": "K"}
        assert parts["medical_history"] == {"asthma": True}
        assert parts["initial_visit"]["chiefComplaint"] == "Swelling"
        assert parts["initial_visit"]["procedures"][0]["procedure"] == "Extraction"

    def test_flat_shape(self):
        body = {"firstName": "Ravi", "initialVisit": {"chiefComplaint": "Pain"}}
        parts = split_intake(body)
        assert parts["patient"] == {"firstName": "Ravi"}
        assert parts["medical_history"] == {}
        assert parts["initial_visit"] == {"chiefComplaint": "Pain"}


def test_upcoming_appts_sorted_from_today():
    rows = [
        {"procedure": "Crown", "next_appt_date": "2024-03-20"},
        {"procedure": "Old", "next_appt_date": "2024-02-01"},
        {"procedure": "Review", "nextApptDate": "2024-03-05"},
        {"procedure": "None"},
    ]
    items = upcoming_appts(rows, date(2024, 3, 1))
    assert items == [
        {"date": date(2024, 3, 5), "procedure": "Review"},
        {"date": date(2024, 3, 20), "procedure": "Crown"},
    ]
    assert upcoming_appts(None, date(2024, 3, 1)) == []
