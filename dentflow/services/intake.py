"""
Normalization of intake and visit payloads.

The front end posts patient intake in two shapes (a flat profile with
``medicalHistory``/``initialVisit``, or the multi-step review form with
``patientProfile``/``dentalExam``/``procedures.rows``) and visit bodies whose
findings may arrive either as a finished object or as four per-tooth grids.
Everything here is pure and side-effect free; the schemas call into it from
their ``mode="before"`` validators.
"""
from datetime import date, datetime
from typing import Any, Iterable

# FDI-style order across one arch: right molars to left molars
TEETH = (8, 7, 6, 5, 4, 3, 2, 1, 1, 2, 3, 4, 5, 6, 7, 8)
ARCHES = ("upper", "lower")


def pick(src: dict, *keys: str, default: Any = None) -> Any:
    """First key present in src (camelCase and snake_case spellings)."""
    for k in keys:
        if k in src:
            return src[k]
    return default


def has_value(v: Any) -> bool:
    return str(v if v is not None else "").strip() != ""


def to_date_only(v: Any) -> date | None:
    if not v:
        return None
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, date):
        return v
    text = str(v).strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def parse_num(v: Any) -> float:
    """'1,200.50' -> 1200.5; anything unparseable (or NaN/inf) -> 0."""
    try:
        n = float(str(v if v is not None else "").replace(",", "").strip())
    except ValueError:
        return 0.0
    if n != n or n in (float("inf"), float("-inf")):
        return 0.0
    return n


def non_negative(n: float) -> float:
    return n if n >= 0 else 0.0


# ---------- findings ----------

def _tooth_entry(i: int, grade: Any = "", status: Any = "", tooth: Any = None) -> dict:
    return {
        "tooth": tooth if tooth not in (None, "") else TEETH[i],
        "grade": grade or "",
        "status": status or "",
    }


def build_findings_from_grids(
    upper_grades: Iterable | None = None,
    lower_grades: Iterable | None = None,
    upper_status: Iterable | None = None,
    lower_status: Iterable | None = None,
) -> dict:
    grids = {
        "upper": (list(upper_grades or []), list(upper_status or [])),
        "lower": (list(lower_grades or []), list(lower_status or [])),
    }
    out = {}
    for arch, (grades, statuses) in grids.items():
        out[arch] = [
            _tooth_entry(
                i,
                grades[i] if i < len(grades) else "",
                statuses[i] if i < len(statuses) else "",
            )
            for i in range(len(TEETH))
        ]
    return out


def pad_findings(findings: dict) -> dict:
    """Coerces a findings object to exactly 16 upper and 16 lower entries."""
    out = {}
    for arch in ARCHES:
        rows = findings.get(arch) or []
        if not isinstance(rows, list):
            rows = []
        entries = []
        for i in range(len(TEETH)):
            r = rows[i] if i < len(rows) and isinstance(rows[i], dict) else {}
            entries.append(_tooth_entry(i, r.get("grade"), r.get("status"), r.get("tooth")))
        out[arch] = entries
    return out


def normalize_findings(src: dict) -> dict | None:
    findings = src.get("findings")
    if isinstance(findings, dict):
        return pad_findings(findings)
    grid_keys = (("upperGrades", "upper_grades"), ("lowerGrades", "lower_grades"))
    if any(isinstance(pick(src, *keys), list) for keys in grid_keys):
        return build_findings_from_grids(
            pick(src, "upperGrades", "upper_grades"),
            pick(src, "lowerGrades", "lower_grades"),
            pick(src, "upperStatus", "upper_status"),
            pick(src, "lowerStatus", "lower_status"),
        )
    return None


# ---------- procedures ----------

def _row_has_content(r: dict) -> bool:
    return any(
        has_value(pick(r, *keys))
        for keys in (
            ("total",),
            ("paid",),
            ("procedure",),
            ("visitDate", "visit_date"),
            ("nextApptDate", "next_appt_date"),
        )
    )


def normalize_procedure_row(r: dict) -> dict:
    total = parse_num(r.get("total"))
    paid = parse_num(r.get("paid"))
    visit_date = to_date_only(pick(r, "visitDate", "visit_date"))
    next_appt = to_date_only(pick(r, "nextApptDate", "next_appt_date"))
    return {
        "visit_date": visit_date.isoformat() if visit_date else None,
        "procedure": str(r.get("procedure") or "").strip(),
        "next_appt_date": next_appt.isoformat() if next_appt else None,
        "total": total,
        "paid": paid,
        "due": round(non_negative(total - paid), 2),
    }


def normalize_procedures(root: dict) -> list[dict] | None:
    """
    Accepts ``procedures`` as a list, as ``{"rows": [...]}``, or a bare
    ``rows`` list. Empty rows are dropped; returns None when nothing is left.
    """
    procs = root.get("procedures")
    if isinstance(procs, dict):
        procs = procs.get("rows")
    if procs is None:
        procs = root.get("rows")
    if not isinstance(procs, list):
        return None
    cleaned = [normalize_procedure_row(r) for r in procs if isinstance(r, dict) and _row_has_content(r)]
    return cleaned or None


def normalize_trigger_factors(v: Any) -> list[str]:
    if isinstance(v, list):
        return [str(x) for x in v if has_value(x)]
    return [str(v)] if has_value(v) else []


def normalize_visit_payload(data: dict, *, partial: bool = False) -> dict:
    """
    Resolves findings, procedures and trigger factors into their stored form.
    With partial=True (PATCH) keys the client did not send stay absent.
    """
    out = dict(data)
    grid_keys = ("upperGrades", "lowerGrades", "upperStatus", "lowerStatus",
                 "upper_grades", "lower_grades", "upper_status", "lower_status")

    if not partial or "findings" in data or any(k in data for k in grid_keys):
        out["findings"] = normalize_findings(data)
    for k in grid_keys:
        out.pop(k, None)

    if not partial or "procedures" in data or "rows" in data:
        out["procedures"] = normalize_procedures(data)
    out.pop("rows", None)

    trig = pick(data, "triggerFactors", "trigger_factors", default=...)
    if trig is not ...:
        out.pop("triggerFactors", None)
        out["trigger_factors"] = normalize_trigger_factors(trig)
    elif not partial:
        out["trigger_factors"] = []
    return out


# ---------- patient intake ----------

def split_intake(body: dict) -> dict:
    """
    Splits either intake shape into ``{"patient", "medical_history",
    "initial_visit"}``. Profile fields may sit at the root or under
    ``patientProfile``; the visit comes from ``initialVisit`` or from
    ``dentalExam`` plus the sibling ``procedures`` block.
    """
    profile_src = pick(body, "patientProfile", "patient_profile")
    profile = {**body, **profile_src} if isinstance(profile_src, dict) else dict(body)
    for k in ("patientProfile", "patient_profile", "medicalHistory", "medical_history",
              "initialVisit", "initial_visit", "dentalExam", "dental_exam", "procedures"):
        profile.pop(k, None)

    medical_history = pick(body, "medicalHistory", "medical_history")
    if not isinstance(medical_history, dict) and isinstance(profile_src, dict):
        medical_history = pick(profile_src, "medicalHistory", "medical_history")

    initial = pick(body, "initialVisit", "initial_visit")
    if isinstance(initial, dict):
        visit = dict(initial)
    else:
        exam = pick(body, "dentalExam", "dental_exam")
        exam = dict(exam) if isinstance(exam, dict) else {}
        procedures = normalize_procedures(body)
        if procedures is None and exam:
            procedures = normalize_procedures(exam)
        visit = {**exam, "procedures": procedures}

    return {
        "patient": profile,
        "medical_history": medical_history if isinstance(medical_history, dict) else {},
        "initial_visit": visit,
    }


# ---------- follow-ups ----------

def upcoming_appts(procedures: Iterable[dict] | None, today: date) -> list[dict]:
    """``{date, procedure}`` for every row whose next appointment is today or later, earliest first."""
    items = []
    for r in procedures or []:
        if not isinstance(r, dict):
            continue
        d = to_date_only(pick(r, "next_appt_date", "nextApptDate"))
        if d and d >= today:
            items.append({"date": d, "procedure": str(r.get("procedure") or "").strip()})
    items.sort(key=lambda i: i["date"])
    return items
