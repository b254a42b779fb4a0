import datetime as dt
from datetime import date, datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel

from dentflow.services.intake import normalize_visit_payload


class ToothFinding(BaseModel):
    tooth: int | str
    grade: str = ""
    status: str = ""


class Findings(BaseModel):
    upper: list[ToothFinding]
    lower: list[ToothFinding]


class ProcedureRow(BaseModel):
    visit_date: Optional[date] = None
    procedure: str = ""
    next_appt_date: Optional[date] = None
    total: float = 0
    paid: float = 0
    due: float = 0


class _VisitFields(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)

    chief_complaint: Optional[str] = None
    duration_onset: Optional[str] = None
    trigger_factors: Optional[list[str]] = None
    diagnosis_notes: Optional[str] = None
    treatment_plan_notes: Optional[str] = None
    findings: Optional[Findings] = None
    procedures: Optional[list[ProcedureRow]] = None
    visit_at: Optional[datetime] = None


class VisitCreate(_VisitFields):
    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any):
        if isinstance(data, dict):
            return normalize_visit_payload(data)
        return data

    def to_row(self) -> dict:
        row = self.model_dump(exclude={"visit_at"}, mode="json")
        row["chief_complaint"] = (self.chief_complaint or "").strip() or None
        row["trigger_factors"] = self.trigger_factors or []
        if self.visit_at is not None:
            row["visit_at"] = _naive_utc(self.visit_at)
        return row


class VisitUpdate(_VisitFields):
    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any):
        if isinstance(data, dict):
            return normalize_visit_payload(data, partial=True)
        return data

    def to_row(self) -> dict:
        row = self.model_dump(exclude_unset=True, exclude={"visit_at"}, mode="json")
        if "visit_at" in self.model_fields_set and self.visit_at is not None:
            row["visit_at"] = _naive_utc(self.visit_at)
        return row


def _naive_utc(v: datetime) -> datetime:
    if v.tzinfo is not None:
        v = v.astimezone(timezone.utc).replace(tzinfo=None)
    return v


class VisitOut(BaseModel):
    id: str
    patient_id: str
    visit_at: datetime
    chief_complaint: Optional[str] = None
    duration_onset: Optional[str] = None
    trigger_factors: list[str] = []
    diagnosis_notes: Optional[str] = None
    treatment_plan_notes: Optional[str] = None
    findings: Optional[dict] = None
    procedures: Optional[list[dict]] = None
    created_at: Optional[datetime] = None
    created_by: Optional[str] = None
    updated_at: Optional[datetime] = None
    updated_by: Optional[str] = None

    class Config:
        from_attributes = True


class _CamelOut(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class NextApptOut(_CamelOut):
    visit_id: str
    patient_id: str
    date: dt.date
    procedure: str


class NextApptItem(BaseModel):
    date: dt.date
    procedure: str


class NextApptsOut(_CamelOut):
    visit_id: str
    patient_id: str
    items: list[NextApptItem]


class FollowUpOut(_CamelOut):
    patient_name: str
    date: dt.date
    chief_complaint: Optional[str] = None
    procedure: str
    visit_id: str
    patient_id: str
