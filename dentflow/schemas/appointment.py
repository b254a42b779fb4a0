import datetime as dt
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from dentflow.models.appointment import ApptStatus
from dentflow.services.scheduling import as_hhmm, is_hhmm, is_valid_phone


def _check_hhmm(v: Optional[str]) -> Optional[str]:
    if v is None or v == "":
        return None
    v = as_hhmm(v)
    if not is_hhmm(v):
        raise ValueError("time must be HH:MM")
    return v


def _check_phone(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = str(v).strip()
    if not is_valid_phone(v):
        raise ValueError("phone must be 10-14 digits, optionally prefixed with +")
    return v


class AppointmentCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    patient_id: Optional[str] = None
    patient_name: str = Field(..., min_length=1)
    phone: str
    date: dt.date
    time_slot: str
    service_type: str = "Checkup"
    status: ApptStatus = ApptStatus.pending
    rescheduled_date: Optional[dt.date] = None
    rescheduled_time: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("phone")
    @classmethod
    def _phone(cls, v):
        return _check_phone(v)

    @field_validator("time_slot", "rescheduled_time", mode="before")
    @classmethod
    def _hhmm(cls, v):
        return _check_hhmm(v)

    @field_validator("service_type", mode="before")
    @classmethod
    def _default_service(cls, v):
        return v or "Checkup"

    @model_validator(mode="after")
    def _reschedule_fields(self):
        if self.status == ApptStatus.rescheduled and not (self.rescheduled_date and self.rescheduled_time):
            raise ValueError("rescheduled_date and rescheduled_time are required when status is Rescheduled")
        return self


class AppointmentUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    patient_id: Optional[str] = None
    patient_name: Optional[str] = Field(None, min_length=1)
    phone: Optional[str] = None
    date: Optional[dt.date] = None
    time_slot: Optional[str] = None
    service_type: Optional[str] = None
    status: Optional[ApptStatus] = None
    rescheduled_date: Optional[dt.date] = None
    rescheduled_time: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("phone")
    @classmethod
    def _phone(cls, v):
        return _check_phone(v)

    @field_validator("time_slot", "rescheduled_time", mode="before")
    @classmethod
    def _hhmm(cls, v):
        return _check_hhmm(v)

    @model_validator(mode="after")
    def _no_null_required(self):
        for k in ("patient_name", "phone", "date", "time_slot", "status", "service_type"):
            if k in self.model_fields_set and getattr(self, k) is None:
                raise ValueError(f"{k} cannot be null")
        return self


class AppointmentOut(BaseModel):
    id: str
    patient_id: Optional[str] = None
    patient_name: str
    phone: str
    date: dt.date
    time_slot: str
    service_type: str
    status: ApptStatus
    rescheduled_date: Optional[dt.date] = None
    rescheduled_time: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    created_by: Optional[str] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SlotOut(BaseModel):
    time: str
    label: str
    booked: bool


class SlotBoardOut(BaseModel):
    date: dt.date
    capacity: int
    remaining: int
    slots: list[SlotOut]


class AppointmentStatsOut(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
    today: int
    next7_days: int
    pending: int
    confirmed: int
