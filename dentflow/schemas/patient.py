from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from dentflow.schemas.medical_history import MedicalHistoryIn, MedicalHistoryOut
from dentflow.schemas.visit import VisitCreate, VisitOut
from dentflow.services.intake import split_intake, to_date_only

# request bodies come from the JS client in camelCase; snake_case also works
_camel_in = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)


class EmergencyContact(BaseModel):
    model_config = ConfigDict(extra="allow")
    name: Optional[str] = None
    relation: Optional[str] = None
    phone: Optional[str] = None


class _PatientFields(BaseModel):
    model_config = _camel_in

    @field_validator("email", mode="before", check_fields=False)
    @classmethod
    def _lower_email(cls, v):
        if isinstance(v, str):
            v = v.strip().lower()
            return v or None
        return v

    @field_validator("dob", mode="before", check_fields=False)
    @classmethod
    def _date_only(cls, v):
        if v in (None, ""):
            return None
        return to_date_only(v) or v


class PatientProfileIn(_PatientFields):
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    dob: date
    gender: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    email: Optional[EmailStr] = None
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None
    occupation: Optional[str] = None
    emergency_contact: Optional[EmergencyContact] = None
    photo_url: Optional[str] = None


class PatientUpdate(_PatientFields):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    dob: Optional[date] = None
    gender: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None
    occupation: Optional[str] = None
    emergency_contact: Optional[EmergencyContact] = None
    photo_url: Optional[str] = None

    @model_validator(mode="after")
    def _no_null_required(self):
        for k in ("first_name", "last_name", "dob", "gender", "phone"):
            if k in self.model_fields_set and getattr(self, k) in (None, ""):
                raise ValueError(f"{k} cannot be empty")
        return self


class InitialVisitIn(VisitCreate):
    chief_complaint: str = Field(..., min_length=1)


class PatientCreate(BaseModel):
    """Patient, medical history and first visit, created together."""
    patient: PatientProfileIn
    medical_history: MedicalHistoryIn = Field(default_factory=MedicalHistoryIn)
    initial_visit: InitialVisitIn

    @model_validator(mode="before")
    @classmethod
    def _split(cls, data: Any):
        if isinstance(data, dict) and "patient" not in data:
            return split_intake(data)
        return data


class PatientOut(BaseModel):
    id: str
    first_name: str
    last_name: str
    dob: date
    gender: str
    phone: str
    email: Optional[str] = None
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None
    occupation: Optional[str] = None
    emergency_contact: Optional[dict] = None
    photo_url: Optional[str] = None
    created_at: Optional[datetime] = None
    created_by: Optional[str] = None
    updated_at: Optional[datetime] = None
    updated_by: Optional[str] = None

    class Config:
        from_attributes = True


class PatientMeta(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
    has_medical_history: bool
    last_visit_at: Optional[datetime] = None


class PatientDetailOut(BaseModel):
    patient: PatientOut
    meta: PatientMeta


class PatientCreatedOut(BaseModel):
    patient: PatientOut
    medical_history: MedicalHistoryOut
    visit: VisitOut


class PhotoOut(BaseModel):
    url: str
    public_id: str
