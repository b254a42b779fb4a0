from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from dentflow.models.camp_submission import InstitutionType


class _CampFields(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)

    @field_validator("email", "dob", "phone", "institution_type", mode="before", check_fields=False)
    @classmethod
    def _blank_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("email", mode="before", check_fields=False)
    @classmethod
    def _lower_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


class CampSubmissionCreate(_CampFields):
    name: str = Field(..., min_length=1)
    dob: Optional[date] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    institution: Optional[str] = None
    institution_type: Optional[InstitutionType] = None
    comments: Optional[str] = None


class CampSubmissionUpdate(_CampFields):
    name: Optional[str] = Field(None, min_length=1)
    dob: Optional[date] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    institution: Optional[str] = None
    institution_type: Optional[InstitutionType] = None
    comments: Optional[str] = None


class CampSubmissionOut(BaseModel):
    id: str
    name: str
    dob: Optional[date] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    institution: Optional[str] = None
    institution_type: Optional[InstitutionType] = None
    comments: Optional[str] = None
    created_at: Optional[datetime] = None
    created_by: Optional[str] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
