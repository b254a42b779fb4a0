from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from dentflow.models.medical_history import CONDITION_FLAGS

_YES_NO = (
    "surgery_or_hospitalized",
    "fever_cold_cough",
    "abnormal_bleeding_history",
    "taking_medicine",
    "medication_allergy",
)


class MedicalHistoryIn(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)

    surgery_or_hospitalized: str = ""
    surgery_details: Optional[str] = None
    fever_cold_cough: str = ""
    fever_details: Optional[str] = None

    artificial_valves_pacemaker: bool = False
    asthma: bool = False
    allergy: bool = False
    bleeding_tendency: bool = False
    epilepsy_seizure: bool = False
    heart_disease: bool = False
    hyp_hypertension: bool = False
    hormone_disorder: bool = False
    jaundice_liver: bool = False
    stomach_ulcer: bool = False
    low_high_pressure: bool = False
    arthritis_joint: bool = False
    kidney_problems: bool = False
    thyroid_problems: bool = False
    other_problem: bool = False
    other_problem_text: Optional[str] = None

    abnormal_bleeding_history: str = ""
    abnormal_bleeding_details: Optional[str] = None
    taking_medicine: str = ""
    medicine_details: Optional[str] = None
    medication_allergy: str = ""
    medication_allergy_details: Optional[str] = None

    past_dental_history: Optional[str] = None

    @field_validator(*CONDITION_FLAGS, mode="before")
    @classmethod
    def _truthy(cls, v):
        # checkbox values arrive as true/false, "on", 1, "" or null
        if isinstance(v, str):
            return v.strip().lower() in {"true", "1", "yes", "on", "y"}
        return bool(v)

    @field_validator(*_YES_NO, mode="before")
    @classmethod
    def _yes_no(cls, v):
        return "" if v is None else v


class MedicalHistoryOut(BaseModel):
    id: str
    patient_id: str
    surgery_or_hospitalized: str
    surgery_details: Optional[str] = None
    fever_cold_cough: str
    fever_details: Optional[str] = None
    artificial_valves_pacemaker: bool
    asthma: bool
    allergy: bool
    bleeding_tendency: bool
    epilepsy_seizure: bool
    heart_disease: bool
    hyp_hypertension: bool
    hormone_disorder: bool
    jaundice_liver: bool
    stomach_ulcer: bool
    low_high_pressure: bool
    arthritis_joint: bool
    kidney_problems: bool
    thyroid_problems: bool
    other_problem: bool
    other_problem_text: Optional[str] = None
    abnormal_bleeding_history: str
    abnormal_bleeding_details: Optional[str] = None
    taking_medicine: str
    medicine_details: Optional[str] = None
    medication_allergy: str
    medication_allergy_details: Optional[str] = None
    past_dental_history: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
