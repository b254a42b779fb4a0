from sqlalchemy import String, ForeignKey, Boolean, Text
from sqlalchemy.orm import Mapped, mapped_column

from dentflow.core.db import Base
from dentflow.models.base import OwnedMixin

# boolean condition checklist, in the order the intake form shows it
CONDITION_FLAGS = (
    "artificial_valves_pacemaker",
    "asthma",
    "allergy",
    "bleeding_tendency",
    "epilepsy_seizure",
    "heart_disease",
    "hyp_hypertension",
    "hormone_disorder",
    "jaundice_liver",
    "stomach_ulcer",
    "low_high_pressure",
    "arthritis_joint",
    "kidney_problems",
    "thyroid_problems",
    "other_problem",
)

class MedicalHistory(OwnedMixin, Base):
    __tablename__ = "medical_histories"

    patient_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("patients.id", ondelete="CASCADE"), unique=True, index=True
    )

    # Yes/No answers are free text ("Yes", "No", "")
    surgery_or_hospitalized: Mapped[str] = mapped_column(String(10), default="")
    surgery_details: Mapped[str | None] = mapped_column(Text, nullable=True)
    fever_cold_cough: Mapped[str] = mapped_column(String(10), default="")
    fever_details: Mapped[str | None] = mapped_column(Text, nullable=True)

    artificial_valves_pacemaker: Mapped[bool] = mapped_column(Boolean, default=False)
    asthma: Mapped[bool] = mapped_column(Boolean, default=False)
    allergy: Mapped[bool] = mapped_column(Boolean, default=False)
    bleeding_tendency: Mapped[bool] = mapped_column(Boolean, default=False)
    epilepsy_seizure: Mapped[bool] = mapped_column(Boolean, default=False)
    heart_disease: Mapped[bool] = mapped_column(Boolean, default=False)
    hyp_hypertension: Mapped[bool] = mapped_column(Boolean, default=False)
    hormone_disorder: Mapped[bool] = mapped_column(Boolean, default=False)
    jaundice_liver: Mapped[bool] = mapped_column(Boolean, default=False)
    stomach_ulcer: Mapped[bool] = mapped_column(Boolean, default=False)
    low_high_pressure: Mapped[bool] = mapped_column(Boolean, default=False)
    arthritis_joint: Mapped[bool] = mapped_column(Boolean, default=False)
    kidney_problems: Mapped[bool] = mapped_column(Boolean, default=False)
    thyroid_problems: Mapped[bool] = mapped_column(Boolean, default=False)
    other_problem: Mapped[bool] = mapped_column(Boolean, default=False)
    other_problem_text: Mapped[str | None] = mapped_column(Text, nullable=True)

    abnormal_bleeding_history: Mapped[str] = mapped_column(String(10), default="")
    abnormal_bleeding_details: Mapped[str | None] = mapped_column(Text, nullable=True)
    taking_medicine: Mapped[str] = mapped_column(String(10), default="")
    medicine_details: Mapped[str | None] = mapped_column(Text, nullable=True)
    medication_allergy: Mapped[str] = mapped_column(String(10), default="")
    medication_allergy_details: Mapped[str | None] = mapped_column(Text, nullable=True)

    past_dental_history: Mapped[str | None] = mapped_column(Text, nullable=True)
