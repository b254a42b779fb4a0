from datetime import datetime
from sqlalchemy import String, ForeignKey, DateTime, Text, JSON
from sqlalchemy.orm import Mapped, mapped_column

from dentflow.core.db import Base, utcnow
from dentflow.models.base import OwnedMixin

class Visit(OwnedMixin, Base):
    __tablename__ = "visits"

    patient_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("patients.id", ondelete="CASCADE"), index=True
    )
    visit_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, index=True)

    chief_complaint: Mapped[str | None] = mapped_column(Text, nullable=True)
    duration_onset: Mapped[str | None] = mapped_column(String(120), nullable=True)
    trigger_factors: Mapped[list] = mapped_column(JSON, default=list)
    diagnosis_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    treatment_plan_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # {"upper": [{tooth, grade, status} x16], "lower": [...]}
    findings: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    # [{visit_date, procedure, next_appt_date, total, paid, due}]
    procedures: Mapped[list | None] = mapped_column(JSON, nullable=True)
