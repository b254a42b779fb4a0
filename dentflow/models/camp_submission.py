import enum
from datetime import date
from sqlalchemy import String, Date, Text, Enum
from sqlalchemy.orm import Mapped, mapped_column

from dentflow.core.db import Base
from dentflow.models.base import OwnedMixin

class InstitutionType(str, enum.Enum):
    hospital = "Hospital"
    clinic = "Clinic"
    school = "School"
    college = "College"
    ngo = "NGO"
    other = "Other"

class CampSubmission(OwnedMixin, Base):
    """Screening-camp registrations collected outside the clinic."""
    __tablename__ = "camp_submissions"

    name: Mapped[str] = mapped_column(String(200))
    dob: Mapped[date | None] = mapped_column(Date, nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    institution: Mapped[str | None] = mapped_column(String(200), nullable=True)
    institution_type: Mapped[InstitutionType | None] = mapped_column(
        Enum(InstitutionType, values_callable=lambda e: [m.value for m in e], native_enum=False, length=20),
        nullable=True,
        index=True,
    )
    comments: Mapped[str | None] = mapped_column(Text, nullable=True)
