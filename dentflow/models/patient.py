from datetime import date
from sqlalchemy import String, Date, JSON
from sqlalchemy.orm import Mapped, mapped_column

from dentflow.core.db import Base
from dentflow.models.base import OwnedMixin

class Patient(OwnedMixin, Base):
    __tablename__ = "patients"

    first_name: Mapped[str] = mapped_column(String(100))
    last_name: Mapped[str] = mapped_column(String(100))
    dob: Mapped[date] = mapped_column(Date)
    gender: Mapped[str] = mapped_column(String(20), index=True)
    phone: Mapped[str] = mapped_column(String(20), index=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    address_line1: Mapped[str | None] = mapped_column(String(255), nullable=True)
    address_line2: Mapped[str | None] = mapped_column(String(255), nullable=True)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    state: Mapped[str | None] = mapped_column(String(100), nullable=True)
    pincode: Mapped[str | None] = mapped_column(String(12), nullable=True)
    occupation: Mapped[str | None] = mapped_column(String(120), nullable=True)

    # {name, relation, phone}
    emergency_contact: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    photo_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    photo_public_id: Mapped[str | None] = mapped_column(String(255), nullable=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
