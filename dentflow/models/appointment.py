import enum
import datetime as dt
from sqlalchemy import String, Enum, ForeignKey, Date, Text, Index, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from dentflow.core.db import Base
from dentflow.models.base import OwnedMixin

class ApptStatus(str, enum.Enum):
    pending = "Pending"
    confirmed = "Confirmed"
    cancelled = "Cancelled"
    completed = "Completed"
    no_show = "No Show"
    rescheduled = "Rescheduled"

class Appointment(OwnedMixin, Base):
    __tablename__ = "appointments"
    __table_args__ = (
        Index("ix_appt_date_slot", "date", "time_slot"),
    )

    patient_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("patients.id", ondelete="SET NULL"), nullable=True, index=True
    )
    patient_name: Mapped[str] = mapped_column(String(200))
    phone: Mapped[str] = mapped_column(String(20))

    date: Mapped[dt.date] = mapped_column(Date, index=True)
    time_slot: Mapped[str] = mapped_column(String(5))
    service_type: Mapped[str] = mapped_column(String(50), default="Checkup")
    status: Mapped[ApptStatus] = mapped_column(
        Enum(ApptStatus, values_callable=lambda e: [m.value for m in e], native_enum=False, length=20),
        default=ApptStatus.pending,
        index=True,
    )

    rescheduled_date: Mapped[dt.date | None] = mapped_column(Date, nullable=True, index=True)
    rescheduled_time: Mapped[str | None] = mapped_column(String(5), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

class AppointmentSlot(Base):
    """
    One claim per appointment holding its effective slot. The unique keys make
    the database the judge of double bookings and of the daily limit: a seat is
    a number in 1..capacity, so two claims on one day can never share one.
    """
    __tablename__ = "appointment_slots"
    __table_args__ = (
        UniqueConstraint("date", "time_slot", name="uq_slot_date_time"),
        UniqueConstraint("date", "seat", name="uq_slot_date_seat"),
    )

    appointment_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("appointments.id", ondelete="CASCADE"), primary_key=True
    )
    date: Mapped[dt.date] = mapped_column(Date)
    time_slot: Mapped[str] = mapped_column(String(5))
    seat: Mapped[int] = mapped_column(Integer)
