"""Appointment slot grid, time normalisation and conflict checks."""
import calendar
import re
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from dentflow.core.config import settings
from dentflow.models.appointment import Appointment, ApptStatus

# Bookable slots; 13:00-14:30 is the lunch break
SLOT_DEFS = (
    "08:00", "08:30", "09:00", "09:30",
    "10:00", "10:30", "11:00", "11:30",
    "12:00", "12:30", "14:30", "15:00",
    "15:30", "16:00", "16:30",
)

PHONE_RE = re.compile(r"^\+?\d{10,14}$")
_HHMM_RE = re.compile(r"^(\d{1,2}):(\d{2})$")

# statuses that free their slot
RELEASING_STATUSES = {ApptStatus.cancelled}


class SlotConflict(Exception):
    pass


def as_hhmm(v: str | None) -> str | None:
    """'9:5' is left alone, '9:05' -> '09:05', '27:75' -> '23:59'."""
    if not v:
        return v
    m = _HHMM_RE.match(str(v).strip())
    if not m:
        return v
    h = min(23, max(0, int(m.group(1))))
    mm = min(59, max(0, int(m.group(2))))
    return f"{h:02d}:{mm:02d}"


def is_hhmm(v: str | None) -> bool:
    return bool(v) and bool(re.fullmatch(r"\d{2}:\d{2}", v))


def is_valid_phone(v: str | None) -> bool:
    return bool(PHONE_RE.match(str(v or "").strip()))


def slot_label(hhmm: str) -> str:
    h, m = (int(x) for x in hhmm.split(":"))
    ampm = "pm" if h >= 12 else "am"
    h12 = 12 if h % 12 == 0 else h % 12
    return f"{h12}:{m:02d} {ampm}"


def clinic_tz() -> ZoneInfo:
    return ZoneInfo(settings.CLINIC_TIMEZONE)


def clinic_today() -> date:
    return datetime.now(clinic_tz()).date()


def month_bounds(day: date) -> tuple[date, date]:
    last = calendar.monthrange(day.year, day.month)[1]
    return day.replace(day=1), day.replace(day=last)


def week_ahead(day: date) -> date:
    return day + timedelta(days=6)


def effective_slot(appt: Appointment) -> tuple[date, str]:
    """Where the appointment actually sits: its new date/time once rescheduled."""
    if appt.status == ApptStatus.rescheduled and appt.rescheduled_date and appt.rescheduled_time:
        return appt.rescheduled_date, appt.rescheduled_time
    return appt.date, appt.time_slot


def occupying(appts: list[Appointment], day: date, exclude_id: str | None = None) -> list[Appointment]:
    """Appointments holding a slot on the given day."""
    return [
        a for a in appts
        if a.id != exclude_id
        and a.status not in RELEASING_STATUSES
        and effective_slot(a)[0] == day
    ]


def check_slot_free(
    appts: list[Appointment],
    day: date,
    time_slot: str,
    exclude_id: str | None = None,
    capacity: int | None = None,
) -> None:
    capacity = capacity or settings.MAX_APPOINTMENTS_PER_DAY
    taken = occupying(appts, day, exclude_id)
    if any(effective_slot(a)[1] == time_slot for a in taken):
        raise SlotConflict(f"Slot {time_slot} on {day.isoformat()} is already booked")
    if len(taken) >= capacity:
        raise SlotConflict(f"No slots left on {day.isoformat()} (limit {capacity} per day)")


def slot_board(appts: list[Appointment], day: date, capacity: int | None = None) -> dict:
    capacity = capacity or settings.MAX_APPOINTMENTS_PER_DAY
    taken = occupying(appts, day)
    booked = {effective_slot(a)[1] for a in taken}
    return {
        "date": day,
        "capacity": capacity,
        "remaining": max(0, capacity - len(taken)),
        "slots": [{"time": s, "label": slot_label(s), "booked": s in booked} for s in SLOT_DEFS],
    }


def free_seat(taken: set[int], capacity: int | None = None) -> int | None:
    """Lowest seat number in 1..capacity not yet claimed; None once the day is full."""
    capacity = capacity or settings.MAX_APPOINTMENTS_PER_DAY
    for seat in range(1, capacity + 1):
        if seat not in taken:
            return seat
    return None
