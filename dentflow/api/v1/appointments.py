import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select, or_, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from dentflow.core.config import settings
from dentflow.core.db import get_db
from dentflow.api.deps import get_current_user, get_owned_or_404, owned, Page
from dentflow.models.user import User
from dentflow.models.patient import Patient
from dentflow.models.appointment import Appointment, AppointmentSlot, ApptStatus
from dentflow.schemas.appointment import (
    AppointmentCreate, AppointmentUpdate, AppointmentOut, SlotBoardOut, AppointmentStatsOut,
)
from dentflow.services.scheduling import (
    RELEASING_STATUSES, SlotConflict, check_slot_free, clinic_today, effective_slot, free_seat,
    month_bounds, slot_board, week_ahead,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments", tags=["appointments"])

# ---------- helpers ----------
async def _get_appt_or_404(id: str, user: User, db: AsyncSession) -> Appointment:
    return await get_owned_or_404(db, Appointment, id, user, "Appointment")

async def _on_day(db: AsyncSession, day: date) -> list[Appointment]:
    """Every appointment that may sit on `day`, whoever booked it; the chair is shared."""
    res = await db.execute(
        select(Appointment).where(or_(Appointment.date == day, Appointment.rescheduled_date == day))
    )
    return list(res.scalars().all())

async def _ensure_free(db: AsyncSession, appt: Appointment, exclude_id: str | None = None) -> None:
    if appt.status == ApptStatus.cancelled:
        return
    day, slot = effective_slot(appt)
    try:
        check_slot_free(await _on_day(db, day), day, slot, exclude_id=exclude_id)
    except SlotConflict as e:
        raise HTTPException(status_code=409, detail=str(e))

async def _claim_slot(db: AsyncSession, appt: Appointment) -> None:
    """Writes (or moves, or frees) the claim row that holds the appointment's effective slot."""
    claim = await db.get(AppointmentSlot, appt.id)
    if appt.status in RELEASING_STATUSES:
        if claim is not None:
            await db.delete(claim)
        return

    day, slot = effective_slot(appt)
    res = await db.execute(
        select(AppointmentSlot.seat).where(AppointmentSlot.date == day, AppointmentSlot.appointment_id != appt.id)
    )
    capacity = settings.MAX_APPOINTMENTS_PER_DAY
    seat = free_seat(set(res.scalars().all()), capacity)
    if seat is None:
        raise HTTPException(status_code=409, detail=f"No slots left on {day.isoformat()} (limit {capacity} per day)")
    if claim is None:
        db.add(AppointmentSlot(appointment_id=appt.id, date=day, time_slot=slot, seat=seat))
    else:
        claim.date, claim.time_slot, claim.seat = day, slot, seat

async def _commit_booking(db: AsyncSession, appt: Appointment) -> None:
    # a concurrent booking that passed the same checks loses on the unique keys
    day, slot = effective_slot(appt)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.warning(f"Lost the race for {slot} on {day}")
        raise HTTPException(status_code=409, detail="Slot was just booked, please pick another")

async def _check_patient(db: AsyncSession, patient_id: str | None, user: User) -> None:
    if patient_id:
        await get_owned_or_404(db, Patient, patient_id, user, "Patient")

def _range(day: date | None, start: date | None, end: date | None) -> tuple[date, date]:
    if day:
        return day, day
    if start or end:
        start = start or end
        end = end or start
        if end < start:
            raise HTTPException(status_code=400, detail="'from' must not be after 'to'")
        return start, end
    return month_bounds(clinic_today())

# ---------- list ----------
@router.get("", response_model=list[AppointmentOut])
async def list_appointments(
    day: date | None = Query(None, alias="date"),
    start: date | None = Query(None, alias="from"),
    end: date | None = Query(None, alias="to"),
    status: ApptStatus | None = Query(None),
    page: tuple[int, int] = Depends(Page(default_limit=500, max_limit=1000)),
    current: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Single day with ?date, inclusive range with ?from/?to, otherwise the current month."""
    limit, offset = page
    lo, hi = _range(day, start, end)
    stmt = owned(select(Appointment), Appointment, current).where(Appointment.date.between(lo, hi))
    if status is not None:
        stmt = stmt.where(Appointment.status == status)
    stmt = stmt.order_by(Appointment.date.asc(), Appointment.time_slot.asc()).offset(offset).limit(limit)
    res = await db.execute(stmt)
    return res.scalars().all()

@router.get("/slots", response_model=SlotBoardOut)
async def day_slots(
    day: date = Query(..., alias="date"),
    current: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return slot_board(await _on_day(db, day), day, settings.MAX_APPOINTMENTS_PER_DAY)

@router.get("/stats", response_model=AppointmentStatsOut)
async def appointment_stats(
    start: date | None = Query(None, alias="from"),
    end: date | None = Query(None, alias="to"),
    current: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """today/next7Days are anchored on today; pending/confirmed count over the range (default current month)."""
    today = clinic_today()
    lo, hi = _range(None, start, end)

    async def count(*where) -> int:
        stmt = owned(select(func.count(Appointment.id)), Appointment, current).where(*where)
        return (await db.execute(stmt)).scalar_one()

    return AppointmentStatsOut(
        today=await count(Appointment.date == today),
        next7_days=await count(Appointment.date.between(today, week_ahead(today))),
        pending=await count(Appointment.date.between(lo, hi), Appointment.status == ApptStatus.pending),
        confirmed=await count(Appointment.date.between(lo, hi), Appointment.status == ApptStatus.confirmed),
    )

# ---------- create ----------
@router.post("", response_model=AppointmentOut, status_code=201)
async def create_appointment(
    payload: AppointmentCreate,
    current: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await _check_patient(db, payload.patient_id, current)
    ap = Appointment(**payload.model_dump(), created_by=current.id)
    await _ensure_free(db, ap)

    db.add(ap)
    await db.flush()
    await _claim_slot(db, ap)
    await _commit_booking(db, ap)
    await db.refresh(ap)
    logger.info(f"Booked appointment {ap.id} on {ap.date} {ap.time_slot}")
    return ap

# ---------- update ----------
@router.patch("/{id}", response_model=AppointmentOut)
async def update_appointment(
    id: str,
    patch: AppointmentUpdate,
    current: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    data = patch.model_dump(exclude_unset=True)
    if not data:
        raise HTTPException(status_code=400, detail="No valid fields to update")

    ap = await _get_appt_or_404(id, current, db)
    if "patient_id" in data:
        await _check_patient(db, data["patient_id"], current)

    before = (ap.status, *effective_slot(ap))
    for k, v in data.items():
        setattr(ap, k, v)

    if ap.status == ApptStatus.rescheduled and not (ap.rescheduled_date and ap.rescheduled_time):
        await db.rollback()
        raise HTTPException(
            status_code=422,
            detail="rescheduled_date and rescheduled_time are required when status is Rescheduled",
        )
    # only re-check when the appointment moves or comes back from Cancelled
    if (ap.status, *effective_slot(ap)) != before:
        with db.no_autoflush:
            await _ensure_free(db, ap, exclude_id=ap.id)
        await _claim_slot(db, ap)

    await _commit_booking(db, ap)
    await db.refresh(ap)
    logger.info(f"Updated appointment {id}: {sorted(data)}")
    return ap

# ---------- delete ----------
@router.delete("/{id}")
async def delete_appointment(id: str, current: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    ap = await _get_appt_or_404(id, current, db)
    claim = await db.get(AppointmentSlot, ap.id)
    if claim is not None:
        await db.delete(claim)
    await db.delete(ap)
    await db.commit()
    logger.info(f"Deleted appointment {id}")
    return {"message": "Appointment deleted successfully"}
