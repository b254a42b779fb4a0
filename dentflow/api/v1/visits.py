import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dentflow.core.db import get_db
from dentflow.api.deps import get_current_user, get_owned_or_404, owned, Page
from dentflow.models.user import User
from dentflow.models.patient import Patient
from dentflow.models.visit import Visit
from dentflow.schemas.visit import (
    VisitCreate, VisitUpdate, VisitOut, NextApptOut, NextApptsOut, NextApptItem, FollowUpOut,
)
from dentflow.services.intake import upcoming_appts
from dentflow.services.scheduling import clinic_today

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/visits", tags=["visits"])


async def _get_visit_or_404(visit_id: str, user: User, db: AsyncSession) -> Visit:
    return await get_owned_or_404(db, Visit, visit_id, user, "Visit")

# ---------- follow-ups across patients ----------
@router.get("/appointments/next", response_model=list[FollowUpOut])
async def next_appointments(
    page: tuple[int, int] = Depends(Page(default_limit=10)),
    current: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Upcoming follow-ups taken from procedure rows of every visible visit."""
    limit, offset = page
    today = clinic_today()
    stmt = owned(
        select(Visit, Patient).join(Patient, Patient.id == Visit.patient_id),
        Visit,
        current,
    )
    rows = (await db.execute(stmt)).all()

    items = []
    for visit, patient in rows:
        for appt in upcoming_appts(visit.procedures, today):
            items.append(FollowUpOut(
                patient_name=patient.full_name,
                date=appt["date"],
                chief_complaint=visit.chief_complaint,
                procedure=appt["procedure"],
                visit_id=visit.id,
                patient_id=patient.id,
            ))
    items.sort(key=lambda i: (i.date, i.patient_name))
    return items[offset:offset + limit]

# ---------- per patient ----------
@router.post("/{patient_id}/visits", response_model=VisitOut, status_code=201)
async def create_visit(
    patient_id: str,
    payload: VisitCreate,
    current: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await get_owned_or_404(db, Patient, patient_id, current, "Patient")
    visit = Visit(patient_id=patient_id, created_by=current.id, **payload.to_row())
    db.add(visit)
    await db.commit()
    await db.refresh(visit)
    logger.info(f"Created visit {visit.id} for patient {patient_id}")
    return visit

@router.get("/{patient_id}/visits", response_model=list[VisitOut])
async def list_visits(
    patient_id: str,
    page: tuple[int, int] = Depends(Page(default_limit=100)),
    current: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    limit, offset = page
    await get_owned_or_404(db, Patient, patient_id, current, "Patient")
    stmt = owned(select(Visit).where(Visit.patient_id == patient_id), Visit, current)
    res = await db.execute(stmt.order_by(Visit.visit_at.desc()).offset(offset).limit(limit))
    return res.scalars().all()

# ---------- single visit ----------
@router.get("/{visit_id}", response_model=VisitOut)
async def get_visit(visit_id: str, current: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    return await _get_visit_or_404(visit_id, current, db)

@router.patch("/{visit_id}", response_model=VisitOut)
async def update_visit(
    visit_id: str,
    patch: VisitUpdate,
    current: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    data = patch.to_row()
    if not data:
        raise HTTPException(status_code=400, detail="No valid fields to update")

    visit = await _get_visit_or_404(visit_id, current, db)
    for k, v in data.items():
        setattr(visit, k, v)
    await db.commit()
    await db.refresh(visit)
    logger.info(f"Updated visit {visit_id}: {sorted(data)}")
    return visit

@router.delete("/{visit_id}")
async def delete_visit(visit_id: str, current: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    visit = await _get_visit_or_404(visit_id, current, db)
    await db.delete(visit)
    await db.commit()
    logger.info(f"Deleted visit {visit_id}")
    return {"message": "Visit deleted successfully"}

@router.get("/{visit_id}/next-appt", response_model=NextApptOut)
async def next_appt(visit_id: str, current: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    visit = await _get_visit_or_404(visit_id, current, db)
    upcoming = upcoming_appts(visit.procedures, clinic_today())
    if not upcoming:
        raise HTTPException(status_code=404, detail="No upcoming appointment")
    first = upcoming[0]
    return NextApptOut(visit_id=visit.id, patient_id=visit.patient_id, date=first["date"], procedure=first["procedure"])

@router.get("/{visit_id}/next-appts", response_model=NextApptsOut)
async def next_appts(visit_id: str, current: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    visit = await _get_visit_or_404(visit_id, current, db)
    items = [NextApptItem(**i) for i in upcoming_appts(visit.procedures, clinic_today())]
    return NextApptsOut(visit_id=visit.id, patient_id=visit.patient_id, items=items)
