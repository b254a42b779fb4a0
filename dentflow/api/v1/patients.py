import logging

from fastapi import APIRouter, Depends, HTTPException, Query, UploadFile, status
from sqlalchemy import select, or_, func
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from dentflow.core import cdn
from dentflow.core.config import settings
from dentflow.core.db import get_db
from dentflow.api.deps import get_current_user, get_owned_or_404, owned, Page
from dentflow.models.user import User
from dentflow.models.patient import Patient
from dentflow.models.medical_history import MedicalHistory
from dentflow.models.visit import Visit
from dentflow.schemas.patient import (
    PatientCreate, PatientUpdate, PatientOut, PatientDetailOut, PatientMeta, PatientCreatedOut, PhotoOut,
)
from dentflow.schemas.medical_history import MedicalHistoryOut
from dentflow.schemas.visit import VisitOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/patients", tags=["patients"])

MAX_BYTES = settings.MAX_UPLOAD_MB * 1024 * 1024
IMAGE_TYPES = {"image/png", "image/jpeg", "image/webp"}

# ---------- helpers ----------
async def _get_patient_or_404(id: str, user: User, db: AsyncSession) -> Patient:
    return await get_owned_or_404(db, Patient, id, user, "Patient")

async def _read_and_validate_image(file: UploadFile) -> bytes:
    if file.content_type not in IMAGE_TYPES:
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail="Only PNG, JPEG or WebP images are accepted",
        )
    b = await file.read()
    if not b:
        raise HTTPException(status_code=400, detail="Empty file")
    if len(b) > MAX_BYTES:
        raise HTTPException(status_code=413, detail=f"Maximum upload size is {settings.MAX_UPLOAD_MB} MB")
    return b

async def _destroy_photo(public_id: str | None) -> None:
    if not public_id or not settings.cloudinary_configured:
        return
    try:
        await run_in_threadpool(cdn.destroy, public_id)
    except Exception:
        # the DB row is already gone; an orphaned asset is only logged
        logger.exception(f"Could not remove photo {public_id} from Cloudinary")

# ---------- create ----------
@router.post("", response_model=PatientCreatedOut, status_code=201)
async def create_patient(
    payload: PatientCreate,
    current: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Patient, medical history and first visit are written in one transaction."""
    pt = Patient(**payload.patient.model_dump(), created_by=current.id)
    db.add(pt)
    await db.flush()

    mh = MedicalHistory(patient_id=pt.id, created_by=current.id, **payload.medical_history.model_dump())
    visit = Visit(patient_id=pt.id, created_by=current.id, **payload.initial_visit.to_row())
    db.add_all([mh, visit])
    await db.commit()

    logger.info(f"Created patient {pt.id} with initial visit {visit.id}")
    return PatientCreatedOut(
        patient=PatientOut.model_validate(pt),
        medical_history=MedicalHistoryOut.model_validate(mh),
        visit=VisitOut.model_validate(visit),
    )

# ---------- list ----------
@router.get("", response_model=list[PatientOut])
async def list_patients(
    q: str | None = Query(None, description="Matches first/last name or phone"),
    page: tuple[int, int] = Depends(Page(default_limit=100)),
    current: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    limit, offset = page
    stmt = owned(select(Patient), Patient, current)
    if q and q.strip():
        term = f"%{q.strip()}%"
        stmt = stmt.where(or_(
            Patient.first_name.ilike(term),
            Patient.last_name.ilike(term),
            Patient.phone.ilike(term),
        ))
    res = await db.execute(stmt.order_by(Patient.created_at.desc()).offset(offset).limit(limit))
    return res.scalars().all()

# ---------- get ----------
@router.get("/{id}", response_model=PatientDetailOut)
async def get_patient(id: str, current: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    pt = await _get_patient_or_404(id, current, db)

    mh_id = (await db.execute(
        select(MedicalHistory.id).where(MedicalHistory.patient_id == id).limit(1)
    )).scalar_one_or_none()
    last_visit_at = (await db.execute(
        select(func.max(Visit.visit_at)).where(Visit.patient_id == id)
    )).scalar_one_or_none()

    return PatientDetailOut(
        patient=PatientOut.model_validate(pt),
        meta=PatientMeta(has_medical_history=mh_id is not None, last_visit_at=last_visit_at),
    )

# ---------- update ----------
@router.put("/{id}", response_model=PatientOut)
async def update_patient(
    id: str,
    patch: PatientUpdate,
    current: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    data = patch.model_dump(exclude_unset=True)
    if not data:
        raise HTTPException(status_code=400, detail="No valid fields to update")

    pt = await _get_patient_or_404(id, current, db)
    for k, v in data.items():
        setattr(pt, k, v)
    await db.commit()
    await db.refresh(pt)
    logger.info(f"Updated patient {id}: {sorted(data)}")
    return pt

# ---------- delete ----------
@router.delete("/{id}")
async def delete_patient(id: str, current: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    pt = await _get_patient_or_404(id, current, db)
    public_id = pt.photo_public_id

    # children go through the session so every row lands in the audit log
    for model in (Visit, MedicalHistory):
        rows = (await db.execute(select(model).where(model.patient_id == id))).scalars().all()
        for row in rows:
            await db.delete(row)
    await db.delete(pt)
    await db.commit()

    await _destroy_photo(public_id)
    logger.info(f"Deleted patient {id}")
    return {"message": "Patient deleted successfully"}

# ---------- photo ----------
@router.post("/{id}/photo", response_model=PhotoOut)
async def upload_patient_photo(
    id: str,
    file: UploadFile,
    current: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    pt = await _get_patient_or_404(id, current, db)
    bits = await _read_and_validate_image(file)
    try:
        url, public_id = await run_in_threadpool(
            cdn.upload_patient_photo, bits, settings.MEDIA_FOLDER_PATIENT_PHOTOS
        )
    except cdn.CDNNotConfigured:
        raise HTTPException(status_code=503, detail="Photo storage is not configured")

    previous = pt.photo_public_id
    pt.photo_url = url
    pt.photo_public_id = public_id
    await db.commit()

    if previous and previous != public_id:
        await _destroy_photo(previous)
    return PhotoOut(url=url, public_id=public_id)

@router.delete("/{id}/photo", status_code=204)
async def delete_patient_photo(id: str, current: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    pt = await _get_patient_or_404(id, current, db)
    public_id = pt.photo_public_id
    pt.photo_url = None
    pt.photo_public_id = None
    await db.commit()
    await _destroy_photo(public_id)
    return
