import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dentflow.core.db import get_db
from dentflow.api.deps import get_current_user, get_owned_or_404
from dentflow.models.user import User
from dentflow.models.patient import Patient
from dentflow.models.medical_history import MedicalHistory
from dentflow.schemas.medical_history import MedicalHistoryIn, MedicalHistoryOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/medicalhistory", tags=["medical-history"])


async def _find(db: AsyncSession, patient_id: str) -> MedicalHistory | None:
    res = await db.execute(select(MedicalHistory).where(MedicalHistory.patient_id == patient_id))
    return res.scalar_one_or_none()


@router.get("/{patient_id}/medical-history", response_model=MedicalHistoryOut)
async def get_medical_history(
    patient_id: str,
    current: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await get_owned_or_404(db, Patient, patient_id, current, "Patient")
    mh = await _find(db, patient_id)
    if not mh:
        raise HTTPException(status_code=404, detail="Medical history not found")
    return mh


@router.put("/{patient_id}/medical-history", response_model=MedicalHistoryOut)
async def upsert_medical_history(
    patient_id: str,
    payload: MedicalHistoryIn,
    current: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Create the patient's record on first save, replace its answers afterwards."""
    await get_owned_or_404(db, Patient, patient_id, current, "Patient")
    data = payload.model_dump()

    mh = await _find(db, patient_id)
    if mh is None:
        mh = MedicalHistory(patient_id=patient_id, created_by=current.id, **data)
        db.add(mh)
        logger.info(f"Creating medical history for patient {patient_id}")
    else:
        for k, v in data.items():
            setattr(mh, k, v)
        logger.info(f"Updating medical history {mh.id} for patient {patient_id}")

    await db.commit()
    await db.refresh(mh)
    return mh
