from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dentflow.core.db import get_db
from dentflow.api.deps import get_current_user, owned
from dentflow.models.user import User
from dentflow.models.patient import Patient
from dentflow.models.visit import Visit
from dentflow.schemas.analytics import YearTotal, YearMonthTotal, YearGenderTotal, AgeGroupTotal
from dentflow.services.analytics import (
    bucket_ages, count_by_gender, count_by_month, count_by_year, year_bounds_utc,
)
from dentflow.services.scheduling import clinic_today, clinic_tz

router = APIRouter(prefix="/analytics", tags=["analytics"])


def _year_or_current(year: int | None) -> int:
    return year or clinic_today().year


async def _rows(db: AsyncSession, model, user: User, column, *cols, year: int | None = None) -> list:
    """`column` plus any extra `cols` for the caller's rows, narrowed to one clinic year when given."""
    stmt = owned(select(column, *cols), model, user).where(column.is_not(None))
    if year is not None:
        lo, hi = year_bounds_utc(year, clinic_tz())
        stmt = stmt.where(column >= lo)
        if hi is not None:
            stmt = stmt.where(column < hi)
    res = await db.execute(stmt)
    return res.all() if cols else res.scalars().all()

# ---------- patients ----------
@router.get("/patients/by-year", response_model=list[YearTotal])
async def patients_by_year(current: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    return count_by_year(await _rows(db, Patient, current, Patient.created_at), clinic_tz())

@router.get("/patients/by-year-month", response_model=list[YearMonthTotal])
async def patients_by_year_month(
    year: int | None = Query(None, ge=1900, le=9999),
    current: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    year = _year_or_current(year)
    stamps = await _rows(db, Patient, current, Patient.created_at, year=year)
    return count_by_month(stamps, clinic_tz(), year)

@router.get("/patients/by-year-gender", response_model=list[YearGenderTotal])
async def patients_by_year_gender(
    year: int | None = Query(None, ge=1900, le=9999),
    current: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    year = _year_or_current(year)
    rows = await _rows(db, Patient, current, Patient.created_at, Patient.gender, year=year)
    return count_by_gender(rows, clinic_tz(), year)

@router.get("/patients/by-age-group", response_model=list[AgeGroupTotal])
async def patients_by_age_group(current: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    res = await db.execute(owned(select(Patient.dob), Patient, current))
    return bucket_ages(res.scalars().all(), clinic_today())

# ---------- visits ----------
@router.get("/visits/by-year", response_model=list[YearTotal])
async def visits_by_year(current: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    return count_by_year(await _rows(db, Visit, current, Visit.visit_at), clinic_tz())

@router.get("/visits/by-month", response_model=list[YearMonthTotal])
async def visits_by_month(
    year: int | None = Query(None, ge=1900, le=9999),
    current: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    year = _year_or_current(year)
    stamps = await _rows(db, Visit, current, Visit.visit_at, year=year)
    return count_by_month(stamps, clinic_tz(), year)
