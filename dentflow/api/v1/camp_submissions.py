import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from dentflow.core.db import get_db
from dentflow.api.deps import get_current_user, get_owned_or_404, owned, Page
from dentflow.models.user import User
from dentflow.models.camp_submission import CampSubmission, InstitutionType
from dentflow.schemas.camp_submission import CampSubmissionCreate, CampSubmissionUpdate, CampSubmissionOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/camp-submissions", tags=["camp-submissions"])


async def _get_or_404(id: str, user: User, db: AsyncSession) -> CampSubmission:
    return await get_owned_or_404(db, CampSubmission, id, user, "Camp submission")


@router.get("", response_model=list[CampSubmissionOut])
async def list_submissions(
    q: str | None = Query(None, description="Matches name, email, phone or institution"),
    institution_type: InstitutionType | None = Query(None),
    page: tuple[int, int] = Depends(Page(default_limit=100)),
    current: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    limit, offset = page
    stmt = owned(select(CampSubmission), CampSubmission, current)
    if q and q.strip():
        term = f"%{q.strip()}%"
        stmt = stmt.where(or_(
            CampSubmission.name.ilike(term),
            CampSubmission.email.ilike(term),
            CampSubmission.phone.ilike(term),
            CampSubmission.institution.ilike(term),
        ))
    if institution_type is not None:
        stmt = stmt.where(CampSubmission.institution_type == institution_type)
    res = await db.execute(stmt.order_by(CampSubmission.created_at.desc()).offset(offset).limit(limit))
    return res.scalars().all()


@router.post("", response_model=CampSubmissionOut, status_code=201)
async def create_submission(
    payload: CampSubmissionCreate,
    current: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    sub = CampSubmission(**payload.model_dump(), created_by=current.id)
    db.add(sub)
    await db.commit()
    await db.refresh(sub)
    logger.info(f"Created camp submission {sub.id}")
    return sub


@router.get("/{id}", response_model=CampSubmissionOut)
async def get_submission(id: str, current: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    return await _get_or_404(id, current, db)


@router.patch("/{id}", response_model=CampSubmissionOut)
async def update_submission(
    id: str,
    patch: CampSubmissionUpdate,
    current: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    data = patch.model_dump(exclude_unset=True)
    if not data:
        raise HTTPException(status_code=400, detail="No valid fields to update")
    if "name" in data and data["name"] is None:
        raise HTTPException(status_code=400, detail="name cannot be empty")

    sub = await _get_or_404(id, current, db)
    for k, v in data.items():
        setattr(sub, k, v)
    await db.commit()
    await db.refresh(sub)
    logger.info(f"Updated camp submission {id}: {sorted(data)}")
    return sub


@router.delete("/{id}")
async def delete_submission(id: str, current: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    sub = await _get_or_404(id, current, db)
    await db.delete(sub)
    await db.commit()
    logger.info(f"Deleted camp submission {id}")
    return {"message": "Camp submission deleted successfully"}
