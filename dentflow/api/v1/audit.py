"""
Read side of the change log written by ``services.audit_trail``.

Admins read every event. Other users read events on rows they own plus
events they authored themselves, which is enough to follow a patient from
creation through every edit and deletion.
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy import Select, select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from dentflow.core.db import get_db
from dentflow.api.deps import get_current_user, get_owned_or_404, is_admin, Page
from dentflow.models.user import User
from dentflow.models.patient import Patient
from dentflow.models.audit import AuditEvent
from dentflow.schemas.audit import (
    AuditEventOut, AuditPage, PatientAuditPage, ActorAuditPage, RowAuditPage, ProvenanceRow, ProvenanceOut,
)
from dentflow.services.audit_trail import ACTIONS, AUDIT_SCHEMA

router = APIRouter(prefix="/audit", tags=["audit"])


def _visible(stmt: Select, user: User) -> Select:
    if is_admin(user):
        return stmt
    return stmt.where(or_(AuditEvent.row_owner_id == user.id, AuditEvent.actor_id == user.id))


async def _page(db: AsyncSession, user: User, limit: int, offset: int, *where) -> dict:
    total = (await db.execute(_visible(select(func.count(AuditEvent.id)).where(*where), user))).scalar_one()
    stmt = (
        _visible(select(AuditEvent).where(*where), user)
        .order_by(AuditEvent.happened_at.desc(), AuditEvent.id.desc())
        .offset(offset)
        .limit(limit)
    )
    items = (await db.execute(stmt)).scalars().all()
    return {
        "limit": limit,
        "offset": offset,
        "total": total,
        "items": [AuditEventOut.model_validate(e) for e in items],
    }


@router.get("/recent", response_model=AuditPage)
async def recent(
    action: str | None = Query(None),
    table: str | None = Query(None),
    page: tuple[int, int] = Depends(Page(default_limit=50)),
    current: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    limit, offset = page
    where = []
    # unknown actions are ignored rather than rejected
    if action and action.strip().upper() in ACTIONS:
        where.append(AuditEvent.action == action.strip().upper())
    if table and table.strip():
        where.append(AuditEvent.table_name == table.strip())
    return AuditPage(**await _page(db, current, limit, offset, *where))


@router.get("/patients/{patient_id}", response_model=PatientAuditPage)
async def patient_history(
    patient_id: str,
    page: tuple[int, int] = Depends(Page(default_limit=100)),
    current: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    limit, offset = page
    body = await _page(
        db, current, limit, offset,
        AuditEvent.table_name == Patient.__tablename__,
        AuditEvent.row_id == patient_id,
    )
    return PatientAuditPage(patient_id=patient_id, **body)


@router.get("/patients/{patient_id}/provenance", response_model=ProvenanceOut)
async def patient_provenance(
    patient_id: str,
    current: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Who created and last touched the patient, from the row itself and from the log."""
    pt = await get_owned_or_404(db, Patient, patient_id, current, "Patient")
    on_row = (AuditEvent.table_name == Patient.__tablename__, AuditEvent.row_id == patient_id)

    first_insert = (await db.execute(
        select(AuditEvent)
        .where(*on_row, AuditEvent.action == "INSERT")
        .order_by(AuditEvent.happened_at.asc(), AuditEvent.id.asc())
        .limit(1)
    )).scalar_one_or_none()
    last_change = (await db.execute(
        select(AuditEvent)
        .where(*on_row, AuditEvent.action.in_(("UPDATE", "DELETE")))
        .order_by(AuditEvent.happened_at.desc(), AuditEvent.id.desc())
        .limit(1)
    )).scalar_one_or_none()

    return ProvenanceOut(
        patient_id=patient_id,
        row=ProvenanceRow.model_validate(pt),
        created_by_from_row=pt.created_by,
        updated_by_from_row=pt.updated_by,
        first_insert=AuditEventOut.model_validate(first_insert) if first_insert else None,
        last_change=AuditEventOut.model_validate(last_change) if last_change else None,
    )


@router.get("/actors/{actor_id}", response_model=ActorAuditPage)
async def actor_history(
    actor_id: str,
    page: tuple[int, int] = Depends(Page(default_limit=50)),
    current: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    limit, offset = page
    body = await _page(db, current, limit, offset, AuditEvent.actor_id == actor_id)
    return ActorAuditPage(actor_id=actor_id, **body)


@router.get("/{schema}/{table}/{row_id}", response_model=RowAuditPage)
async def row_history(
    schema: str,
    table: str,
    row_id: str,
    page: tuple[int, int] = Depends(Page(default_limit=100)),
    current: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    limit, offset = page
    body = await _page(
        db, current, limit, offset,
        AuditEvent.table_schema == (schema or AUDIT_SCHEMA),
        AuditEvent.table_name == table,
        AuditEvent.row_id == row_id,
    )
    return RowAuditPage(table_schema=schema, table=table, row_id=row_id, **body)
