"""
Row-level change capture.

A ``before_flush`` listener on every ORM session turns pending INSERTs,
UPDATEs and DELETEs of audited models (``__audited__ = True``) into
``AuditEvent`` rows that are flushed in the same transaction. The acting user
is read from ``session.info["actor_id"]``, which the auth dependency sets on
the request's session.
"""
import logging
from typing import Any

from fastapi.encoders import jsonable_encoder
from sqlalchemy import event, inspect
from sqlalchemy.orm import Session

from dentflow.core.db import utcnow
from dentflow.models.audit import AuditEvent

logger = logging.getLogger(__name__)

ACTOR_KEY = "actor_id"
AUDIT_SCHEMA = "public"
ACTIONS = ("INSERT", "UPDATE", "DELETE")

# bookkeeping columns that never count as a change on their own
_STAMP_FIELDS = {"updated_at", "updated_by"}


def set_actor(session: Any, actor_id: str | None) -> None:
    """Accepts both Session and AsyncSession (its .info proxies the sync session)."""
    session.info[ACTOR_KEY] = actor_id


def _is_audited(obj: Any) -> bool:
    return getattr(obj, "__audited__", False) and not isinstance(obj, AuditEvent)


def _snapshot(obj: Any) -> dict:
    mapper = inspect(obj).mapper
    return jsonable_encoder({prop.key: getattr(obj, prop.key) for prop in mapper.column_attrs})


def _apply_column_defaults(obj: Any) -> None:
    # Python-side defaults normally fire inside the INSERT; resolve them now so
    # the captured row matches what gets written.
    for prop in inspect(obj).mapper.column_attrs:
        col = prop.columns[0]
        if col.default is None or getattr(obj, prop.key) is not None:
            continue
        if col.default.is_callable:
            setattr(obj, prop.key, col.default.arg(None))
        elif col.default.is_scalar:
            setattr(obj, prop.key, col.default.arg)


def _changes(obj: Any) -> tuple[dict, list[str]]:
    state = inspect(obj)
    old: dict = {}
    changed: list[str] = []
    for prop in state.mapper.column_attrs:
        if prop.key in _STAMP_FIELDS:
            continue
        hist = state.attrs[prop.key].history
        if not hist.has_changes():
            continue
        old_value = hist.deleted[0] if hist.deleted else None
        new_value = hist.added[0] if hist.added else None
        if old_value == new_value:
            continue
        old[prop.key] = old_value
        changed.append(prop.key)
    return old, changed


def _event(obj: Any, action: str, actor_id: str | None, old=None, new=None, changed=None) -> AuditEvent:
    return AuditEvent(
        happened_at=utcnow(),
        table_schema=AUDIT_SCHEMA,
        table_name=obj.__tablename__,
        row_id=str(obj.id),
        action=action,
        actor_id=actor_id,
        row_owner_id=getattr(obj, "created_by", None),
        old_data=old,
        new_data=new,
        changed_fields=changed,
    )


def capture_changes(session: Session, flush_context=None, instances=None) -> None:
    actor_id = session.info.get(ACTOR_KEY)
    events: list[AuditEvent] = []

    for obj in list(session.new):
        if not _is_audited(obj):
            continue
        if obj.created_by is None:
            obj.created_by = actor_id
        _apply_column_defaults(obj)
        events.append(_event(obj, "INSERT", actor_id, new=_snapshot(obj)))

    for obj in list(session.dirty):
        if not _is_audited(obj) or not session.is_modified(obj, include_collections=False):
            continue
        old_values, changed = _changes(obj)
        if not changed:
            continue
        old = {**_snapshot(obj), **jsonable_encoder(old_values)}
        obj.updated_at = utcnow()
        obj.updated_by = actor_id
        new = _snapshot(obj)
        events.append(_event(obj, "UPDATE", actor_id, old=old, new=new, changed=changed))

    for obj in list(session.deleted):
        if not _is_audited(obj):
            continue
        events.append(_event(obj, "DELETE", actor_id, old=_snapshot(obj)))

    for ev in events:
        logger.debug(f"audit {ev.action} {ev.table_name}:{ev.row_id} by {ev.actor_id}")
    session.add_all(events)


def register_audit_hook() -> None:
    if not event.contains(Session, "before_flush", capture_changes):
        event.listen(Session, "before_flush", capture_changes)
