from datetime import datetime
from sqlalchemy import Integer, String, DateTime, JSON, Index
from sqlalchemy.orm import Mapped, mapped_column

from dentflow.core.db import Base, utcnow

class AuditEvent(Base):
    """Append-only change log, one row per INSERT/UPDATE/DELETE of an audited row."""
    __tablename__ = "audit_event_log"
    __table_args__ = (
        Index("ix_audit_row", "table_schema", "table_name", "row_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    happened_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, index=True)
    table_schema: Mapped[str] = mapped_column(String(63), default="public")
    table_name: Mapped[str] = mapped_column(String(63), index=True)
    row_id: Mapped[str] = mapped_column(String(64))
    action: Mapped[str] = mapped_column(String(10), index=True)
    actor_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    # owner of the audited row, so non-admins can read their rows' history
    row_owner_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    old_data: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    new_data: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    changed_fields: Mapped[list | None] = mapped_column(JSON, nullable=True)
