import uuid
from datetime import datetime

from sqlalchemy import String, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from dentflow.core.db import utcnow


def new_id() -> str:
    return str(uuid.uuid4())


class OwnedMixin:
    """
    Columns shared by every clinical table. created_by scopes visibility for
    non-admin users; updated_* are stamped by the audit hook on each UPDATE.
    Subclasses with __audited__ = True get an AuditEvent per write.
    """
    __audited__ = True

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, index=True)
    created_by: Mapped[str | None] = mapped_column(String(36), index=True, nullable=True)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    updated_by: Mapped[str | None] = mapped_column(String(36), nullable=True)
