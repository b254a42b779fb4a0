from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class AuditEventOut(BaseModel):
    id: int
    happened_at: datetime
    table_schema: str
    table_name: str
    row_id: str
    action: str
    actor_id: Optional[str] = None
    old_data: Optional[dict[str, Any]] = None
    new_data: Optional[dict[str, Any]] = None
    changed_fields: Optional[list[str]] = None

    class Config:
        from_attributes = True


class _Page(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
    limit: int
    offset: int
    total: int
    items: list[AuditEventOut]


class AuditPage(_Page):
    pass


class PatientAuditPage(_Page):
    patient_id: str


class ActorAuditPage(_Page):
    actor_id: str


class RowAuditPage(_Page):
    # "schema" would shadow BaseModel.schema()
    table_schema: str
    table: str
    row_id: str

    model_config = ConfigDict(
        alias_generator=lambda f: "schema" if f == "table_schema" else to_camel(f),
        populate_by_name=True,
    )


class ProvenanceRow(BaseModel):
    id: str
    created_at: Optional[datetime] = None
    created_by: Optional[str] = None
    updated_at: Optional[datetime] = None
    updated_by: Optional[str] = None

    class Config:
        from_attributes = True


class ProvenanceOut(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
    patient_id: str
    row: ProvenanceRow
    created_by_from_row: Optional[str] = None
    updated_by_from_row: Optional[str] = None
    first_insert: Optional[AuditEventOut] = None
    last_change: Optional[AuditEventOut] = None
