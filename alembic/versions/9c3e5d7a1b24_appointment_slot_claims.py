"""appointment slot claims

Revision ID: 9c3e5d7a1b24
Revises: 4b1f0c2a9e7d
Create Date: 2026-10-19 16:40:08.218734

"""
from collections import defaultdict
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '9c3e5d7a1b24'
down_revision: Union[str, Sequence[str], None] = '4b1f0c2a9e7d'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    slots = op.create_table(
        "appointment_slots",
        sa.Column(
            "appointment_id", sa.String(36),
            sa.ForeignKey("appointments.id", ondelete="CASCADE"), primary_key=True,
        ),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("time_slot", sa.String(5), nullable=False),
        sa.Column("seat", sa.Integer(), nullable=False),
        sa.UniqueConstraint("date", "time_slot", name="uq_slot_date_time"),
        sa.UniqueConstraint("date", "seat", name="uq_slot_date_seat"),
    )

    # claim the slots of existing bookings; later duplicates of a slot stay unclaimed
    appts = sa.table(
        "appointments",
        sa.column("id", sa.String), sa.column("date", sa.Date), sa.column("time_slot", sa.String),
        sa.column("status", sa.String), sa.column("rescheduled_date", sa.Date),
        sa.column("rescheduled_time", sa.String), sa.column("created_at", sa.DateTime),
    )
    rows = op.get_bind().execute(
        sa.select(appts).where(appts.c.status != "Cancelled").order_by(appts.c.created_at)
    )
    seats, taken, claims = defaultdict(int), set(), []
    for r in rows:
        if r.status == "Rescheduled" and r.rescheduled_date and r.rescheduled_time:
            day, slot = r.rescheduled_date, r.rescheduled_time
        else:
            day, slot = r.date, r.time_slot
        if (day, slot) in taken:
            continue
        taken.add((day, slot))
        seats[day] += 1
        claims.append({"appointment_id": r.id, "date": day, "time_slot": slot, "seat": seats[day]})
    if claims:
        op.bulk_insert(slots, claims)


def downgrade() -> None:
    op.drop_table("appointment_slots")
