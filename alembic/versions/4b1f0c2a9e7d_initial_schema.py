"""initial schema

Revision ID: 4b1f0c2a9e7d
Revises:
Create Date: 2026-10-19 10:12:41.402118

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4b1f0c2a9e7d'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _owned_columns() -> list[sa.Column]:
    return [
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("created_by", sa.String(36), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.Column("updated_by", sa.String(36), nullable=True),
    ]


def _owned_indexes(table: str) -> None:
    op.create_index(f"ix_{table}_created_at", table, ["created_at"])
    op.create_index(f"ix_{table}_created_by", table, ["created_by"])


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("username", sa.String(120), nullable=False),
        sa.Column("phone", sa.String(20), nullable=True),
        sa.Column("role", sa.Enum("dentist", "admin", name="roleenum"), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "patients",
        *_owned_columns(),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("dob", sa.Date(), nullable=False),
        sa.Column("gender", sa.String(20), nullable=False),
        sa.Column("phone", sa.String(20), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("address_line1", sa.String(255), nullable=True),
        sa.Column("address_line2", sa.String(255), nullable=True),
        sa.Column("city", sa.String(100), nullable=True),
        sa.Column("state", sa.String(100), nullable=True),
        sa.Column("pincode", sa.String(12), nullable=True),
        sa.Column("occupation", sa.String(120), nullable=True),
        sa.Column("emergency_contact", sa.JSON(), nullable=True),
        sa.Column("photo_url", sa.String(500), nullable=True),
        sa.Column("photo_public_id", sa.String(255), nullable=True),
    )
    _owned_indexes("patients")
    op.create_index("ix_patients_gender", "patients", ["gender"])
    op.create_index("ix_patients_phone", "patients", ["phone"])

    yes_no = ("surgery_or_hospitalized", "fever_cold_cough", "abnormal_bleeding_history",
              "taking_medicine", "medication_allergy")
    details = ("surgery_details", "fever_details", "other_problem_text", "abnormal_bleeding_details",
               "medicine_details", "medication_allergy_details", "past_dental_history")
    flags = ("artificial_valves_pacemaker", "asthma", "allergy", "bleeding_tendency", "epilepsy_seizure",
             "heart_disease", "hyp_hypertension", "hormone_disorder", "jaundice_liver", "stomach_ulcer",
             "low_high_pressure", "arthritis_joint", "kidney_problems", "thyroid_problems", "other_problem")
    op.create_table(
        "medical_histories",
        *_owned_columns(),
        sa.Column("patient_id", sa.String(36), sa.ForeignKey("patients.id", ondelete="CASCADE"), nullable=False),
        *[sa.Column(c, sa.String(10), nullable=False) for c in yes_no],
        *[sa.Column(c, sa.Boolean(), nullable=False) for c in flags],
        *[sa.Column(c, sa.Text(), nullable=True) for c in details],
    )
    _owned_indexes("medical_histories")
    op.create_index("ix_medical_histories_patient_id", "medical_histories", ["patient_id"], unique=True)

    op.create_table(
        "visits",
        *_owned_columns(),
        sa.Column("patient_id", sa.String(36), sa.ForeignKey("patients.id", ondelete="CASCADE"), nullable=False),
        sa.Column("visit_at", sa.DateTime(), nullable=False),
        sa.Column("chief_complaint", sa.Text(), nullable=True),
        sa.Column("duration_onset", sa.String(120), nullable=True),
        sa.Column("trigger_factors", sa.JSON(), nullable=False),
        sa.Column("diagnosis_notes", sa.Text(), nullable=True),
        sa.Column("treatment_plan_notes", sa.Text(), nullable=True),
        sa.Column("findings", sa.JSON(), nullable=True),
        sa.Column("procedures", sa.JSON(), nullable=True),
    )
    _owned_indexes("visits")
    op.create_index("ix_visits_patient_id", "visits", ["patient_id"])
    op.create_index("ix_visits_visit_at", "visits", ["visit_at"])

    op.create_table(
        "appointments",
        *_owned_columns(),
        sa.Column("patient_id", sa.String(36), sa.ForeignKey("patients.id", ondelete="SET NULL"), nullable=True),
        sa.Column("patient_name", sa.String(200), nullable=False),
        sa.Column("phone", sa.String(20), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("time_slot", sa.String(5), nullable=False),
        sa.Column("service_type", sa.String(50), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("rescheduled_date", sa.Date(), nullable=True),
        sa.Column("rescheduled_time", sa.String(5), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
    )
    _owned_indexes("appointments")
    op.create_index("ix_appointments_patient_id", "appointments", ["patient_id"])
    op.create_index("ix_appointments_date", "appointments", ["date"])
    op.create_index("ix_appointments_status", "appointments", ["status"])
    op.create_index("ix_appointments_rescheduled_date", "appointments", ["rescheduled_date"])
    op.create_index("ix_appt_date_slot", "appointments", ["date", "time_slot"])

    op.create_table(
        "camp_submissions",
        *_owned_columns(),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("dob", sa.Date(), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(20), nullable=True),
        sa.Column("institution", sa.String(200), nullable=True),
        sa.Column("institution_type", sa.String(20), nullable=True),
        sa.Column("comments", sa.Text(), nullable=True),
    )
    _owned_indexes("camp_submissions")
    op.create_index("ix_camp_submissions_institution_type", "camp_submissions", ["institution_type"])

    op.create_table(
        "audit_event_log",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("happened_at", sa.DateTime(), nullable=False),
        sa.Column("table_schema", sa.String(63), nullable=False),
        sa.Column("table_name", sa.String(63), nullable=False),
        sa.Column("row_id", sa.String(64), nullable=False),
        sa.Column("action", sa.String(10), nullable=False),
        sa.Column("actor_id", sa.String(36), nullable=True),
        sa.Column("row_owner_id", sa.String(36), nullable=True),
        sa.Column("old_data", sa.JSON(), nullable=True),
        sa.Column("new_data", sa.JSON(), nullable=True),
        sa.Column("changed_fields", sa.JSON(), nullable=True),
    )
    op.create_index("ix_audit_event_log_happened_at", "audit_event_log", ["happened_at"])
    op.create_index("ix_audit_event_log_table_name", "audit_event_log", ["table_name"])
    op.create_index("ix_audit_event_log_action", "audit_event_log", ["action"])
    op.create_index("ix_audit_event_log_actor_id", "audit_event_log", ["actor_id"])
    op.create_index("ix_audit_event_log_row_owner_id", "audit_event_log", ["row_owner_id"])
    op.create_index("ix_audit_row", "audit_event_log", ["table_schema", "table_name", "row_id"])


def downgrade() -> None:
    op.drop_table("audit_event_log")
    op.drop_table("camp_submissions")
    op.drop_table("appointments")
    op.drop_table("visits")
    op.drop_table("medical_histories")
    op.drop_table("patients")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
