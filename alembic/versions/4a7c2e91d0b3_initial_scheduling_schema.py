"""Initial schema for the practice scheduler.

Revision ID: 4a7c2e91d0b3
Revises:
Create Date: 2025-06-02 09:12:41.208113

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "4a7c2e91d0b3"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

appointment_status = sa.Enum(
    "scheduled",
    "confirmed",
    "checked_in",
    "in_progress",
    "completed",
    "cancelled",
    "no_show",
    "rescheduled",
    name="appointmentstatus",
)
time_off_category = sa.Enum(
    "vacation", "sick", "conference", "holiday", "personal", "other", name="timeoffcategory"
)
WEEKDAYS = "'monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday', 'sunday'"


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def _practitioner_fk() -> sa.Column:
    return sa.Column(
        "practitioner_id",
        sa.String(length=26),
        sa.ForeignKey("practitioners.practitioner_id", ondelete="CASCADE"),
        nullable=False,
    )


def upgrade() -> None:
    op.create_table(
        "practitioners",
        sa.Column("practitioner_id", sa.String(length=26), primary_key=True),
        sa.Column("display_name", sa.String(length=100), nullable=False),
        sa.Column("buffer_minutes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.CheckConstraint("buffer_minutes >= 0", name="ck_practitioners_buffer_non_negative"),
    )

    op.create_table(
        "working_hours",
        sa.Column("rule_id", sa.String(length=26), primary_key=True),
        _practitioner_fk(),
        sa.Column("day_of_week", sa.String(length=16), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("practitioner_id", "day_of_week", name="uq_working_hours_day"),
        sa.CheckConstraint(f"day_of_week IN ({WEEKDAYS})", name="ck_working_hours_weekday"),
        sa.CheckConstraint("end_time > start_time", name="ck_working_hours_order"),
    )
    op.create_index("ix_working_hours_practitioner_id", "working_hours", ["practitioner_id"])

    op.create_table(
        "break_rules",
        sa.Column("break_id", sa.String(length=26), primary_key=True),
        _practitioner_fk(),
        sa.Column("days_of_week", sa.JSON(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.Column("description", sa.String(length=255)),
        *_timestamps(),
        sa.CheckConstraint("duration_minutes > 0", name="ck_break_rules_duration_positive"),
    )
    op.create_index("ix_break_rules_practitioner_id", "break_rules", ["practitioner_id"])

    op.create_table(
        "time_off",
        sa.Column("time_off_id", sa.String(length=26), primary_key=True),
        _practitioner_fk(),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("category", time_off_category, nullable=False, server_default="vacation"),
        sa.Column("reason", sa.String(length=255)),
        *_timestamps(),
        sa.CheckConstraint("end_date >= start_date", name="ck_time_off_order"),
    )
    op.create_index("ix_time_off_practitioner_id", "time_off", ["practitioner_id"])

    op.create_table(
        "appointments",
        sa.Column("appointment_id", sa.String(length=26), primary_key=True),
        _practitioner_fk(),
        sa.Column("client_id", sa.String(length=64), nullable=False),
        sa.Column("service_type", sa.String(length=100), nullable=False),
        sa.Column("start_time", sa.DateTime(), nullable=False),
        sa.Column("end_time", sa.DateTime(), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.Column("status", appointment_status, nullable=False, server_default="scheduled"),
        sa.Column("series_id", sa.String(length=26)),
        sa.Column("is_detached", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("rescheduled_from_id", sa.String(length=26)),
        sa.Column("cancellation_reason", sa.Text()),
        sa.Column("cancelled_at", sa.DateTime()),
        sa.Column("confirmed_at", sa.DateTime()),
        sa.Column("checked_in_at", sa.DateTime()),
        sa.Column("started_at", sa.DateTime()),
        sa.Column("completed_at", sa.DateTime()),
        sa.Column("client_showed_up", sa.Boolean()),
        sa.Column("reminder_sent_at", sa.DateTime()),
        sa.Column("notes", sa.Text()),
        *_timestamps(),
        sa.CheckConstraint("end_time > start_time", name="ck_appointments_time_order"),
        sa.CheckConstraint("duration_minutes > 0", name="ck_appointments_duration_positive"),
    )
    op.create_index("ix_appointments_practitioner_id", "appointments", ["practitioner_id"])
    op.create_index("ix_appointments_client_id", "appointments", ["client_id"])
    op.create_index("ix_appointments_practitioner_start", "appointments", ["practitioner_id", "start_time"])
    op.create_index("ix_appointments_series", "appointments", ["series_id"])


def downgrade() -> None:
    op.drop_index("ix_appointments_series", table_name="appointments")
    op.drop_index("ix_appointments_practitioner_start", table_name="appointments")
    op.drop_index("ix_appointments_client_id", table_name="appointments")
    op.drop_index("ix_appointments_practitioner_id", table_name="appointments")
    op.drop_table("appointments")
    op.drop_index("ix_time_off_practitioner_id", table_name="time_off")
    op.drop_table("time_off")
    op.drop_index("ix_break_rules_practitioner_id", table_name="break_rules")
    op.drop_table("break_rules")
    op.drop_index("ix_working_hours_practitioner_id", table_name="working_hours")
    op.drop_table("working_hours")
    op.drop_table("practitioners")
    appointment_status.drop(op.get_bind(), checkfirst=False)
    time_off_category.drop(op.get_bind(), checkfirst=False)
