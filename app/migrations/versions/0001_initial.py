"""Initial shift hours schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 00:00:00
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

shift_name = postgresql.ENUM(
    "morning",
    "afternoon",
    "evening",
    name="shift_name",
    create_type=False,
)
schedule_leave_type = postgresql.ENUM(
    "sick",
    "personal",
    "overtime",
    name="schedule_leave_type",
    create_type=False,
)
overtime_status = postgresql.ENUM(
    "pending",
    "approved",
    "rejected",
    name="overtime_status",
    create_type=False,
)
audit_actor_type = postgresql.ENUM(
    "ADMIN",
    "SYSTEM",
    name="audit_actor_type",
    create_type=False,
)


def _timestamp_column(name: str) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.text("CURRENT_TIMESTAMP"),
    )


def upgrade() -> None:
    bind = op.get_bind()
    shift_name.create(bind, checkfirst=True)
    schedule_leave_type.create(bind, checkfirst=True)
    overtime_status.create(bind, checkfirst=True)
    audit_actor_type.create(bind, checkfirst=True)

    op.create_table(
        "employees",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("position", sa.String(length=255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        _timestamp_column("created_at"),
    )

    op.create_table(
        "shift_time_configs",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("shift", shift_name, nullable=False),
        sa.Column("start_time", sa.String(length=5), nullable=False),
        sa.Column("end_time", sa.String(length=5), nullable=False),
        sa.Column("description", sa.String(length=200), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_by", sa.String(length=255), nullable=True),
        sa.Column("updated_by", sa.String(length=255), nullable=True),
        _timestamp_column("created_at"),
        _timestamp_column("updated_at"),
        sa.UniqueConstraint("shift", name="uq_shift_time_configs_shift"),
    )

    op.create_table(
        "employee_schedules",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("employee_id", sa.Integer(), nullable=False),
        sa.Column("day_date", sa.Date(), nullable=False),
        sa.Column("shift", shift_name, nullable=False),
        sa.Column("leave_type", schedule_leave_type, nullable=True),
        sa.Column("created_by", sa.String(length=255), nullable=True),
        _timestamp_column("created_at"),
        _timestamp_column("updated_at"),
        sa.ForeignKeyConstraint(["employee_id"], ["employees.id"], ondelete="CASCADE"),
        sa.UniqueConstraint(
            "employee_id",
            "day_date",
            "shift",
            name="uq_employee_schedules_employee_day_shift",
        ),
    )
    op.create_index("ix_employee_schedules_employee_id", "employee_schedules", ["employee_id"], unique=False)
    op.create_index("ix_employee_schedules_day_date", "employee_schedules", ["day_date"], unique=False)

    op.create_table(
        "overtime_records",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("employee_id", sa.Integer(), nullable=False),
        sa.Column("day_date", sa.Date(), nullable=False),
        sa.Column("hours", sa.Float(), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=True),
        sa.Column("status", overtime_status, nullable=False, server_default=sa.text("'pending'")),
        sa.Column("approved_by", sa.String(length=255), nullable=True),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("approval_note", sa.String(length=500), nullable=True),
        sa.Column("created_by", sa.String(length=255), nullable=True),
        _timestamp_column("created_at"),
        _timestamp_column("updated_at"),
        sa.ForeignKeyConstraint(["employee_id"], ["employees.id"], ondelete="CASCADE"),
        sa.CheckConstraint("hours > 0 AND hours <= 24", name="ck_overtime_records_hours_range"),
    )
    op.create_index("ix_overtime_records_employee_id", "overtime_records", ["employee_id"], unique=False)
    op.create_index("ix_overtime_records_day_date", "overtime_records", ["day_date"], unique=False)

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        _timestamp_column("ts_utc"),
        sa.Column("actor_type", audit_actor_type, nullable=False),
        sa.Column("actor_id", sa.String(length=255), nullable=False),
        sa.Column("action", sa.String(length=255), nullable=False),
        sa.Column("entity_type", sa.String(length=255), nullable=True),
        sa.Column("entity_id", sa.String(length=255), nullable=True),
        sa.Column("ip", sa.String(length=128), nullable=True),
        sa.Column("user_agent", sa.String(length=1024), nullable=True),
        sa.Column("success", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column(
            "details",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
    )
    op.create_index("ix_audit_logs_ts_utc", "audit_logs", ["ts_utc"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_audit_logs_ts_utc", table_name="audit_logs")
    op.drop_table("audit_logs")

    op.drop_index("ix_overtime_records_day_date", table_name="overtime_records")
    op.drop_index("ix_overtime_records_employee_id", table_name="overtime_records")
    op.drop_table("overtime_records")

    op.drop_index("ix_employee_schedules_day_date", table_name="employee_schedules")
    op.drop_index("ix_employee_schedules_employee_id", table_name="employee_schedules")
    op.drop_table("employee_schedules")

    op.drop_table("shift_time_configs")
    op.drop_table("employees")

    bind = op.get_bind()
    audit_actor_type.drop(bind, checkfirst=True)
    overtime_status.drop(bind, checkfirst=True)
    schedule_leave_type.drop(bind, checkfirst=True)
    shift_name.drop(bind, checkfirst=True)
