"""Create appointments and investigation_bookings tables.

Revision ID: 003
Revises: 002
Create Date: 2026-10-01 00:20:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

STATUS_CHECK = (
    "status IN ('scheduled', 'confirmed', 'rescheduled', 'cancelled', 'completed', 'no_show')"
)


def _audit_columns() -> list[sa.Column]:
    return [
        sa.Column("status", sa.String(length=50), server_default="scheduled", nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_by", sa.Integer(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Create the two bookable tables reconciled by the no-show job."""
    op.create_table(
        "appointments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("patient_id", sa.Integer(), nullable=False),
        sa.Column("appointment_type", sa.String(length=50), nullable=False),
        sa.Column("appointment_date", sa.Date(), nullable=False),
        sa.Column("appointment_time", sa.Time(), nullable=False),
        sa.Column("urologist_id", sa.Integer(), nullable=True),
        sa.Column("urologist_name", sa.String(length=100), nullable=True),
        sa.Column("surgery_type", sa.String(length=200), nullable=True),
        *_audit_columns(),
        sa.CheckConstraint(STATUS_CHECK, name="appointments_status_check"),
        sa.ForeignKeyConstraint(["patient_id"], ["patients.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_appointments_patient_id", "appointments", ["patient_id"])
    op.create_index("idx_appointments_date", "appointments", ["appointment_date"])
    op.create_index("idx_appointments_status", "appointments", ["status"])

    op.create_table(
        "investigation_bookings",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("patient_id", sa.Integer(), nullable=False),
        sa.Column("investigation_type", sa.String(length=100), nullable=False),
        sa.Column("investigation_name", sa.String(length=200), nullable=False),
        sa.Column("scheduled_date", sa.Date(), nullable=False),
        sa.Column("scheduled_time", sa.Time(), nullable=False),
        *_audit_columns(),
        sa.CheckConstraint(STATUS_CHECK, name="investigation_bookings_status_check"),
        sa.ForeignKeyConstraint(["patient_id"], ["patients.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_investigation_bookings_patient_id", "investigation_bookings", ["patient_id"]
    )
    op.create_index(
        "idx_investigation_bookings_date", "investigation_bookings", ["scheduled_date"]
    )
    op.create_index("idx_investigation_bookings_status", "investigation_bookings", ["status"])


def downgrade() -> None:
    """Drop the bookable tables."""
    op.drop_index("idx_investigation_bookings_status", table_name="investigation_bookings")
    op.drop_index("idx_investigation_bookings_date", table_name="investigation_bookings")
    op.drop_index("idx_investigation_bookings_patient_id", table_name="investigation_bookings")
    op.drop_table("investigation_bookings")
    op.drop_index("idx_appointments_status", table_name="appointments")
    op.drop_index("idx_appointments_date", table_name="appointments")
    op.drop_index("idx_appointments_patient_id", table_name="appointments")
    op.drop_table("appointments")
