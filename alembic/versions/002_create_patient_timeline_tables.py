"""Create patient_notes and investigation_results tables.

Revision ID: 002
Revises: 001
Create Date: 2026-10-01 00:10:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
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
    """Create the clinical timeline and investigation result tables."""
    op.create_table(
        "patient_notes",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("patient_id", sa.Integer(), nullable=False),
        sa.Column("note_content", sa.Text(), nullable=False),
        sa.Column("note_type", sa.String(length=50), server_default="clinical", nullable=False),
        sa.Column("author_id", sa.Integer(), nullable=True),
        sa.Column("author_name", sa.String(length=100), nullable=True),
        sa.Column("author_role", sa.String(length=50), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["patient_id"], ["patients.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_patient_notes_patient_id", "patient_notes", ["patient_id"])
    op.create_index("idx_patient_notes_created_at", "patient_notes", ["created_at"])

    op.create_table(
        "investigation_results",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("patient_id", sa.Integer(), nullable=False),
        sa.Column("test_type", sa.String(length=50), nullable=False),
        sa.Column("test_name", sa.String(length=200), nullable=False),
        sa.Column("test_date", sa.Date(), nullable=False),
        sa.Column("result", sa.String(length=100), nullable=True),
        sa.Column("status", sa.String(length=50), server_default="Normal", nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["patient_id"], ["patients.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_investigation_results_patient_id", "investigation_results", ["patient_id"]
    )


def downgrade() -> None:
    """Drop the clinical timeline and investigation result tables."""
    op.drop_index("idx_investigation_results_patient_id", table_name="investigation_results")
    op.drop_table("investigation_results")
    op.drop_index("idx_patient_notes_created_at", table_name="patient_notes")
    op.drop_index("idx_patient_notes_patient_id", table_name="patient_notes")
    op.drop_table("patient_notes")
