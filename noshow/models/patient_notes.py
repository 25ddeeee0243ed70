"""Patient notes (clinical timeline) table model using SQLAlchemy Core."""

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    text,
)

metadata = MetaData()

patient_notes = Table(
    "patient_notes",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "patient_id",
        Integer,
        ForeignKey("patients.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("note_content", Text, nullable=False),
    Column("note_type", String(50), nullable=False, server_default="clinical"),
    Column("author_id", Integer, nullable=True),
    Column("author_name", String(100), nullable=True),
    Column("author_role", String(50), nullable=True),
    Column("created_at", DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP")),
    Column("updated_at", DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP")),
    Index("idx_patient_notes_patient_id", "patient_id"),
    Index("idx_patient_notes_created_at", "created_at"),
)
