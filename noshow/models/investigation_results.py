"""Investigation results table model using SQLAlchemy Core."""

from sqlalchemy import (
    Column,
    Date,
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

investigation_results = Table(
    "investigation_results",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "patient_id",
        Integer,
        ForeignKey("patients.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("test_type", String(50), nullable=False),
    Column("test_name", String(200), nullable=False),
    Column("test_date", Date, nullable=False),
    Column("result", String(100), nullable=True),
    Column("status", String(50), nullable=False, server_default="Normal"),
    Column("notes", Text, nullable=True),
    Column("created_at", DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP")),
    Column("updated_at", DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP")),
    Index("idx_investigation_results_patient_id", "patient_id"),
)
