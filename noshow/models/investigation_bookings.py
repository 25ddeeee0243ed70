"""Investigation bookings table model using SQLAlchemy Core."""

from sqlalchemy import (
    CheckConstraint,
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
    Time,
    text,
)

from noshow.models.appointments import STATUS_CHECK

metadata = MetaData()

investigation_bookings = Table(
    "investigation_bookings",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "patient_id",
        Integer,
        ForeignKey("patients.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("investigation_type", String(100), nullable=False),
    Column("investigation_name", String(200), nullable=False),
    Column("scheduled_date", Date, nullable=False),
    Column("scheduled_time", Time, nullable=False),
    Column("status", String(50), nullable=False, server_default="scheduled"),
    Column("notes", Text, nullable=True),
    Column("created_by", Integer, nullable=True),
    Column("created_at", DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP")),
    Column("updated_at", DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP")),
    CheckConstraint(STATUS_CHECK, name="investigation_bookings_status_check"),
    Index("idx_investigation_bookings_patient_id", "patient_id"),
    Index("idx_investigation_bookings_date", "scheduled_date"),
    Index("idx_investigation_bookings_status", "status"),
)
