"""Urologist appointments table model using SQLAlchemy Core."""

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

# Shared by both bookable tables
STATUS_CHECK = (
    "status IN ('scheduled', 'confirmed', 'rescheduled', 'cancelled', 'completed', 'no_show')"
)

metadata = MetaData()

appointments = Table(
    "appointments",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "patient_id",
        Integer,
        ForeignKey("patients.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("appointment_type", String(50), nullable=False),
    # Wall-clock date and time in the clinic's timezone
    Column("appointment_date", Date, nullable=False),
    Column("appointment_time", Time, nullable=False),
    Column("urologist_id", Integer, nullable=True),
    Column("urologist_name", String(100), nullable=True),
    Column("surgery_type", String(200), nullable=True),
    Column("status", String(50), nullable=False, server_default="scheduled"),
    Column("notes", Text, nullable=True),
    Column("created_by", Integer, nullable=True),
    Column("created_at", DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP")),
    Column("updated_at", DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP")),
    CheckConstraint(STATUS_CHECK, name="appointments_status_check"),
    Index("idx_appointments_patient_id", "patient_id"),
    Index("idx_appointments_date", "appointment_date"),
    Index("idx_appointments_status", "status"),
)
