"""Patient table model using SQLAlchemy Core."""

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Index,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    text,
)

metadata = MetaData()

# Any edit to a patient record bumps updated_at, which the no-show job reads
# as a sign that the patient was seen.
patients = Table(
    "patients",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("upi", String(20), nullable=False, unique=True),
    Column("first_name", String(100), nullable=False),
    Column("last_name", String(100), nullable=False),
    Column("date_of_birth", Date, nullable=True),
    Column("phone", String(20), nullable=True),
    Column("initial_psa", Numeric(5, 2), nullable=True),
    Column("assigned_urologist", String(255), nullable=True),
    Column("status", String(20), nullable=False, server_default="Active"),
    Column("created_at", DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP")),
    Column("updated_at", DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP")),
    CheckConstraint(
        "status IN ('Active', 'Inactive', 'Discharged')",
        name="patients_status_check",
    ),
    Index("idx_patients_updated_at", "updated_at"),
)
