"""Database models."""

from sqlalchemy import MetaData

from noshow.models.appointments import appointments
from noshow.models.investigation_bookings import investigation_bookings
from noshow.models.investigation_results import investigation_results
from noshow.models.patient_notes import patient_notes
from noshow.models.patients import patients

# Each table module owns its MetaData; this one holds copies of all of them so
# foreign keys resolve for create_all and Alembic.
metadata = MetaData()
for _table in (patients, patient_notes, investigation_results, appointments, investigation_bookings):
    _table.to_metadata(metadata)

__all__ = [
    "appointments",
    "investigation_bookings",
    "investigation_results",
    "metadata",
    "patient_notes",
    "patients",
]
