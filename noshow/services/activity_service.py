"""Detection of patient activity after a scheduled booking."""

from datetime import datetime

import structlog
from sqlalchemy import Column, ColumnElement, Table, and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from noshow.core.metrics import NOSHOW_ACTIVITY_CHECK_FAILURES
from noshow.models.appointments import appointments
from noshow.models.investigation_results import investigation_results
from noshow.models.patient_notes import patient_notes
from noshow.models.patients import patients
from noshow.schemas.no_show import NO_SHOW_NOTE_TYPE, SYSTEM_AUTHOR_ROLE, ActivityOutcome

logger = structlog.get_logger(__name__)

# Notes the job itself writes record an absence, not a visit
_CLINICIAN_NOTE = or_(
    patient_notes.c.note_type != NO_SHOW_NOTE_TYPE,
    patient_notes.c.author_role.is_(None),
    patient_notes.c.author_role != SYSTEM_AUTHOR_ROLE,
)

# (signal name, table, patient key column, timestamp column, extra filter),
# checked in order
ACTIVITY_SIGNALS: tuple[
    tuple[str, Table, Column, Column, ColumnElement[bool] | None], ...
] = (
    ("patient_record_updated", patients, patients.c.id, patients.c.updated_at, None),
    (
        "clinical_note_added",
        patient_notes,
        patient_notes.c.patient_id,
        patient_notes.c.created_at,
        _CLINICIAN_NOTE,
    ),
    (
        "investigation_result_added",
        investigation_results,
        investigation_results.c.patient_id,
        investigation_results.c.created_at,
        None,
    ),
    (
        "appointment_booked",
        appointments,
        appointments.c.patient_id,
        appointments.c.created_at,
        None,
    ),
)


class ActivityDetector:
    """
    Decide whether a patient shows signs of having attended a booking.

    If a patient was seen, something in their record changes afterwards: the
    profile is edited, a clinician writes a note, a result is filed or a follow-up is
    booked. Each source is checked in turn and the first hit wins.

    Any error while probing is treated as attendance (``ASSUMED_ATTENDED``).
    Wrongly marking a seen patient as a no-show is worse than missing a
    genuine no-show.
    """

    def __init__(self, db: AsyncSession):
        """Initialize detector with database session."""
        self.db = db

    async def _count_since(
        self,
        table: Table,
        key_column: Column,
        timestamp_column: Column,
        patient_id: int,
        since: datetime,
        extra: ColumnElement[bool] | None = None,
    ) -> int:
        conditions = [key_column == patient_id, timestamp_column > since]
        if extra is not None:
            conditions.append(extra)
        stmt = select(func.count()).select_from(table).where(and_(*conditions))
        result = await self.db.execute(stmt)
        return result.scalar() or 0

    async def check(self, patient_id: int, since: datetime) -> ActivityOutcome:
        """
        Look for any record change for the patient strictly after ``since``.

        Args:
            patient_id: Patient to inspect
            since: Scheduled date and time of the booking

        Returns:
            The activity outcome for this patient
        """
        try:
            for signal, table, key_column, timestamp_column, extra in ACTIVITY_SIGNALS:
                count = await self._count_since(
                    table, key_column, timestamp_column, patient_id, since, extra
                )
                if count > 0:
                    logger.debug(
                        "patient_activity_detected",
                        patient_id=patient_id,
                        signal=signal,
                        since=since.isoformat(),
                    )
                    return ActivityOutcome.ACTIVITY_DETECTED
        except Exception as e:
            NOSHOW_ACTIVITY_CHECK_FAILURES.inc()
            logger.warning(
                "patient_activity_check_failed",
                patient_id=patient_id,
                since=since.isoformat(),
                error=str(e),
                policy="assume_attended",
            )
            await self._reset_session()
            return ActivityOutcome.ASSUMED_ATTENDED

        return ActivityOutcome.NO_ACTIVITY

    async def _reset_session(self) -> None:
        # Nothing has been written yet; clear a possibly aborted transaction
        try:
            await self.db.rollback()
        except Exception as e:
            logger.warning("patient_activity_rollback_failed", error=str(e))

    async def has_patient_activity(self, patient_id: int, since: datetime) -> bool:
        """Return True unless the patient is confirmed to have no activity."""
        return await self.check(patient_id, since) is not ActivityOutcome.NO_ACTIVITY
