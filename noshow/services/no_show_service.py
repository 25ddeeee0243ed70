"""No-show reconciliation for past urologist appointments and investigation bookings."""

from datetime import datetime, timedelta
from typing import NamedTuple
from uuid import uuid4

import structlog
from sqlalchemy import Column, Table, and_, insert, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from noshow.config import settings
from noshow.core.clock import Clock, clinic_now
from noshow.core.exceptions import ReconciliationError
from noshow.core.metrics import NOSHOW_EVENTS_CHECKED, NOSHOW_EVENTS_MARKED
from noshow.models.appointments import appointments
from noshow.models.investigation_bookings import investigation_bookings
from noshow.models.patient_notes import patient_notes
from noshow.schemas.no_show import (
    NO_SHOW_NOTE_TYPE,
    PENDING_STATUSES,
    SYSTEM_AUTHOR_NAME,
    SYSTEM_AUTHOR_ROLE,
    ActivityOutcome,
    AppointmentStatus,
    CandidateEvent,
    EventVariant,
    NoShowPreviewItem,
    NoShowRunSummary,
)
from noshow.services.activity_service import ActivityDetector

logger = structlog.get_logger(__name__)


class _BookingTable(NamedTuple):
    table: Table
    date_column: Column
    time_column: Column
    counterparty_column: Column
    label: str


_BOOKING_TABLES: dict[EventVariant, _BookingTable] = {
    EventVariant.UROLOGIST_APPOINTMENT: _BookingTable(
        appointments,
        appointments.c.appointment_date,
        appointments.c.appointment_time,
        appointments.c.urologist_name,
        "Appointment",
    ),
    EventVariant.INVESTIGATION_BOOKING: _BookingTable(
        investigation_bookings,
        investigation_bookings.c.scheduled_date,
        investigation_bookings.c.scheduled_time,
        investigation_bookings.c.investigation_name,
        "Investigation",
    ),
}


def timeline_message(candidate: CandidateEvent) -> str:
    """Build the timeline note recorded when a booking is marked as a no-show."""
    booking = _BOOKING_TABLES[candidate.variant]
    message = (
        f"{booking.label} automatically marked as No Show - no patient activity detected "
        f"(scheduled for {candidate.scheduled_date.isoformat()} "
        f"at {candidate.scheduled_time.strftime('%H:%M')}"
    )
    if candidate.counterparty_name:
        message += f" with {candidate.counterparty_name}"
    return message + ")"


class NoShowService:
    """
    Service that marks past, unattended bookings as no-shows.

    A run has two phases. The read phase selects pending bookings older than
    the lookback window and asks the ``ActivityDetector`` about each patient.
    The write phase then updates every booking without activity to
    ``no_show`` and adds a timeline note for it, committing once at the end.
    A failure anywhere in the write phase rolls back the whole run.
    """

    def __init__(
        self,
        db: AsyncSession,
        lookback: timedelta | None = None,
        clock: Clock = clinic_now,
        detector: ActivityDetector | None = None,
    ):
        """Initialize service with database session."""
        self.db = db
        self.lookback = lookback or timedelta(hours=settings.noshow_lookback_hours)
        self.clock = clock
        self.detector = detector or ActivityDetector(db)

    def compute_cutoff(self, now: datetime) -> datetime:
        """Bookings strictly before this instant are eligible."""
        return now - self.lookback

    async def find_candidates(
        self,
        variant: EventVariant,
        cutoff: datetime,
    ) -> list[CandidateEvent]:
        """
        Select pending bookings of one variant scheduled before the cutoff.

        Date and time are compared together so a booking late on the cutoff
        date is not picked up early and one just before midnight is not missed.

        Args:
            variant: Which booking table to read
            cutoff: Wall-clock cutoff instant

        Returns:
            Candidate bookings ordered by scheduled date and time
        """
        booking = _BOOKING_TABLES[variant]
        table = booking.table
        cutoff_date, cutoff_time = cutoff.date(), cutoff.time()

        stmt = (
            select(
                table.c.id,
                table.c.patient_id,
                booking.date_column.label("scheduled_date"),
                booking.time_column.label("scheduled_time"),
                booking.counterparty_column.label("counterparty_name"),
            )
            .where(
                and_(
                    table.c.status.in_(PENDING_STATUSES),
                    or_(
                        booking.date_column < cutoff_date,
                        and_(
                            booking.date_column == cutoff_date,
                            booking.time_column < cutoff_time,
                        ),
                    ),
                )
            )
            .order_by(booking.date_column, booking.time_column, table.c.id)
        )

        result = await self.db.execute(stmt)
        return [
            CandidateEvent(variant=variant, **dict(row._mapping)) for row in result.fetchall()
        ]

    async def _evaluate(self, cutoff: datetime) -> list[NoShowPreviewItem]:
        items: list[NoShowPreviewItem] = []
        for variant in EventVariant:
            for candidate in await self.find_candidates(variant, cutoff):
                outcome = await self.detector.check(candidate.patient_id, candidate.scheduled_at)
                items.append(NoShowPreviewItem(event=candidate, outcome=outcome))
        return items

    async def preview(self) -> list[NoShowPreviewItem]:
        """Run the read phase only and report the decision for every candidate."""
        items = await self._evaluate(self.compute_cutoff(self.clock()))
        await self.db.rollback()
        return items

    async def _mark_no_show(self, candidate: CandidateEvent, now: datetime) -> bool:
        table = _BOOKING_TABLES[candidate.variant].table
        stmt = (
            update(table)
            .where(
                and_(
                    table.c.id == candidate.id,
                    table.c.status.in_(PENDING_STATUSES),
                )
            )
            .values(status=AppointmentStatus.NO_SHOW.value, updated_at=now)
        )
        result = await self.db.execute(stmt)
        # Zero rows means another writer changed the status since the read phase
        return result.rowcount == 1

    async def _record_timeline_entry(self, candidate: CandidateEvent, now: datetime) -> None:
        stmt = insert(patient_notes).values(
            patient_id=candidate.patient_id,
            note_type=NO_SHOW_NOTE_TYPE,
            note_content=timeline_message(candidate),
            author_name=SYSTEM_AUTHOR_NAME,
            author_role=SYSTEM_AUTHOR_ROLE,
            created_at=now,
            updated_at=now,
        )
        await self.db.execute(stmt)

    async def reconcile(self, trigger: str = "manual", run_id: str | None = None) -> NoShowRunSummary:
        """
        Mark every past, unattended pending booking as a no-show.

        Args:
            trigger: What started the run (startup, schedule, manual, cli)
            run_id: Identifier for log correlation; generated if omitted

        Returns:
            Per-variant counts for the run

        Raises:
            ReconciliationError: If the write phase failed and was rolled back
        """
        now = self.clock()
        cutoff = self.compute_cutoff(now)
        summary = NoShowRunSummary(
            run_id=run_id or uuid4().hex,
            trigger=trigger,
            started_at=now,
            cutoff=cutoff,
        )
        logger.info("no_show_run_started", cutoff=cutoff.isoformat(), trigger=trigger)

        # Read phase
        eligible: list[CandidateEvent] = []
        for item in await self._evaluate(cutoff):
            counts = summary.for_variant(item.event.variant)
            counts.checked += 1
            if item.outcome is ActivityOutcome.ACTIVITY_DETECTED:
                counts.attended += 1
            elif item.outcome is ActivityOutcome.ASSUMED_ATTENDED:
                counts.assumed_attended += 1
            else:
                eligible.append(item.event)

        # Write phase
        try:
            for candidate in eligible:
                if not await self._mark_no_show(candidate, now):
                    continue
                await self._record_timeline_entry(candidate, now)
                summary.for_variant(candidate.variant).marked_no_show += 1
                logger.info(
                    "no_show_marked",
                    variant=candidate.variant.value,
                    event_id=candidate.id,
                    patient_id=candidate.patient_id,
                    scheduled_at=candidate.scheduled_at.isoformat(),
                )
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(
                "no_show_write_phase_failed",
                eligible=len(eligible),
                error=str(e),
                exc_info=True,
            )
            raise ReconciliationError(f"No-show run rolled back: {e}") from e

        for variant in EventVariant:
            counts = summary.for_variant(variant)
            NOSHOW_EVENTS_CHECKED.labels(variant=variant.value).inc(counts.checked)
            NOSHOW_EVENTS_MARKED.labels(variant=variant.value).inc(counts.marked_no_show)

        summary.finished_at = self.clock()
        if summary.total_checked:
            logger.info(
                "no_show_run_completed",
                checked=summary.total_checked,
                attended=summary.total_attended,
                marked_no_show=summary.total_marked,
                appointments_marked=summary.appointments.marked_no_show,
                investigations_marked=summary.investigations.marked_no_show,
                assumed_attended=(
                    summary.appointments.assumed_attended
                    + summary.investigations.assumed_attended
                ),
            )
        else:
            logger.info("no_show_run_completed", checked=0, note="no past bookings to check")

        return summary
