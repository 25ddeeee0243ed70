"""Schemas for the no-show reconciliation job."""

from datetime import date, datetime, time
from enum import Enum

from pydantic import BaseModel, Field


class AppointmentStatus(str, Enum):
    """Status shared by urologist appointments and investigation bookings."""

    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    RESCHEDULED = "rescheduled"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    NO_SHOW = "no_show"


# Only these statuses are eligible for an automatic no-show mark
PENDING_STATUSES = (AppointmentStatus.SCHEDULED.value, AppointmentStatus.CONFIRMED.value)

# Timeline entries written by the job when it marks a booking
NO_SHOW_NOTE_TYPE = "no_show"
SYSTEM_AUTHOR_NAME = "System"
SYSTEM_AUTHOR_ROLE = "Automated"


class EventVariant(str, Enum):
    """Kinds of bookable events the job reconciles."""

    UROLOGIST_APPOINTMENT = "urologist_appointment"
    INVESTIGATION_BOOKING = "investigation_booking"


class ActivityOutcome(str, Enum):
    """Result of looking for patient activity after a booking."""

    ACTIVITY_DETECTED = "activity_detected"
    NO_ACTIVITY = "no_activity"
    # A check failed; the patient is presumed to have attended
    ASSUMED_ATTENDED = "assumed_attended"


class CandidateEvent(BaseModel):
    """A pending booking whose scheduled time is past the cutoff."""

    variant: EventVariant
    id: int
    patient_id: int
    scheduled_date: date
    scheduled_time: time
    counterparty_name: str | None = None

    @property
    def scheduled_at(self) -> datetime:
        """Combined wall-clock date and time of the booking."""
        return datetime.combine(self.scheduled_date, self.scheduled_time)


class VariantSummary(BaseModel):
    """Counts for one event variant within a run."""

    checked: int = 0
    attended: int = 0
    assumed_attended: int = 0
    marked_no_show: int = 0


class NoShowRunSummary(BaseModel):
    """Outcome of a single reconciliation run."""

    run_id: str
    trigger: str
    started_at: datetime
    finished_at: datetime | None = None
    cutoff: datetime
    appointments: VariantSummary = Field(default_factory=VariantSummary)
    investigations: VariantSummary = Field(default_factory=VariantSummary)

    def for_variant(self, variant: EventVariant) -> VariantSummary:
        if variant is EventVariant.UROLOGIST_APPOINTMENT:
            return self.appointments
        return self.investigations

    @property
    def total_checked(self) -> int:
        return self.appointments.checked + self.investigations.checked

    @property
    def total_attended(self) -> int:
        """Candidates presumed attended, including failed checks."""
        return (
            self.appointments.attended
            + self.appointments.assumed_attended
            + self.investigations.attended
            + self.investigations.assumed_attended
        )

    @property
    def total_marked(self) -> int:
        return self.appointments.marked_no_show + self.investigations.marked_no_show


class NoShowPreviewItem(BaseModel):
    """A candidate and the activity decision taken for it, without writing."""

    event: CandidateEvent
    outcome: ActivityOutcome


class SchedulerStatusResponse(BaseModel):
    """State of the periodic no-show job."""

    enabled: bool
    running: bool
    next_run_at: datetime | None = None
    lookback_hours: int
    interval_hours: int
    last_run: NoShowRunSummary | None = None
    last_error: str | None = None
