"""Prometheus metrics for the no-show job."""

from prometheus_client import Counter, Gauge

NOSHOW_RUNS = Counter(
    "noshow_runs_total",
    "No-show reconciliation runs by outcome",
    ["outcome"],
)

NOSHOW_EVENTS_CHECKED = Counter(
    "noshow_events_checked_total",
    "Bookings inspected by the no-show job",
    ["variant"],
)

NOSHOW_EVENTS_MARKED = Counter(
    "noshow_events_marked_total",
    "Bookings transitioned to no_show",
    ["variant"],
)

NOSHOW_ACTIVITY_CHECK_FAILURES = Counter(
    "noshow_activity_check_failures_total",
    "Activity checks that failed and fell back to assuming attendance",
)

NOSHOW_LAST_SUCCESS = Gauge(
    "noshow_last_success_timestamp_seconds",
    "Unix time of the last successful no-show run",
)
