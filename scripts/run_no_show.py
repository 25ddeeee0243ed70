#!/usr/bin/env python3
"""
Run the no-show reconciliation job once.

Usage:
    python scripts/run_no_show.py
    python scripts/run_no_show.py --lookback-hours 48
    python scripts/run_no_show.py --dry-run

Environment Variables:
    DATABASE_URL: Database to reconcile
"""

import argparse
import asyncio
import sys
from datetime import timedelta

from noshow.config import settings
from noshow.core.exceptions import ReconciliationError
from noshow.database import AsyncSessionLocal, engine
from noshow.middleware.logging import configure_logging
from noshow.schemas.no_show import ActivityOutcome
from noshow.services.no_show_service import NoShowService


async def run(lookback_hours: int, dry_run: bool) -> int:
    """Run one reconciliation, or only its read phase when dry_run is set."""
    try:
        async with AsyncSessionLocal() as session:
            service = NoShowService(session, lookback=timedelta(hours=lookback_hours))

            if dry_run:
                items = await service.preview()
                for item in items:
                    marker = "→" if item.outcome is ActivityOutcome.NO_ACTIVITY else "✓"
                    event = item.event
                    print(
                        f"  {marker} {event.variant.value} #{event.id} patient {event.patient_id} "
                        f"at {event.scheduled_at:%Y-%m-%d %H:%M}: {item.outcome.value}"
                    )
                would_mark = sum(1 for i in items if i.outcome is ActivityOutcome.NO_ACTIVITY)
                print(f"Checked {len(items)} bookings, {would_mark} would be marked as no-show")
                return 0

            summary = await service.reconcile(trigger="cli")
    except ReconciliationError as e:
        print(f"✗ {e.message}", file=sys.stderr)
        return 1
    finally:
        await engine.dispose()

    print(f"✓ Checked {summary.total_checked} past bookings")
    print(f"  - Presumed attended: {summary.total_attended}")
    print(f"  - Marked as no-show: {summary.total_marked}")
    print(f"    • Urologist appointments: {summary.appointments.marked_no_show}")
    print(f"    • Investigation bookings: {summary.investigations.marked_no_show}")
    return 0


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Mark past unattended bookings as no-show")
    parser.add_argument(
        "--lookback-hours",
        type=int,
        default=settings.noshow_lookback_hours,
        help="Only bookings older than this many hours are eligible (default: %(default)s)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report what would be marked without writing anything",
    )
    args = parser.parse_args()

    if args.lookback_hours < 1:
        parser.error("--lookback-hours must be at least 1")

    configure_logging()
    sys.exit(asyncio.run(run(args.lookback_hours, args.dry_run)))


if __name__ == "__main__":
    main()
