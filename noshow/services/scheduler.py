"""Periodic trigger for the no-show reconciliation job."""

import asyncio
import contextlib
import time
from collections.abc import Callable
from datetime import datetime, timedelta
from uuid import uuid4

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from noshow.config import Settings
from noshow.core.clock import Clock, clinic_now, seconds_until
from noshow.core.metrics import NOSHOW_LAST_SUCCESS, NOSHOW_RUNS
from noshow.core.redis_client import DistributedRunLock
from noshow.schemas.no_show import NoShowRunSummary, SchedulerStatusResponse
from noshow.services.no_show_service import NoShowService

logger = structlog.get_logger(__name__)

RUN_LOCK_NAME = "noshow:reconciliation:lock"

ServiceFactory = Callable[[AsyncSession], NoShowService]


class NoShowScheduler:
    """
    Runs the no-show job hourly and once at startup.

    Owned by the application lifespan: ``start()`` at boot, ``stop()`` at
    shutdown. At most one run executes per process; with a
    ``DistributedRunLock`` at most one runs across instances. Errors and
    timeouts are logged and never escape, so one bad run does not stop the
    schedule.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        settings: Settings,
        clock: Clock = clinic_now,
        run_lock: DistributedRunLock | None = None,
        service_factory: ServiceFactory | None = None,
    ):
        self.session_factory = session_factory
        self.settings = settings
        self.clock = clock
        self.run_lock = run_lock
        self.lookback = timedelta(hours=settings.noshow_lookback_hours)
        self.service_factory = service_factory or self._default_service
        self.last_run: NoShowRunSummary | None = None
        self.last_error: str | None = None
        self.last_outcome: str | None = None
        self._guard = asyncio.Lock()
        self._task: asyncio.Task | None = None
        self._next_run_at: datetime | None = None

    def _default_service(self, db: AsyncSession) -> NoShowService:
        return NoShowService(db, lookback=self.lookback, clock=self.clock)

    def _record_outcome(self, outcome: str) -> None:
        self.last_outcome = outcome
        NOSHOW_RUNS.labels(outcome=outcome).inc()

    @property
    def is_running(self) -> bool:
        """True while a run is executing in this process."""
        return self._guard.locked()

    @property
    def is_started(self) -> bool:
        return self._task is not None and not self._task.done()

    def next_run_at(self, now: datetime) -> datetime:
        """
        Next tick strictly after ``now``.

        Ticks fall on ``noshow_run_minute`` of every hour divisible by
        ``noshow_interval_hours``.
        """
        interval = self.settings.noshow_interval_hours
        tick = now.replace(minute=self.settings.noshow_run_minute, second=0, microsecond=0)
        while tick <= now or tick.hour % interval:
            tick += timedelta(hours=1)
        return tick

    async def start(self) -> None:
        """Start the periodic loop. Calling it twice has no effect."""
        if self.is_started:
            return
        self._task = asyncio.create_task(self._run_forever(), name="noshow-scheduler")
        logger.info(
            "no_show_scheduler_started",
            interval_hours=self.settings.noshow_interval_hours,
            run_minute=self.settings.noshow_run_minute,
            lookback_hours=self.settings.noshow_lookback_hours,
            run_on_startup=self.settings.noshow_run_on_startup,
        )

    async def stop(self) -> None:
        """Cancel the periodic loop and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        self._next_run_at = None
        logger.info("no_show_scheduler_stopped")

    async def _run_forever(self) -> None:
        if self.settings.noshow_run_on_startup:
            await self.run_once(trigger="startup")

        while True:
            now = self.clock()
            self._next_run_at = self.next_run_at(now)
            delay = seconds_until(now, self._next_run_at, self.settings.clinic_timezone)
            logger.debug("no_show_next_run", next_run_at=self._next_run_at.isoformat())
            await asyncio.sleep(delay)
            await self.run_once(trigger="schedule")

    async def run_once(self, trigger: str = "manual") -> NoShowRunSummary | None:
        """
        Execute one reconciliation run.

        Returns:
            The run summary, or None if the run was skipped, failed or timed out
        """
        if self._guard.locked():
            self._record_outcome("skipped")
            logger.warning("no_show_run_skipped", trigger=trigger, reason="run_in_progress")
            return None

        async with self._guard:
            # redis-py is blocking; keep its socket timeouts off the event loop
            if self.run_lock is not None and not await asyncio.to_thread(self.run_lock.acquire):
                self._record_outcome("skipped")
                logger.info("no_show_run_skipped", trigger=trigger, reason="locked_elsewhere")
                return None

            run_id = uuid4().hex
            structlog.contextvars.bind_contextvars(run_id=run_id, trigger=trigger)
            try:
                summary = await asyncio.wait_for(
                    self._reconcile(trigger, run_id),
                    timeout=self.settings.noshow_run_timeout_seconds,
                )
            except asyncio.TimeoutError:
                self._record_outcome("timeout")
                self.last_error = (
                    f"Run timed out after {self.settings.noshow_run_timeout_seconds}s"
                )
                logger.error(
                    "no_show_run_timed_out",
                    timeout_seconds=self.settings.noshow_run_timeout_seconds,
                )
                return None
            except Exception as e:
                self._record_outcome("failed")
                self.last_error = str(e)
                logger.error("no_show_run_failed", error=str(e), exc_info=True)
                return None
            finally:
                structlog.contextvars.unbind_contextvars("run_id", "trigger")
                if self.run_lock is not None:
                    await asyncio.to_thread(self.run_lock.release)

            self._record_outcome("success")
            NOSHOW_LAST_SUCCESS.set(time.time())
            self.last_run = summary
            self.last_error = None
            return summary

    async def _reconcile(self, trigger: str, run_id: str) -> NoShowRunSummary:
        # A fresh session per run; cancellation on timeout closes it
        async with self.session_factory() as session:
            service = self.service_factory(session)
            return await service.reconcile(trigger=trigger, run_id=run_id)

    def status(self) -> SchedulerStatusResponse:
        """Snapshot of the scheduler for the status endpoint."""
        return SchedulerStatusResponse(
            enabled=self.is_started,
            running=self.is_running,
            next_run_at=self._next_run_at,
            lookback_hours=self.settings.noshow_lookback_hours,
            interval_hours=self.settings.noshow_interval_hours,
            last_run=self.last_run,
            last_error=self.last_error,
        )
