"""Operator endpoints for the no-show reconciliation job."""

from fastapi import APIRouter, Depends, status

from noshow.core.exceptions import ReconciliationError, RunInProgressException
from noshow.dependencies import SchedulerDep, require_admin_secret
from noshow.schemas.no_show import NoShowRunSummary, SchedulerStatusResponse

router = APIRouter(prefix="/no-show")


@router.get(
    "/status",
    response_model=SchedulerStatusResponse,
    status_code=status.HTTP_200_OK,
    summary="No-show job status",
)
async def get_status(scheduler: SchedulerDep) -> SchedulerStatusResponse:
    """
    Report whether the job is scheduled or running, when it runs next and
    what the last successful run did.
    """
    return scheduler.status()


@router.post(
    "/run",
    response_model=NoShowRunSummary,
    status_code=status.HTTP_200_OK,
    summary="Run the no-show job now",
    dependencies=[Depends(require_admin_secret)],
)
async def run_now(scheduler: SchedulerDep) -> NoShowRunSummary:
    """
    Run one reconciliation immediately and return its summary.

    Requires the X-Admin-Secret header.

    Raises:
        RunInProgressException: If a run is already executing
        ReconciliationError: If the run failed or timed out
    """
    if scheduler.is_running:
        raise RunInProgressException()

    summary = await scheduler.run_once(trigger="manual")
    if summary is None:
        if scheduler.last_outcome == "skipped":
            raise RunInProgressException("A no-show run is in progress on another instance")
        raise ReconciliationError(scheduler.last_error or "No-show run failed")
    return summary
