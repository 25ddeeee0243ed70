"""FastAPI dependencies."""

from typing import Annotated

from fastapi import Depends, Header, Request

from noshow.config import settings
from noshow.core.exceptions import NotFoundException, UnauthorizedException
from noshow.services.scheduler import NoShowScheduler


def get_scheduler(request: Request) -> NoShowScheduler:
    """
    Get the no-show scheduler owned by the application lifespan.

    Raises:
        NotFoundException: If the application was started without one
    """
    scheduler = getattr(request.app.state, "no_show_scheduler", None)
    if scheduler is None:
        raise NotFoundException("No-show scheduler is not configured")
    return scheduler


async def require_admin_secret(
    x_admin_secret: Annotated[str, Header(description="Admin secret key")],
) -> None:
    """Reject operator requests without the configured admin secret."""
    if x_admin_secret != settings.admin_secret:
        raise UnauthorizedException("Invalid admin secret")


SchedulerDep = Annotated[NoShowScheduler, Depends(get_scheduler)]
