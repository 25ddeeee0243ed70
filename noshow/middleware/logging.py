"""Structured logging setup and request logging middleware."""

import logging
import sys
import time
from collections.abc import Callable
from uuid import uuid4

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from structlog.types import EventDict, WrappedLogger

from noshow.config import settings

# Polled by load balancers and Prometheus; logged at debug only
QUIET_PATHS = frozenset(
    {
        "/metrics",
        f"{settings.api_v1_prefix}/health",
        f"{settings.api_v1_prefix}/ping",
    }
)


def _add_service_context(_: WrappedLogger, __: str, event_dict: EventDict) -> EventDict:
    event_dict.setdefault("service", settings.app_name)
    event_dict.setdefault("environment", settings.environment)
    return event_dict


def configure_logging() -> None:
    """
    Configure structlog and the standard library root logger.

    Every event carries the service name and environment, plus whatever is
    bound in contextvars (``request_id`` for HTTP requests, ``run_id`` and
    ``trigger`` while a no-show run executes).
    """
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        _add_service_context,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]
    if settings.log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    # Requests are logged by LoggingMiddleware; SQL only when DEBUG is on
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    if not settings.debug:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log each HTTP request with a request id bound for its duration."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        logger = structlog.get_logger("noshow.http")
        request_id = request.headers.get("X-Request-ID") or uuid4().hex
        path = request.url.path
        log = logger.debug if path in QUIET_PATHS else logger.info

        with structlog.contextvars.bound_contextvars(request_id=request_id):
            started = time.perf_counter()
            log("request_started", method=request.method, path=path)

            try:
                response = await call_next(request)
            except Exception as e:
                logger.error(
                    "request_failed",
                    method=request.method,
                    path=path,
                    error=str(e),
                    duration=round(time.perf_counter() - started, 4),
                )
                raise

            duration = time.perf_counter() - started
            log(
                "request_completed",
                method=request.method,
                path=path,
                status_code=response.status_code,
                duration=round(duration, 4),
            )

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = f"{duration:.4f}"
        return response
