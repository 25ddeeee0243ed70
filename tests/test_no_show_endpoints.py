"""Tests for the health and no-show operator endpoints."""

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from noshow.api.v1.endpoints import health
from noshow.config import settings
from noshow.models.appointments import appointments

ADMIN_HEADERS = {"X-Admin-Secret": settings.admin_secret}


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    """Test basic health check."""
    response = await client.get("/api/v1/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["version"] == settings.app_version


@pytest.mark.asyncio
async def test_ping(client: AsyncClient):
    response = await client.get("/api/v1/ping")

    assert response.status_code == 200
    assert response.json() == {"message": "pong"}


@pytest.mark.asyncio
async def test_detailed_health_check(client: AsyncClient, monkeypatch):
    """Test detailed health check with the scheduler not started."""

    async def healthy() -> bool:
        return True

    async def unhealthy() -> bool:
        return False

    monkeypatch.setattr(health, "check_database_connection", healthy)
    monkeypatch.setattr(health, "check_redis_connection", unhealthy)

    response = await client.get("/api/v1/health/detailed")

    assert response.status_code == 200
    data = response.json()
    assert data["database"] == "healthy"
    assert data["redis"] == "unhealthy"
    assert data["scheduler"] == "stopped"
    # Redis is only required for the distributed lock
    assert data["status"] == "healthy"


@pytest.mark.asyncio
async def test_detailed_health_check_database_down(client: AsyncClient, monkeypatch):
    async def unhealthy() -> bool:
        return False

    monkeypatch.setattr(health, "check_database_connection", unhealthy)
    monkeypatch.setattr(health, "check_redis_connection", unhealthy)

    response = await client.get("/api/v1/health/detailed")

    assert response.status_code == 200
    assert response.json()["status"] == "degraded"


@pytest.mark.asyncio
async def test_no_show_status(client: AsyncClient):
    """Test status of a scheduler that has not run yet."""
    response = await client.get("/api/v1/no-show/status")

    assert response.status_code == 200
    data = response.json()
    assert data["enabled"] is False
    assert data["running"] is False
    assert data["last_run"] is None
    assert data["last_error"] is None
    assert data["lookback_hours"] == settings.noshow_lookback_hours


@pytest.mark.asyncio
async def test_run_requires_admin_secret(client: AsyncClient):
    response = await client.post("/api/v1/no-show/run")

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_run_rejects_wrong_admin_secret(client: AsyncClient):
    response = await client.post("/api/v1/no-show/run", headers={"X-Admin-Secret": "wrong"})

    assert response.status_code == 401
    assert response.json()["error"] == "UnauthorizedException"


@pytest.mark.asyncio
async def test_manual_run(
    client: AsyncClient, db_session, make_patient, make_appointment
):
    """Test a manual run marks the missed appointment and returns the summary."""
    patient_id = await make_patient()
    appointment_id = await make_appointment(patient_id=patient_id)

    response = await client.post("/api/v1/no-show/run", headers=ADMIN_HEADERS)

    assert response.status_code == 200
    data = response.json()
    assert data["trigger"] == "manual"
    assert data["appointments"]["checked"] == 1
    assert data["appointments"]["marked_no_show"] == 1
    assert data["investigations"]["checked"] == 0

    result = await db_session.execute(
        select(appointments.c.status).where(appointments.c.id == appointment_id)
    )
    assert result.scalar_one() == "no_show"

    status_response = await client.get("/api/v1/no-show/status")
    assert status_response.json()["last_run"]["run_id"] == data["run_id"]


@pytest.mark.asyncio
async def test_manual_run_while_running(client: AsyncClient, scheduler):
    async with scheduler._guard:
        response = await client.post("/api/v1/no-show/run", headers=ADMIN_HEADERS)

    assert response.status_code == 409
    assert response.json()["error"] == "RunInProgressException"


@pytest.mark.asyncio
async def test_manual_run_failure(client: AsyncClient, scheduler):
    def broken_service(db):
        raise RuntimeError("database unavailable")

    scheduler.service_factory = broken_service

    response = await client.post("/api/v1/no-show/run", headers=ADMIN_HEADERS)

    assert response.status_code == 500
    data = response.json()
    assert data["error"] == "ReconciliationError"
    assert data["message"] == "database unavailable"

    status_response = await client.get("/api/v1/no-show/status")
    assert status_response.json()["last_error"] == "database unavailable"


@pytest.mark.asyncio
async def test_root(client: AsyncClient):
    response = await client.get("/")

    assert response.status_code == 200
    assert response.json()["version"] == settings.app_version


@pytest.mark.asyncio
async def test_request_id_is_echoed(client: AsyncClient):
    response = await client.get("/api/v1/ping", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"
    assert "X-Process-Time" in response.headers
