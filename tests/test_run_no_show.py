"""Tests for the one-shot no-show command line runner."""

from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import select

from noshow.core.exceptions import ReconciliationError
from noshow.models.appointments import appointments
from scripts import run_no_show


@pytest.fixture
def cli_database(monkeypatch, session_factory):
    """Point the runner at the test database and keep it from disposing the engine."""
    engine = MagicMock()
    engine.dispose = AsyncMock()
    monkeypatch.setattr(run_no_show, "AsyncSessionLocal", session_factory)
    monkeypatch.setattr(run_no_show, "engine", engine)
    return engine


@pytest.mark.asyncio
async def test_dry_run_reports_without_writing(
    db_session, cli_database, capsys, make_patient, make_appointment, make_note
):
    absent = await make_patient()
    present = await make_patient()
    absent_appointment = await make_appointment(patient_id=absent)
    await make_appointment(patient_id=present)
    await make_note(patient_id=present, created_at=datetime(2024, 1, 1, 9, 30))

    exit_code = await run_no_show.run(lookback_hours=24, dry_run=True)

    assert exit_code == 0
    out = capsys.readouterr().out
    assert f"→ urologist_appointment #{absent_appointment} patient {absent}" in out
    assert "at 2024-01-01 09:00: no_activity" in out
    assert "activity_detected" in out
    assert "Checked 2 bookings, 1 would be marked as no-show" in out
    cli_database.dispose.assert_awaited_once()

    result = await db_session.execute(
        select(appointments.c.status).where(appointments.c.id == absent_appointment)
    )
    assert result.scalar_one() == "scheduled"


@pytest.mark.asyncio
async def test_run_marks_and_prints_summary(
    db_session, cli_database, capsys, make_patient, make_appointment
):
    patient_id = await make_patient()
    appointment_id = await make_appointment(patient_id=patient_id)

    exit_code = await run_no_show.run(lookback_hours=24, dry_run=False)

    assert exit_code == 0
    out = capsys.readouterr().out
    assert "✓ Checked 1 past bookings" in out
    assert "Marked as no-show: 1" in out
    assert "Urologist appointments: 1" in out

    result = await db_session.execute(
        select(appointments.c.status).where(appointments.c.id == appointment_id)
    )
    assert result.scalar_one() == "no_show"


@pytest.mark.asyncio
async def test_failed_run_exits_non_zero(cli_database, capsys, monkeypatch):
    monkeypatch.setattr(
        run_no_show.NoShowService,
        "reconcile",
        AsyncMock(side_effect=ReconciliationError("No-show run rolled back: disk full")),
    )

    exit_code = await run_no_show.run(lookback_hours=24, dry_run=False)

    assert exit_code == 1
    assert "No-show run rolled back: disk full" in capsys.readouterr().err
    cli_database.dispose.assert_awaited_once()
