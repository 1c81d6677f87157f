"""Shared fixtures for telehealth backend tests."""

from __future__ import annotations

from datetime import date, datetime, time, timezone

import pytest
from fastapi.testclient import TestClient

from telehealth.core.config import Settings
from telehealth.main import create_app
from telehealth.models import ConsultationInput, FollowUp
from telehealth.services.follow_up_service import FollowUpService
from telehealth.services.follow_up_store import MemoryFollowUpStore, MemoryProfileDirectory

FIXED_NOW = datetime(2026, 3, 10, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def settings() -> Settings:
    """Test settings: no simulated latency."""
    return Settings(SUMMARY_DELAY_SECONDS=0, LOG_LEVEL="DEBUG", REMINDER_WINDOW_DAYS=1)


@pytest.fixture
def make_input():
    """Build a ConsultationInput from the camelCase keys the portal posts."""

    def _make(doctor_notes: str, **extra: object) -> ConsultationInput:
        return ConsultationInput.model_validate({"doctorNotes": doctor_notes, **extra})

    return _make


@pytest.fixture
def directory() -> MemoryProfileDirectory:
    directory = MemoryProfileDirectory()
    directory.add_patient("pat-1", "Jane Doe", "jane@example.com")
    directory.add_doctor("doc-1", "Dr. Amir Shah")
    return directory


@pytest.fixture
def store() -> MemoryFollowUpStore:
    return MemoryFollowUpStore()


@pytest.fixture
def follow_up_service(store, directory) -> FollowUpService:
    return FollowUpService(store, directory, reminder_window_days=1)


@pytest.fixture
def seeded_store(store) -> MemoryFollowUpStore:
    """Follow-ups around FIXED_NOW (2026-03-10) covering every reminder-scan case."""
    rows = [
        FollowUp(id="due-today", patient_id="pat-1", doctor_id="doc-1", follow_up_date=date(2026, 3, 10),
                 follow_up_time=time(9, 30), reason="Review BP diary", priority="urgent"),
        FollowUp(id="due-tomorrow", patient_id="pat-2", doctor_id="doc-9", follow_up_date=date(2026, 3, 11),
                 reason="Mood review"),
        FollowUp(id="too-late", patient_id="pat-1", doctor_id="doc-1", follow_up_date=date(2026, 3, 12),
                 reason="Headache diary"),
        FollowUp(id="past", patient_id="pat-1", doctor_id="doc-1", follow_up_date=date(2026, 3, 9),
                 reason="Missed"),
        FollowUp(id="already-reminded", patient_id="pat-1", follow_up_date=date(2026, 3, 10),
                 reason="Bloods", reminder_sent=True),
        FollowUp(id="cancelled", patient_id="pat-1", follow_up_date=date(2026, 3, 11),
                 reason="Cancelled visit", status="cancelled"),
    ]
    for row in rows:
        store.add(row)
    return store


@pytest.fixture
def client(settings, follow_up_service):
    app = create_app(settings, follow_up_service=follow_up_service)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW
