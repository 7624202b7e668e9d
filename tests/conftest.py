"""Shared fixtures for the scheduling backend tests."""

from datetime import datetime
from typing import Dict, List, Optional, Tuple
from unittest.mock import MagicMock

import pytest

from backend.utils.config import get_settings
from backend.utils.errors import CalendarOperationError
from calendar_service.base import Appointment, CalendarClient, TimeBlock

SETTINGS_ENV_VARS = (
    "APP_NAME",
    "APP_VERSION",
    "LOG_LEVEL",
    "APP_ENV",
    "HTTP_HOST",
    "HTTP_PORT",
    "TZ",
    "GCAL_CALENDAR_ID",
    "GOOGLE_CREDS_JSON",
    "SUPABASE_URL",
    "SUPABASE_KEY",
    "REDIS_URL",
)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Run every test without ambient settings or overlay files."""

    for name in SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class FakeCalendarClient(CalendarClient):
    """In-memory calendar used in place of Google Calendar."""

    def __init__(self, busy: Optional[List[TimeBlock]] = None) -> None:
        self.busy = list(busy or [])
        self.events: Dict[str, Appointment] = {}
        self.queries: List[Tuple[datetime, datetime]] = []
        self._next_id = 1

    def list_busy(self, start: datetime, end: datetime) -> List[TimeBlock]:
        self.queries.append((start, end))
        return [block for block in self.busy if block.start < end and block.end > start]

    def create_event(self, appointment: Appointment) -> str:
        event_id = f"evt-{self._next_id}"
        self._next_id += 1
        self.events[event_id] = appointment
        return event_id

    def update_event(self, event_id: str, appointment: Appointment) -> None:
        if event_id not in self.events:
            raise CalendarOperationError(f"failed to get existing event: {event_id} not found")
        self.events[event_id] = appointment

    def delete_event(self, event_id: str) -> None:
        if event_id not in self.events:
            raise CalendarOperationError(f"failed to delete calendar event: {event_id} not found")
        del self.events[event_id]


@pytest.fixture
def fake_calendar() -> FakeCalendarClient:
    return FakeCalendarClient()


@pytest.fixture
def google_service() -> MagicMock:
    """Stand-in for the googleapiclient discovery service."""

    return MagicMock(name="calendar_service")
