"""Tests for the manual testing CLI."""

from datetime import datetime, timezone

import pytest

from backend import cli
from backend.utils.config import Settings
from backend.utils.errors import CalendarOperationError
from calendar_service.base import TimeBlock


@pytest.fixture
def run_cli(monkeypatch, fake_calendar):
    """Run the CLI against the in-memory calendar."""

    monkeypatch.setattr(cli, "setup_logging", lambda level: None)
    monkeypatch.setattr(cli, "build_client", lambda settings: fake_calendar)

    def _run(*argv: str) -> int:
        return cli.main(list(argv))

    return _run


def test_list_busy_prints_blocks(run_cli, fake_calendar, capsys) -> None:
    """Each busy block should be printed as a numbered line."""

    fake_calendar.busy = [
        TimeBlock(
            start=datetime(2025, 11, 15, 10, 0, tzinfo=timezone.utc),
            end=datetime(2025, 11, 15, 11, 0, tzinfo=timezone.utc),
            source="google_calendar",
        ),
        TimeBlock(
            start=datetime(2025, 11, 16, 14, 0, tzinfo=timezone.utc),
            end=datetime(2025, 11, 16, 14, 30, tzinfo=timezone.utc),
            source="google_calendar",
        ),
    ]

    exit_code = run_cli("list-busy", "--from", "2025-11-15", "--to", "2025-11-16")

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "Busy time blocks from 2025-11-15 to 2025-11-16:" in out
    assert "1. 2025-11-15 10:00 - 2025-11-15 11:00 (google_calendar)" in out
    assert "2. 2025-11-16 14:00 - 2025-11-16 14:30 (google_calendar)" in out


def test_list_busy_window_includes_to_day(run_cli, fake_calendar) -> None:
    """The queried window should end at midnight after the --to day."""

    run_cli("list-busy", "--from", "2025-11-15", "--to", "2025-11-16")

    assert fake_calendar.queries == [
        (
            datetime(2025, 11, 15, tzinfo=timezone.utc),
            datetime(2025, 11, 17, tzinfo=timezone.utc),
        )
    ]


def test_list_busy_without_blocks(run_cli, capsys) -> None:
    exit_code = run_cli("list-busy", "--from", "2025-11-15", "--to", "2025-11-16")

    assert exit_code == 0
    assert "No busy blocks found." in capsys.readouterr().out


def test_list_busy_rejects_bad_date(run_cli, capsys) -> None:
    """Dates not in YYYY-MM-DD form should exit with status 1."""

    exit_code = run_cli("list-busy", "--from", "15/11/2025")

    assert exit_code == 1
    assert "Error: invalid from date" in capsys.readouterr().err


def test_create_event(run_cli, fake_calendar, capsys) -> None:
    """Flags should map onto the Appointment, with times read as UTC."""

    exit_code = run_cli(
        "create-event",
        "--summary",
        "Consultation",
        "--start",
        "2025-11-15T18:00:00",
        "--end",
        "2025-11-15T18:30:00",
        "--attendee-name",
        "Test User",
        "--attendee-email",
        "test.user@example.com",
        "--timezone",
        "Asia/Kolkata",
    )

    assert exit_code == 0
    assert "Event created successfully with ID: evt-1" in capsys.readouterr().out
    appointment = fake_calendar.events["evt-1"]
    assert appointment.summary == "Consultation"
    assert appointment.start == datetime(2025, 11, 15, 18, 0, tzinfo=timezone.utc)
    assert appointment.end == datetime(2025, 11, 15, 18, 30, tzinfo=timezone.utc)
    assert appointment.attendee_name == "Test User"
    assert appointment.attendee_email == "test.user@example.com"
    assert appointment.timezone == "Asia/Kolkata"


def test_create_event_requires_summary(run_cli, fake_calendar, capsys) -> None:
    exit_code = run_cli("create-event", "--start", "2025-11-15T18:00:00", "--end", "2025-11-15T18:30:00")

    assert exit_code == 1
    assert "Error: summary is required" in capsys.readouterr().err
    assert fake_calendar.events == {}


def test_create_event_requires_times(run_cli, capsys) -> None:
    exit_code = run_cli("create-event", "--summary", "Consultation")

    assert exit_code == 1
    assert "Error: start and end times are required" in capsys.readouterr().err


def test_delete_event(run_cli, fake_calendar, capsys) -> None:
    run_cli("create-event", "--summary", "Consultation", "--start", "2025-11-15T18:00:00", "--end", "2025-11-15T18:30:00")

    exit_code = run_cli("delete-event", "evt-1")

    assert exit_code == 0
    assert fake_calendar.events == {}
    assert "Event evt-1 deleted" in capsys.readouterr().out


def test_delete_missing_event_reports_error(run_cli, capsys) -> None:
    exit_code = run_cli("delete-event", "nope")

    assert exit_code == 1
    assert "Error: failed to delete calendar event" in capsys.readouterr().err


def test_check_connection_cleans_up_test_event(run_cli, fake_calendar, capsys) -> None:
    """The test event created by check-connection should be deleted again."""

    exit_code = run_cli("check-connection")

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "Calendar access: OK" in out
    assert "Write access: OK (test event evt-1)" in out
    assert fake_calendar.events == {}
    assert len(fake_calendar.queries) == 1


def test_check_connection_reports_missing_write_access(run_cli, fake_calendar, monkeypatch, capsys) -> None:
    """A rejected insert should be reported as missing write access."""

    def reject(appointment):
        raise CalendarOperationError("failed to create calendar event: forbidden")

    monkeypatch.setattr(fake_calendar, "create_event", reject)

    exit_code = run_cli("check-connection")

    assert exit_code == 1
    assert "Write access: FAILED" in capsys.readouterr().out


def test_client_not_initialized_without_configuration(monkeypatch, capsys) -> None:
    """Without calendar settings every command should fail cleanly."""

    monkeypatch.setattr(cli, "setup_logging", lambda level: None)

    exit_code = cli.main(["list-busy"])

    assert exit_code == 1
    assert "Error: Google Calendar client not initialized" in capsys.readouterr().err


def test_production_config_error_is_not_fatal(monkeypatch, capsys) -> None:
    """An incomplete production config only warns in the CLI."""

    monkeypatch.setattr(cli, "setup_logging", lambda level: None)
    monkeypatch.setenv("APP_ENV", "production")

    exit_code = cli.main(["list-busy"])

    assert exit_code == 1
    assert "client not initialized" in capsys.readouterr().err


def test_build_client_requires_configuration() -> None:
    """Both calendar id and credentials are needed to build a client."""

    assert cli.build_client(Settings(gcal_calendar_id="clinic@example.com")) is None
    assert cli.build_client(Settings(google_creds_json='{"type": "service_account"}')) is None


def test_build_client_returns_none_on_invalid_credentials() -> None:
    """Session errors during client setup should yield no client."""

    settings = Settings(gcal_calendar_id="clinic@example.com", google_creds_json="not json at all")

    assert cli.build_client(settings) is None
