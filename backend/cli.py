"""Command line tool for exercising the Google Calendar adapter by hand."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date, datetime, time, timedelta, timezone
from typing import List, Optional

from backend.utils.config import Settings, load_settings
from backend.utils.errors import ConfigurationError, SchedulingError
from backend.utils.logging import setup_logging
from calendar_service.base import Appointment, CalendarClient
from calendar_service.google_adapter import GoogleCalendarAdapter

LOGGER = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"
DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S"
DISPLAY_FORMAT = "%Y-%m-%d %H:%M"


def build_client(settings: Settings) -> Optional[CalendarClient]:
    """Return a Google Calendar client, or None when it cannot be set up."""

    if not (settings.gcal_calendar_id and settings.google_creds_json):
        LOGGER.warning("Google Calendar is not configured; set GCAL_CALENDAR_ID and GOOGLE_CREDS_JSON")
        return None

    try:
        return GoogleCalendarAdapter.from_settings(settings)
    except SchedulingError as exc:
        LOGGER.warning("Failed to initialize Google Calendar client: %s", exc)
        return None


def _day_start(value: date) -> datetime:
    return datetime.combine(value, time.min, tzinfo=timezone.utc)


def _parse_date(value: str, label: str) -> date:
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except ValueError as exc:
        raise SchedulingError(f"invalid {label} date {value!r}, expected YYYY-MM-DD") from exc


def _parse_datetime(value: str, label: str) -> datetime:
    try:
        parsed = datetime.strptime(value, DATETIME_FORMAT)
    except ValueError as exc:
        raise SchedulingError(f"invalid {label} time {value!r}, expected YYYY-MM-DDTHH:MM:SS") from exc
    return parsed.replace(tzinfo=timezone.utc)


def cmd_list_busy(client: CalendarClient, args: argparse.Namespace) -> int:
    from_day = _parse_date(args.from_date, "from")
    to_day = _parse_date(args.to_date, "to")

    # The window covers the whole of the "to" day.
    blocks = client.list_busy(_day_start(from_day), _day_start(to_day + timedelta(days=1)))

    print(f"Busy time blocks from {args.from_date} to {args.to_date}:")
    if not blocks:
        print("No busy blocks found.")
        return 0

    for index, block in enumerate(blocks, start=1):
        print(
            f"{index}. {block.start.strftime(DISPLAY_FORMAT)} - "
            f"{block.end.strftime(DISPLAY_FORMAT)} ({block.source})"
        )
    return 0


def cmd_create_event(client: CalendarClient, args: argparse.Namespace) -> int:
    if not args.summary:
        raise SchedulingError("summary is required")
    if not (args.start and args.end):
        raise SchedulingError("start and end times are required")

    appointment = Appointment(
        summary=args.summary,
        description=args.description,
        start=_parse_datetime(args.start, "start"),
        end=_parse_datetime(args.end, "end"),
        attendee_name=args.attendee_name,
        attendee_email=args.attendee_email,
        location=args.location,
        timezone=args.timezone,
    )

    event_id = client.create_event(appointment)
    print(f"Event created successfully with ID: {event_id}")
    return 0


def cmd_delete_event(client: CalendarClient, args: argparse.Namespace) -> int:
    client.delete_event(args.event_id)
    print(f"Event {args.event_id} deleted")
    return 0


def cmd_check_connection(client: CalendarClient, args: argparse.Namespace) -> int:
    """List busy blocks around now, then create and remove a test event."""

    now = datetime.now(timezone.utc).replace(microsecond=0)

    blocks = client.list_busy(now - timedelta(hours=24), now + timedelta(hours=24))
    print("Calendar access: OK")
    print(f"Found {len(blocks)} busy time blocks in the last and next 24 hours")

    appointment = Appointment(
        summary="Test Appointment - Bot Connection",
        description="Test event created to verify the service account connection",
        start=now + timedelta(hours=1),
        end=now + timedelta(hours=2),
        location="Test Location",
        timezone="UTC",
    )
    try:
        event_id = client.create_event(appointment)
    except SchedulingError as exc:
        print(f"Write access: FAILED ({exc})")
        print("Share the calendar with the service account using 'Make changes to events'")
        return 1

    print(f"Write access: OK (test event {event_id})")
    client.delete_event(event_id)
    print("Test event cleaned up")
    return 0


def build_parser() -> argparse.ArgumentParser:
    today = datetime.now(timezone.utc).date()

    parser = argparse.ArgumentParser(
        prog="scheduler-cli",
        description="Appointment scheduling bot CLI for testing the calendar integration",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Verbose output",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    list_busy = subparsers.add_parser("list-busy", help="List busy time blocks from Google Calendar")
    list_busy.add_argument(
        "--from",
        dest="from_date",
        default=today.strftime(DATE_FORMAT),
        help="Start date (YYYY-MM-DD)",
    )
    list_busy.add_argument(
        "--to",
        dest="to_date",
        default=(today + timedelta(days=7)).strftime(DATE_FORMAT),
        help="End date (YYYY-MM-DD), inclusive",
    )
    list_busy.set_defaults(handler=cmd_list_busy)

    create = subparsers.add_parser("create-event", help="Create a new calendar event")
    create.add_argument("--summary", default="", help="Event summary (required)")
    create.add_argument("--description", default="", help="Event description")
    create.add_argument("--start", default="", help="Start time (YYYY-MM-DDTHH:MM:SS, UTC) (required)")
    create.add_argument("--end", default="", help="End time (YYYY-MM-DDTHH:MM:SS, UTC) (required)")
    create.add_argument("--attendee-name", default="", help="Attendee name")
    create.add_argument("--attendee-email", default="", help="Attendee email")
    create.add_argument("--location", default="", help="Event location")
    create.add_argument("--timezone", default="UTC", help="Event timezone")
    create.set_defaults(handler=cmd_create_event)

    delete = subparsers.add_parser("delete-event", help="Delete a calendar event")
    delete.add_argument("event_id", help="Google Calendar event id")
    delete.set_defaults(handler=cmd_delete_event)

    check = subparsers.add_parser(
        "check-connection",
        help="Verify read and write access to the configured calendar",
    )
    check.set_defaults(handler=cmd_check_connection)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings()
    except ConfigurationError as exc:
        LOGGER.warning("Failed to load config: %s", exc)
        settings = load_settings(validate=False)

    setup_logging("DEBUG" if args.verbose else settings.log_level)

    client = build_client(settings)
    if client is None:
        print("Error: Google Calendar client not initialized", file=sys.stderr)
        return 1

    try:
        return args.handler(client, args)
    except SchedulingError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
