"""Google Calendar API adapter."""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import Error as GoogleApiClientError
from googleapiclient.errors import HttpError
from httplib2 import HttpLib2Error

from backend.utils.config import Settings, resolve_credential_bytes
from backend.utils.errors import CalendarOperationError, SessionError
from calendar_service.base import (
    GOOGLE_CALENDAR_SOURCE,
    Appointment,
    CalendarClient,
    TimeBlock,
)

LOGGER = logging.getLogger(__name__)

CALENDAR_SCOPE = "https://www.googleapis.com/auth/calendar"
SERVICE_ACCOUNT_TYPE = "service_account"

RFC3339_PATTERN = re.compile(
    r"([0-9]{4}-[0-9]{2}-[0-9]{2}T[0-9]{2}:[0-9]{2}:[0-9]{2})"
    r"(?:\.([0-9]+))?"
    r"(Z|[+-][0-9]{2}:[0-9]{2})"
)

REMOTE_ERRORS = (HttpError, GoogleAuthError, HttpLib2Error, OSError)
SESSION_ERRORS = (GoogleApiClientError, GoogleAuthError, HttpLib2Error, OSError)


def format_rfc3339(value: datetime) -> str:
    """Serialize ``value`` as RFC 3339 with seconds precision.

    Naive datetimes are taken as UTC; a zero offset is written as ``Z``.
    """

    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)

    text = value.replace(microsecond=0).isoformat()
    if text.endswith("+00:00"):
        text = text[: -len("+00:00")] + "Z"
    return text


def parse_rfc3339(value: str) -> datetime:
    """Parse a strict RFC 3339 timestamp; raises ``ValueError`` otherwise.

    Fractional seconds beyond microseconds are truncated.
    """

    match = RFC3339_PATTERN.fullmatch(value)
    if match is None:
        raise ValueError(f"not an RFC 3339 timestamp: {value!r}")

    base, fraction, offset = match.groups()
    micros = (fraction or "").ljust(6, "0")[:6]
    if offset == "Z":
        offset = "+00:00"
    return datetime.fromisoformat(f"{base}.{micros}{offset}")


class GoogleCalendarAdapter(CalendarClient):
    """Adapter for a single Google Calendar accessed through a service account."""

    def __init__(self, service: Any, calendar_id: str) -> None:
        self._service = service
        self._calendar_id = calendar_id

    @classmethod
    def from_settings(cls, settings: Settings) -> "GoogleCalendarAdapter":
        """Authenticate with the configured service account credentials.

        The calendar id is bound as-is; a wrong id only surfaces on first use.
        """

        creds_bytes = resolve_credential_bytes(settings)

        try:
            info = json.loads(creds_bytes)
        except ValueError as exc:
            raise SessionError(f"failed to parse Google credentials: {exc}") from exc
        if not isinstance(info, dict):
            raise SessionError("failed to parse Google credentials: expected a JSON object")
        if info.get("type") != SERVICE_ACCOUNT_TYPE:
            raise SessionError(
                f"unsupported Google credentials type: {info.get('type')!r}, expected {SERVICE_ACCOUNT_TYPE!r}"
            )

        try:
            credentials = service_account.Credentials.from_service_account_info(
                info,
                scopes=[CALENDAR_SCOPE],
            )
        except (ValueError, KeyError) as exc:
            raise SessionError(f"failed to create service account credentials: {exc}") from exc

        try:
            service = build("calendar", "v3", credentials=credentials, cache_discovery=False)
        except SESSION_ERRORS as exc:
            raise SessionError(f"failed to create calendar service: {exc}") from exc

        LOGGER.info(
            "Google Calendar session ready: calendar_id=%s",
            settings.gcal_calendar_id,
        )
        return cls(service=service, calendar_id=settings.gcal_calendar_id)

    @property
    def calendar_id(self) -> str:
        return self._calendar_id

    # ---------------------------------------------------------------------
    # Public API
    # ---------------------------------------------------------------------
    def list_busy(self, start: datetime, end: datetime) -> List[TimeBlock]:
        """Return busy blocks for the bound calendar only.

        Entries whose start or end cannot be parsed are skipped.
        """

        body = {
            "timeMin": format_rfc3339(start),
            "timeMax": format_rfc3339(end),
            "items": [{"id": self._calendar_id}],
        }
        LOGGER.debug("Google free/busy query: %s", body)

        request = self._service.freebusy().query(body=body)
        response = self._execute(request, "failed to query free/busy") or {}

        calendar = response.get("calendars", {}).get(self._calendar_id) or {}
        if calendar.get("errors"):
            LOGGER.warning(
                "Google free/busy reported errors for calendar_id=%s: %s",
                self._calendar_id,
                calendar["errors"],
            )

        blocks: List[TimeBlock] = []
        for item in calendar.get("busy", []):
            block = self._coerce_busy(item)
            if block is not None:
                blocks.append(block)

        return blocks

    def create_event(self, appointment: Appointment) -> str:
        event = self._apply_appointment({}, appointment)
        LOGGER.debug("Google event insert request: summary=%s", appointment.summary)

        request = self._service.events().insert(
            calendarId=self._calendar_id,
            body=event,
        )
        created = self._execute(request, "failed to create calendar event")

        event_id = created["id"]
        LOGGER.info("Google event created: event_id=%s", event_id)
        return event_id

    def update_event(self, event_id: str, appointment: Appointment) -> None:
        """Fetch the event, overwrite the appointment fields and write it back.

        Fields of the stored event that an appointment does not describe are
        sent back unchanged. Existing attendees are kept when the appointment
        has no attendee email.
        """

        request = self._service.events().get(
            calendarId=self._calendar_id,
            eventId=event_id,
        )
        existing = self._execute(request, "failed to get existing event")

        event = self._apply_appointment(dict(existing), appointment)

        request = self._service.events().update(
            calendarId=self._calendar_id,
            eventId=event_id,
            body=event,
        )
        self._execute(request, "failed to update calendar event")
        LOGGER.info("Google event updated: event_id=%s", event_id)

    def delete_event(self, event_id: str) -> None:
        request = self._service.events().delete(
            calendarId=self._calendar_id,
            eventId=event_id,
        )
        self._execute(request, "failed to delete calendar event")
        LOGGER.info("Google event deleted: event_id=%s", event_id)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _execute(self, request: Any, failure: str) -> Any:
        try:
            return request.execute()
        except REMOTE_ERRORS as exc:
            LOGGER.error(
                "Google Calendar call failed: calendar_id=%s %s: %s",
                self._calendar_id,
                failure,
                exc,
            )
            raise CalendarOperationError(f"{failure}: {exc}") from exc

    @staticmethod
    def _coerce_busy(item: Dict[str, Any]) -> Optional[TimeBlock]:
        try:
            start = parse_rfc3339(item["start"])
            end = parse_rfc3339(item["end"])
        except (KeyError, TypeError, AttributeError, ValueError):
            LOGGER.debug("Skipping unparsable busy interval: %s", item)
            return None

        return TimeBlock(start=start, end=end, source=GOOGLE_CALENDAR_SOURCE)

    @staticmethod
    def _apply_appointment(
        event: Dict[str, Any],
        appointment: Appointment,
    ) -> Dict[str, Any]:
        # Empty values are dropped, which clears them on a full update.
        text_fields = {
            "summary": appointment.summary,
            "description": appointment.description,
            "location": appointment.location,
        }
        for key, value in text_fields.items():
            if value:
                event[key] = value
            else:
                event.pop(key, None)

        event["start"] = _event_datetime(appointment.start, appointment.timezone)
        event["end"] = _event_datetime(appointment.end, appointment.timezone)

        # attendee_name is not part of the Google payload.
        if appointment.attendee_email:
            event["attendees"] = [{"email": appointment.attendee_email}]

        return event


def _event_datetime(value: datetime, tz_label: str) -> Dict[str, str]:
    payload = {"dateTime": format_rfc3339(value)}
    if tz_label:
        payload["timeZone"] = tz_label
    return payload
