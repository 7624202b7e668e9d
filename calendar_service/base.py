"""Calendar data types and the abstract calendar client."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field

GOOGLE_CALENDAR_SOURCE = "google_calendar"


class TimeBlock(BaseModel):
    """A busy interval reported by a calendar backend."""

    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime
    source: str


class Appointment(BaseModel):
    """Event details handed to a calendar backend for create/update."""

    summary: str
    description: str = Field(default="")
    start: datetime
    end: datetime
    attendee_name: str = Field(default="")
    attendee_email: str = Field(default="")
    location: str = Field(default="")
    timezone: str = Field(default="UTC")


class CalendarClient(ABC):
    """Operations every calendar backend must provide."""

    @abstractmethod
    def list_busy(self, start: datetime, end: datetime) -> List[TimeBlock]:
        """
        Return busy blocks between ``start`` and ``end``.

        Raises:
            CalendarOperationError: If the remote query fails
        """

    @abstractmethod
    def create_event(self, appointment: Appointment) -> str:
        """
        Create an event and return its identifier.

        Raises:
            CalendarOperationError: If the event cannot be created
        """

    @abstractmethod
    def update_event(self, event_id: str, appointment: Appointment) -> None:
        """
        Overwrite an existing event with the appointment details.

        Raises:
            CalendarOperationError: If the event is missing or the update fails
        """

    @abstractmethod
    def delete_event(self, event_id: str) -> None:
        """
        Delete an event.

        Raises:
            CalendarOperationError: If the deletion is rejected
        """
