"""Google Calendar integration for taskmanager."""

import os
from datetime import timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from dotenv import load_dotenv

from taskmanager.models.constants import CALENDAR_EVENT_DURATION_MINUTES, DEFAULT_CALENDAR_TIMEZONE
from taskmanager.models.task import Task

load_dotenv()


class CalendarError(Exception):
    """Raised when the Calendar API rejects a request."""

    pass


class GoogleCalendarClient:
    """Client for Google Calendar API integration."""

    def __init__(
        self,
        credentials,
        calendar_id: Optional[str] = None,
        timezone_name: Optional[str] = None,
    ):
        """Initialize Google Calendar client.

        Args:
            credentials: google-auth credentials authorized for the Calendar scope.
            calendar_id: Google Calendar ID to use.
                        If None, reads from GOOGLE_CALENDAR_ID env var (defaults to 'primary').
            timezone_name: IANA timezone for event start/end.
                          If None, reads from GOOGLE_CALENDAR_TIMEZONE env var.
        """
        self.calendar_id = calendar_id or os.getenv("GOOGLE_CALENDAR_ID", "primary")
        self.timezone_name = timezone_name or os.getenv("GOOGLE_CALENDAR_TIMEZONE", DEFAULT_CALENDAR_TIMEZONE)
        self.credentials = credentials
        self.service = build('calendar', 'v3', credentials=credentials, cache_discovery=False)

    def build_task_event(self, task: Task) -> dict:
        """Build the event body for a task: one hour ending at the due time.

        Args:
            task: Task to describe

        Returns:
            Event resource dictionary for events().insert
        """
        tz = ZoneInfo(self.timezone_name)
        end = task.due_date.replace(tzinfo=timezone.utc).astimezone(tz)
        start = end - timedelta(minutes=CALENDAR_EVENT_DURATION_MINUTES)
        return {
            'summary': task.title,
            'description': task.description,
            'start': {
                'dateTime': start.isoformat(),
                'timeZone': self.timezone_name,
            },
            'end': {
                'dateTime': end.isoformat(),
                'timeZone': self.timezone_name,
            },
            'extendedProperties': {
                'private': {
                    'taskmanager_task_id': task.id,
                }
            },
        }

    def insert_task_event(self, task: Task) -> dict:
        """Create a calendar event for a task.

        Each call inserts a new event; existing events are not looked up.

        Returns:
            Created event dictionary from Google Calendar API

        Raises:
            CalendarError: If API call fails
        """
        try:
            return self.service.events().insert(
                calendarId=self.calendar_id,
                body=self.build_task_event(task),
            ).execute()
        except HttpError as error:
            raise CalendarError(f"Failed to create calendar event: {error}") from error
