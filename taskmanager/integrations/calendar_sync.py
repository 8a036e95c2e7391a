"""Best-effort task to Google Calendar sync.

Calendar sync never blocks or reverses the task write that triggered it:
every failure is logged and swallowed here.
"""

import logging
from typing import Callable, Optional

from google.oauth2.credentials import Credentials as GoogleCredentials
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from taskmanager.auth.google_oauth import (
    CALENDAR_SCOPES,
    GOOGLE_OAUTH_CLIENT_ID,
    GOOGLE_OAUTH_CLIENT_SECRET,
    GOOGLE_TOKEN_URL,
)
from taskmanager.database.calendar_token_repository import CalendarTokenRepository
from taskmanager.integrations.google_calendar import GoogleCalendarClient
from taskmanager.models.task import Task

logger = logging.getLogger(__name__)


def load_calendar_credentials(db: Session, user_id: str) -> Optional[GoogleCredentials]:
    """Rebuild Calendar credentials from the user's stored tokens.

    A stored access token that has not expired is reused; otherwise
    google-auth refreshes on the first API call. Lookup failures are
    logged and treated as "not connected" so they never fail the task
    write that triggered the sync.

    Returns:
        Credentials, or None if the user has not connected Calendar or the
        stored tokens cannot be read
    """
    try:
        tokens = CalendarTokenRepository(db).get_tokens(user_id)
    except RuntimeError as e:
        logger.warning(f"Calendar token unavailable for user {user_id}: {e}")
        return None
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(f"Calendar token lookup failed for user {user_id}: {type(e).__name__}: {str(e)}")
        return None
    if tokens is None:
        return None

    return GoogleCredentials(
        token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        expiry=tokens.expiry,
        token_uri=GOOGLE_TOKEN_URL,
        client_id=GOOGLE_OAUTH_CLIENT_ID,
        client_secret=GOOGLE_OAUTH_CLIENT_SECRET,
        scopes=CALENDAR_SCOPES,
    )


def sync_task_to_calendar(
    credentials: Optional[GoogleCredentials],
    task: Task,
    client_factory: Callable[..., GoogleCalendarClient] = GoogleCalendarClient,
) -> bool:
    """Insert a calendar event for a task, ignoring any failure.

    Args:
        credentials: Calendar credentials, or None when not connected
        task: Task to copy to the calendar
        client_factory: Builds the calendar client from credentials

    Returns:
        True if an event was created
    """
    if credentials is None:
        logger.debug(f"Calendar not connected; skipping sync for task {task.id}")
        return False

    try:
        client = client_factory(credentials)
        event = client.insert_task_event(task)
        logger.info(f"Task '{task.title}' synced to Google Calendar (event {event.get('id')})")
        return True
    except Exception as e:
        logger.warning(f"Failed to sync task {task.id} with Google Calendar: {type(e).__name__}: {str(e)}")
        return False
