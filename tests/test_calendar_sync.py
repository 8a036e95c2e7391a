"""Tests for best-effort calendar sync."""

import logging
from datetime import datetime
from unittest.mock import MagicMock, patch

from cryptography.fernet import Fernet
from sqlalchemy.exc import OperationalError

from taskmanager.database.calendar_token_repository import CalendarTokenRepository
from taskmanager.integrations.calendar_sync import load_calendar_credentials, sync_task_to_calendar


def test_sync_skipped_without_credentials(sample_task):
    factory = MagicMock()
    assert sync_task_to_calendar(None, sample_task, client_factory=factory) is False
    factory.assert_not_called()


def test_sync_inserts_event(sample_task):
    client = MagicMock()
    client.insert_task_event.return_value = {"id": "evt-1"}
    factory = MagicMock(return_value=client)
    credentials = MagicMock()

    assert sync_task_to_calendar(credentials, sample_task, client_factory=factory) is True
    factory.assert_called_once_with(credentials)
    client.insert_task_event.assert_called_once_with(sample_task)


def test_sync_failure_is_logged_not_raised(sample_task, caplog):
    client = MagicMock()
    client.insert_task_event.side_effect = RuntimeError("quota exceeded")

    with caplog.at_level(logging.WARNING, logger="taskmanager.integrations.calendar_sync"):
        ok = sync_task_to_calendar(MagicMock(), sample_task, client_factory=MagicMock(return_value=client))

    assert ok is False
    assert "Failed to sync task" in caplog.text
    assert "quota exceeded" in caplog.text


def test_load_credentials_not_connected(db_session, test_user_id):
    assert load_calendar_credentials(db_session, test_user_id) is None


def test_load_credentials_from_stored_token(db_session, test_user_id, monkeypatch):
    monkeypatch.setenv("TOKEN_ENCRYPTION_KEY", Fernet.generate_key().decode("utf-8"))
    CalendarTokenRepository(db_session).save(
        test_user_id, "stored_refresh_value", ["https://www.googleapis.com/auth/calendar"]
    )

    credentials = load_calendar_credentials(db_session, test_user_id)
    assert credentials is not None
    assert credentials.refresh_token == "stored_refresh_value"


def test_load_credentials_with_wrong_key_returns_none(db_session, test_user_id, monkeypatch):
    monkeypatch.setenv("TOKEN_ENCRYPTION_KEY", Fernet.generate_key().decode("utf-8"))
    CalendarTokenRepository(db_session).save(
        test_user_id, "stored_refresh_value", ["https://www.googleapis.com/auth/calendar"]
    )
    monkeypatch.setenv("TOKEN_ENCRYPTION_KEY", Fernet.generate_key().decode("utf-8"))

    assert load_calendar_credentials(db_session, test_user_id) is None


def test_load_credentials_reuses_cached_access_token(db_session, test_user_id, monkeypatch):
    monkeypatch.setenv("TOKEN_ENCRYPTION_KEY", Fernet.generate_key().decode("utf-8"))
    expiry = datetime(2030, 1, 1, 12, 0, 0)
    CalendarTokenRepository(db_session).save(
        test_user_id,
        "stored_refresh_value",
        ["https://www.googleapis.com/auth/calendar"],
        access_token="cached_access_value",
        expiry=expiry,
    )

    credentials = load_calendar_credentials(db_session, test_user_id)
    assert credentials.token == "cached_access_value"
    assert credentials.expiry == expiry
    assert credentials.refresh_token == "stored_refresh_value"


def test_load_credentials_database_error_returns_none(db_session, test_user_id, caplog):
    failure = OperationalError("SELECT", {}, Exception("database is locked"))
    with patch.object(CalendarTokenRepository, "get_tokens", side_effect=failure):
        with caplog.at_level(logging.WARNING, logger="taskmanager.integrations.calendar_sync"):
            assert load_calendar_credentials(db_session, test_user_id) is None

    assert "Calendar token lookup failed" in caplog.text
