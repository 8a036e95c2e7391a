"""Tests for ReminderScheduler."""

import logging
from datetime import datetime, timedelta
from unittest.mock import MagicMock

from taskmanager.reminders.scheduler import ReminderScheduler
from taskmanager.reminders.triggers import notification_ids_for_task


def _future(**kwargs) -> datetime:
    return datetime.utcnow().replace(microsecond=0) + timedelta(**kwargs)


class TestReminderScheduler:
    def test_schedule_arms_both_future_triggers(self, reminder_scheduler, local_notifier):
        armed = reminder_scheduler.schedule("task-1", "Report", _future(hours=2))

        assert len(armed) == 2
        assert {n.notification_id for n in local_notifier.pending()} == set(notification_ids_for_task("task-1"))

    def test_schedule_near_due_arms_only_expiry(self, reminder_scheduler):
        armed = reminder_scheduler.schedule("task-1", "Report", _future(minutes=30))
        assert [t.kind for t in armed] == ["expired"]

    def test_schedule_past_due_arms_nothing(self, reminder_scheduler, local_notifier):
        assert reminder_scheduler.schedule("task-1", "Report", _future(hours=-1)) == []
        assert local_notifier.pending() == []

    def test_reschedule_replaces_triggers(self, reminder_scheduler):
        reminder_scheduler.schedule("task-1", "Report", _future(hours=2))
        new_due = _future(days=2)
        reminder_scheduler.reschedule("task-1", "Report v2", new_due)

        pending = reminder_scheduler.pending_for_task("task-1")
        assert len(pending) == 2
        assert pending[1].fire_at == new_due
        assert all("Report v2" in t.body for t in pending)

    def test_reschedule_cancels_trigger_that_is_now_past(self, reminder_scheduler):
        reminder_scheduler.schedule("task-1", "Report", _future(hours=5))
        reminder_scheduler.reschedule("task-1", "Report", _future(minutes=30))

        pending = reminder_scheduler.pending_for_task("task-1")
        assert [t.kind for t in pending] == ["expired"]

    def test_cancel_is_idempotent(self, reminder_scheduler, local_notifier):
        reminder_scheduler.schedule("task-1", "Report", _future(hours=2))
        reminder_scheduler.cancel("task-1")
        reminder_scheduler.cancel("task-1")
        assert local_notifier.pending() == []

    def test_cancel_leaves_other_tasks_alone(self, reminder_scheduler):
        reminder_scheduler.schedule("task-1", "One", _future(hours=2))
        reminder_scheduler.schedule("task-2", "Two", _future(hours=2))
        reminder_scheduler.cancel("task-1")

        assert reminder_scheduler.pending_for_task("task-1") == []
        assert len(reminder_scheduler.pending_for_task("task-2")) == 2

    def test_notifier_failures_are_logged_not_raised(self, caplog):
        notifier = MagicMock()
        notifier.schedule.side_effect = RuntimeError("permission denied")
        notifier.cancel.side_effect = RuntimeError("permission denied")
        scheduler = ReminderScheduler(notifier)

        with caplog.at_level(logging.WARNING, logger="taskmanager.reminders.scheduler"):
            assert scheduler.schedule("task-1", "Report", _future(hours=2)) == []
            scheduler.cancel("task-1")

        assert "Failed to schedule notification" in caplog.text
        assert "Failed to cancel notification" in caplog.text
