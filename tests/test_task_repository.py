"""Tests for TaskRepository CRUD operations."""

import pytest
from datetime import datetime, timedelta
import uuid

from taskmanager.database.repository import TaskRepository
from taskmanager.models.task import Task, TaskPriority


class TestTaskRepository:
    """Test TaskRepository CRUD operations."""

    def test_create_task(self, task_repository, sample_task, test_user_id):
        """Test creating a task."""
        created = task_repository.create(sample_task)

        assert created.id == sample_task.id
        assert created.title == sample_task.title
        assert created.priority == "Medium"
        assert created.is_completed is False
        assert created.user_id == test_user_id

    def test_get_task_by_id(self, task_repository, sample_task, test_user_id):
        """Test retrieving a task by ID."""
        created = task_repository.create(sample_task)
        retrieved = task_repository.get(test_user_id, created.id)

        assert retrieved is not None
        assert retrieved.id == created.id
        assert retrieved.due_date == sample_task.due_date

    def test_get_nonexistent_task(self, task_repository, test_user_id):
        """Test retrieving a nonexistent task returns None."""
        assert task_repository.get(test_user_id, "nonexistent-id") is None

    def test_get_all_tasks(self, task_repository, sample_task_base, test_user_id):
        """Test retrieving all tasks."""
        for title in ["Task 1", "Task 2", "Task 3"]:
            task_repository.create(Task(**{**sample_task_base, "id": str(uuid.uuid4()), "title": title}))

        all_tasks = task_repository.get_all(test_user_id)
        assert len(all_tasks) == 3
        assert {task.title for task in all_tasks} == {"Task 1", "Task 2", "Task 3"}

    def test_tasks_are_scoped_to_owner(self, task_repository, db_session, sample_task_base):
        """Another user's tasks are invisible and untouchable."""
        from taskmanager.database.models import UserDB

        now = datetime.utcnow()
        db_session.add(UserDB(id="other-user", email="other@example.com", created_at=now, updated_at=now))
        db_session.commit()

        theirs = task_repository.create(Task(**{**sample_task_base, "user_id": "other-user"}))

        assert task_repository.get("test-user-123", theirs.id) is None
        assert task_repository.get_all("test-user-123") == []
        assert task_repository.update("test-user-123", theirs.id, {"title": "Hijacked"}) is None
        assert task_repository.delete("test-user-123", theirs.id) is False
        assert task_repository.get("other-user", theirs.id).title == "Test Task"

    def test_update_task_partial(self, task_repository, sample_task, test_user_id):
        """Only the given fields change."""
        created = task_repository.create(sample_task)
        new_due = created.due_date + timedelta(days=3)

        updated = task_repository.update(
            test_user_id,
            created.id,
            {"title": "Renamed", "priority": TaskPriority.HIGH, "due_date": new_due},
        )

        assert updated.title == "Renamed"
        assert updated.priority == "High"
        assert updated.due_date == new_due
        assert updated.description == created.description
        assert updated.category == created.category
        assert updated.updated_at >= created.updated_at

    def test_update_ignores_identity_fields(self, task_repository, sample_task, test_user_id):
        created = task_repository.create(sample_task)
        updated = task_repository.update(test_user_id, created.id, {"id": "new-id", "user_id": "someone"})

        assert updated.id == created.id
        assert updated.user_id == test_user_id

    def test_update_nonexistent_task(self, task_repository, test_user_id):
        assert task_repository.update(test_user_id, "nonexistent-id", {"title": "x"}) is None

    def test_set_completed(self, task_repository, sample_task, test_user_id):
        created = task_repository.create(sample_task)

        done = task_repository.set_completed(test_user_id, created.id, True)
        assert done.is_completed is True
        undone = task_repository.set_completed(test_user_id, created.id, False)
        assert undone.is_completed is False

    def test_delete_task(self, task_repository, sample_task, test_user_id):
        """Deleted tasks are gone for good."""
        created = task_repository.create(sample_task)

        assert task_repository.delete(test_user_id, created.id) is True
        assert task_repository.get(test_user_id, created.id) is None
        assert task_repository.delete(test_user_id, created.id) is False

    def test_custom_category_round_trips(self, task_repository, sample_task_base, test_user_id):
        created = task_repository.create(Task(**{**sample_task_base, "category": "Errands"}))
        assert task_repository.get(test_user_id, created.id).category == "Errands"

    def test_unknown_stored_priority_reads_as_medium(self, task_repository, db_session, sample_task, test_user_id):
        from taskmanager.database.models import TaskDB

        created = task_repository.create(sample_task)
        db_session.query(TaskDB).filter(TaskDB.id == created.id).update({"priority": "Urgent"})
        db_session.commit()

        assert task_repository.get(test_user_id, created.id).priority == "Medium"


class TestTaskRepositoryFeed:
    """Writes are published on the task feed."""

    def test_writes_publish_owner(self, db_session, sample_task, test_user_id):
        from unittest.mock import MagicMock

        feed = MagicMock()
        repo = TaskRepository(db_session, feed=feed)

        created = repo.create(sample_task)
        repo.update(test_user_id, created.id, {"title": "x"})
        repo.delete(test_user_id, created.id)

        assert [c.args for c in feed.publish.call_args_list] == [(test_user_id,)] * 3

    def test_reads_and_misses_do_not_publish(self, db_session, test_user_id):
        from unittest.mock import MagicMock

        feed = MagicMock()
        repo = TaskRepository(db_session, feed=feed)

        repo.get_all(test_user_id)
        repo.update(test_user_id, "missing", {"title": "x"})
        repo.delete(test_user_id, "missing")

        feed.publish.assert_not_called()

    def test_failed_write_rolls_back_and_raises(self, db_session, sample_task_base):
        from unittest.mock import MagicMock
        from sqlalchemy.exc import IntegrityError

        feed = MagicMock()
        repo = TaskRepository(db_session, feed=feed)

        # Unknown owner violates the users foreign key.
        with pytest.raises(IntegrityError):
            repo.create(Task(**{**sample_task_base, "user_id": "no-such-user"}))

        feed.publish.assert_not_called()
        assert repo.get_all("no-such-user") == []
