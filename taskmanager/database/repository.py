"""Repository layer for database operations."""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session

from taskmanager.models.task import Task, to_utc_naive
from taskmanager.database.models import TaskDB, enum_to_value
from taskmanager.database.task_feed import TaskFeed, task_feed

logger = logging.getLogger(__name__)

# Fields a caller may change after creation. id and user_id are immutable.
UPDATABLE_FIELDS = ("title", "description", "due_date", "category", "is_completed", "priority")


class TaskRepository:
    """Repository for Task database operations.

    All reads and writes are scoped to an owner id. Successful writes are
    published on the task feed so live queries refresh.
    """

    def __init__(self, db: Session, feed: Optional[TaskFeed] = None):
        self.db = db
        self.feed = feed if feed is not None else task_feed

    def _query_owned(self, user_id: str, task_id: str):
        return self.db.query(TaskDB).filter(
            TaskDB.id == task_id,
            TaskDB.user_id == user_id,
        )

    def create(self, task: Task) -> Task:
        """Create a new task."""
        try:
            task_db = TaskDB.from_pydantic(task)
            self.db.add(task_db)
            self.db.commit()
            self.db.refresh(task_db)
            logger.debug(f"Created task {task.id}: {task.title[:50]}")
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create task {task.id}: {type(e).__name__}: {str(e)}")
            raise
        self.feed.publish(task.user_id)
        return task_db.to_pydantic()

    def get(self, user_id: str, task_id: str) -> Optional[Task]:
        """Get task by ID for a specific user."""
        task_db = self._query_owned(user_id, task_id).first()
        return task_db.to_pydantic() if task_db else None

    def get_all(self, user_id: str) -> List[Task]:
        """Get all tasks owned by a user.

        No ordering is applied; consumers sort as they need.
        """
        tasks_db = self.db.query(TaskDB).filter(TaskDB.user_id == user_id).all()
        return [task_db.to_pydantic() for task_db in tasks_db]

    def update(self, user_id: str, task_id: str, fields: Dict[str, Any]) -> Optional[Task]:
        """Apply a partial update to a task.

        Args:
            user_id: Owner of the task
            task_id: Task to update
            fields: Field name -> new value; unknown and immutable fields are ignored

        Returns:
            The updated task, or None if the user has no such task
        """
        task_db = self._query_owned(user_id, task_id).first()
        if not task_db:
            return None

        for name, value in fields.items():
            if name not in UPDATABLE_FIELDS:
                continue
            if name == "priority":
                value = enum_to_value(value)
            elif name == "due_date":
                value = to_utc_naive(value)
            setattr(task_db, name, value)
        task_db.updated_at = datetime.utcnow()

        try:
            self.db.commit()
            self.db.refresh(task_db)
            logger.debug(f"Updated task {task_id}: {sorted(fields)}")
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update task {task_id}: {type(e).__name__}: {str(e)}")
            raise
        self.feed.publish(user_id)
        return task_db.to_pydantic()

    def set_completed(self, user_id: str, task_id: str, is_completed: bool) -> Optional[Task]:
        """Set the completion flag of a task."""
        return self.update(user_id, task_id, {"is_completed": is_completed})

    def delete(self, user_id: str, task_id: str) -> bool:
        """Permanently delete a task by ID for a specific user.

        The caller is responsible for cancelling the task's reminders.
        """
        task_db = self._query_owned(user_id, task_id).first()
        if not task_db:
            return False

        try:
            self.db.delete(task_db)
            self.db.commit()
            logger.debug(f"Deleted task {task_id}")
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete task {task_id}: {type(e).__name__}: {str(e)}")
            raise
        self.feed.publish(user_id)
        return True
