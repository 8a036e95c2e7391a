"""Task data model for taskmanager."""

from datetime import datetime, timezone
from typing import Any, Dict
from enum import Enum
from pydantic import BaseModel, Field, field_validator


class TaskPriority(str, Enum):
    """Task priority enumeration."""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class TaskCategory(str, Enum):
    """Built-in task categories.

    Tasks may also carry any user-defined category label; these are the
    ones offered by default.
    """
    WORK = "Work"
    HOME = "Home"
    PERSONAL = "Personal"
    OTHER = "Other"


def to_utc_naive(value: datetime) -> datetime:
    """Normalize a datetime to naive UTC (the storage convention).

    Naive input is assumed to already be UTC.
    """
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class Task(BaseModel):
    """Canonical Task model."""

    id: str = Field(..., description="Unique task identifier (UUID v4), immutable once assigned")
    user_id: str = Field(..., description="Owner identity, set at creation")
    title: str = Field(..., description="Task title")
    description: str = Field("", description="Free-form task description")
    due_date: datetime = Field(..., description="Absolute due timestamp (naive UTC)")
    category: str = Field(TaskCategory.WORK.value, description="Built-in or user-defined category label")
    is_completed: bool = Field(False, description="Whether the task is completed")
    priority: TaskPriority = Field(TaskPriority.MEDIUM, description="Task priority")
    created_at: datetime = Field(..., description="Task creation timestamp")
    updated_at: datetime = Field(..., description="Task last update timestamp")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True

    @field_validator("due_date", "created_at", "updated_at")
    @classmethod
    def _normalize_timestamps(cls, value: datetime) -> datetime:
        return to_utc_naive(value)

    def to_document(self) -> Dict[str, Any]:
        """Export the task in the persisted document shape."""
        return {
            "title": self.title,
            "description": self.description,
            "dueDate": self.due_date,
            "category": self.category,
            "isCompleted": self.is_completed,
            "priority": self.priority,
            "userId": self.user_id,
        }

    @classmethod
    def from_document(cls, task_id: str, doc: Dict[str, Any]) -> "Task":
        """Build a Task from a raw document, applying the document defaults.

        Missing text fields become empty strings, a missing completion flag
        is False and a missing or unknown priority is Medium.
        """
        priority = doc.get("priority") or TaskPriority.MEDIUM.value
        if priority not in {p.value for p in TaskPriority}:
            priority = TaskPriority.MEDIUM.value
        due_date = doc["dueDate"]
        if isinstance(due_date, str):
            due_date = datetime.fromisoformat(due_date)
        now = datetime.utcnow()
        return cls(
            id=task_id,
            user_id=doc.get("userId", ""),
            title=doc.get("title") or "",
            description=doc.get("description") or "",
            due_date=due_date,
            category=doc.get("category") or "",
            is_completed=bool(doc.get("isCompleted", False)),
            priority=priority,
            created_at=doc.get("createdAt") or now,
            updated_at=doc.get("updatedAt") or now,
        )
