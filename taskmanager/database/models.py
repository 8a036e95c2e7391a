"""SQLAlchemy database models for taskmanager."""

from datetime import datetime
import uuid
from sqlalchemy import Column, String, Boolean, DateTime, JSON, ForeignKey

from typing import Union, TypeVar, Type
from taskmanager.database.database import Base
from taskmanager.models.task import TaskPriority, TaskCategory

T = TypeVar('T')


def enum_to_value(enum_obj: Union[str, T]) -> str:
    """Convert enum to string value (handles both enum and string).

    Args:
        enum_obj: Enum instance or string value

    Returns:
        String value of the enum, or the string itself if already a string
    """
    if hasattr(enum_obj, 'value'):
        return enum_obj.value
    return str(enum_obj)


def value_to_enum(value: str, enum_class: Type[T], default: T) -> T:
    """Convert string to enum (case-insensitive) with fallback to default.

    Args:
        value: String value to convert
        enum_class: Enum class to convert to
        default: Default enum value if conversion fails

    Returns:
        Enum instance, or default if conversion fails
    """
    if not value:
        return default
    for member in enum_class:
        if member.value.lower() == str(value).lower():
            return member
    return default


class TaskDB(Base):
    """Database model for Task."""

    __tablename__ = "tasks"

    # Primary key
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))

    # Owner association (immutable)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Basic fields
    title = Column(String, nullable=False)
    description = Column(String, nullable=False, default="")
    due_date = Column(DateTime, nullable=False, index=True)
    category = Column(String, nullable=False, default=TaskCategory.WORK.value)
    is_completed = Column(Boolean, nullable=False, default=False)
    priority = Column(String, nullable=False, default=TaskPriority.MEDIUM.value)

    # Timestamps
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from taskmanager.models.task import Task

        return Task(
            id=self.id,
            user_id=self.user_id,
            title=self.title or "",
            description=self.description or "",
            due_date=self.due_date,
            category=self.category or "",
            is_completed=bool(self.is_completed),
            priority=value_to_enum(self.priority, TaskPriority, TaskPriority.MEDIUM),
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_pydantic(cls, task):
        """Create database model from Pydantic model."""
        return cls(
            id=task.id,
            user_id=task.user_id,
            title=task.title,
            description=task.description,
            due_date=task.due_date,
            category=task.category,
            is_completed=task.is_completed,
            priority=enum_to_value(task.priority),
            created_at=task.created_at,
            updated_at=task.updated_at,
        )


class UserDB(Base):
    """Database model for User."""

    __tablename__ = "users"

    # Primary key (UUID for password accounts, Google user ID for Google accounts)
    id = Column(String, primary_key=True)

    # User profile
    email = Column(String, nullable=False, unique=True)
    name = Column(String, nullable=True)

    # Null for accounts that only sign in with Google
    password_hash = Column(String, nullable=True)

    # Timestamps
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from taskmanager.models.user import User
        return User(
            id=self.id,
            email=self.email,
            name=self.name,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_pydantic(cls, user, password_hash=None):
        """Create database model from Pydantic model."""
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            password_hash=password_hash,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class GoogleOAuthTokenDB(Base):
    """Per-user OAuth tokens for Google integrations (Calendar).

    Tokens are stored encrypted-at-rest (see repository layer); do NOT log raw tokens.
    """

    __tablename__ = "google_oauth_tokens"

    # Composite primary key: one row per user/provider/product.
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    provider = Column(String, primary_key=True)  # e.g. "google"
    product = Column(String, primary_key=True)   # e.g. "calendar"

    scopes = Column(JSON, nullable=False, default=list)

    refresh_token_encrypted = Column(String, nullable=False)
    access_token_encrypted = Column(String, nullable=True)
    expiry = Column(DateTime, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
