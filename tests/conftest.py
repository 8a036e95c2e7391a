"""Pytest fixtures and configuration for taskmanager tests."""

import os

# Configure the app before any taskmanager module reads the environment.
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

import pytest
from datetime import datetime, timedelta
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient
import uuid

from taskmanager.database.database import Base, get_db
from taskmanager.database.repository import TaskRepository
from taskmanager.database.task_feed import TaskFeed
from taskmanager.models.task import Task, TaskPriority
from taskmanager.notifications.local import LocalNotifier
from taskmanager.reminders.scheduler import ReminderScheduler


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture
def test_user_id():
    """Test user ID for multi-user testing."""
    return "test-user-123"


@pytest.fixture
def engine():
    """In-memory engine shared by every session of a test."""
    from taskmanager.database import models  # noqa: F401

    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session(session_factory, test_user_id):
    """Create a database session for testing.

    Also creates a test user in the database (required by the tasks
    foreign key).
    """
    from taskmanager.database.models import UserDB

    session = session_factory()

    now = datetime.utcnow()
    test_user_db = UserDB(
        id=test_user_id,
        email="test@example.com",
        name="Test User",
        created_at=now,
        updated_at=now,
    )
    session.add(test_user_db)
    session.commit()

    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def task_feed():
    """An isolated task feed (not the process-wide one)."""
    return TaskFeed()


@pytest.fixture
def task_repository(db_session: Session, task_feed):
    """Create a TaskRepository instance for testing."""
    return TaskRepository(db_session, feed=task_feed)


@pytest.fixture
def sample_task_base(test_user_id):
    """Base task data for creating test tasks.

    Returns a dict with default task attributes that can be overridden.
    """
    now = datetime.utcnow()
    return {
        "id": str(uuid.uuid4()),
        "user_id": test_user_id,
        "title": "Test Task",
        "description": "Test description",
        "due_date": now + timedelta(days=1),
        "category": "Work",
        "is_completed": False,
        "priority": TaskPriority.MEDIUM,
        "created_at": now,
        "updated_at": now,
    }


@pytest.fixture
def sample_task(sample_task_base):
    """Create a sample Task object for testing."""
    return Task(**sample_task_base)


@pytest.fixture
def delivered():
    """Notifications delivered by the test notifier, as (id, title, body)."""
    return []


@pytest.fixture
def local_notifier(delivered):
    """A paused local notifier: jobs are stored but never fire."""
    notifier = LocalNotifier(deliver=lambda *args: delivered.append(args))
    notifier.start(paused=True)
    try:
        yield notifier
    finally:
        notifier.shutdown()


@pytest.fixture
def reminder_scheduler(local_notifier):
    return ReminderScheduler(local_notifier)


@pytest.fixture
def test_user(test_user_id):
    """Create a test user object."""
    from taskmanager.models.user import User
    now = datetime.utcnow()
    return User(
        id=test_user_id,
        email="test@example.com",
        name="Test User",
        created_at=now,
        updated_at=now,
    )


@pytest.fixture
def app_client(db_session: Session, session_factory, reminder_scheduler, task_feed):
    """FastAPI test client with test database, scheduler and feed (no auth override)."""
    from taskmanager.api.app import app
    from taskmanager.database.database import get_session_factory
    from taskmanager.database.task_feed import get_task_feed
    from taskmanager.reminders.scheduler import get_reminder_scheduler

    # Override the get_db dependency to use our test database session
    def override_get_db():
        try:
            yield db_session
        finally:
            pass  # Don't close the session here, let the fixture handle it

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_reminder_scheduler] = lambda: reminder_scheduler
    app.dependency_overrides[get_task_feed] = lambda: task_feed

    with TestClient(app) as client:
        yield client

    # Clean up dependency overrides
    app.dependency_overrides.clear()


@pytest.fixture
def test_client(app_client, test_user):
    """Test client authenticated as the test user."""
    from taskmanager.api.app import app
    from taskmanager.auth.dependencies import get_current_user

    # Override authentication to return test user
    app.dependency_overrides[get_current_user] = lambda: test_user
    return app_client
