"""
Shared pytest fixtures for the Task Manager test suite.

This module contains fixtures that are shared across all test modules.
Fixtures follow the Arrange-Act-Assert (AAA) pattern and ensure
test isolation by providing fresh data for each test.
"""

import os
import pytest
from datetime import datetime, timedelta, timezone
from typing import Any
from faker import Faker

# Set testing environment before importing app
os.environ["FLASK_ENV"] = "testing"

from app import create_app, db
from app.models import Task, TaskStatus, TaskPriority
from app.service import TaskService
from app.store import TaskStore


# Initialize Faker for generating test data
fake = Faker()


# -----------------------------------------------------------------------------
# Application Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture(scope="session")
def app():
    """
    Create application instance for the test session.

    Yields:
        Flask application instance configured for testing.
    """
    application = create_app("testing")
    yield application


@pytest.fixture(scope="function")
def client(app):
    """
    Create a test client for making HTTP requests.

    Args:
        app: Flask application fixture.

    Yields:
        Flask test client for making HTTP requests.
    """
    with app.test_client() as test_client:
        yield test_client


@pytest.fixture(scope="function")
def db_session(app):
    """
    Create a fresh database for each test.

    Tables are created before the test and dropped afterwards,
    so no task survives from one test to the next.

    Args:
        app: Flask application fixture.

    Yields:
        The Flask-SQLAlchemy extension, inside an application context.
    """
    with app.app_context():
        db.create_all()
        yield db
        db.session.rollback()
        db.drop_all()


@pytest.fixture
def service(db_session) -> TaskService:
    """Provide a task service over the test database."""
    return TaskService(TaskStore(db_session))


# -----------------------------------------------------------------------------
# Test Data Factory Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def task_factory(db_session):
    """
    Factory fixture for creating Task rows directly in the database.

    Each call creates a task one second after the previous one, so
    creation order is unambiguous when tests check sorting.

    Example:
        def test_something(task_factory):
            task = task_factory(title="My Task")
            assert task.id is not None
    """
    base_time = datetime.now(timezone.utc) - timedelta(hours=1)
    created: list[Task] = []

    def _create_task(
        title: str | None = None,
        description: str | None = None,
        status: str = TaskStatus.PENDING.value,
        priority: str = TaskPriority.MEDIUM.value,
        due_date: datetime | None = None
    ) -> Task:
        timestamp = base_time + timedelta(seconds=len(created))
        task = Task(
            title=title or fake.sentence(nb_words=4)[:100],
            description=description if description is not None else fake.sentence(),
            status=status,
            priority=priority,
            due_date=due_date,
            created_at=timestamp,
            updated_at=timestamp,
        )
        db_session.session.add(task)
        db_session.session.commit()
        created.append(task)
        return task

    return _create_task


@pytest.fixture
def sample_task(task_factory) -> Task:
    """Create a single pending, medium priority task."""
    return task_factory(
        title="Sample Task",
        description="This is a sample task for testing",
        status=TaskStatus.PENDING.value,
        priority=TaskPriority.MEDIUM.value
    )


@pytest.fixture
def multiple_tasks(task_factory) -> list[Task]:
    """
    Create multiple tasks with different statuses and priorities,
    oldest first.
    """
    return [
        task_factory(
            title="High Priority Pending",
            status=TaskStatus.PENDING.value,
            priority=TaskPriority.HIGH.value,
            due_date=datetime.now(timezone.utc) + timedelta(days=1)
        ),
        task_factory(
            title="Medium Priority In Progress",
            status=TaskStatus.IN_PROGRESS.value,
            priority=TaskPriority.MEDIUM.value
        ),
        task_factory(
            title="Low Priority Completed",
            status=TaskStatus.COMPLETED.value,
            priority=TaskPriority.LOW.value
        ),
    ]


# -----------------------------------------------------------------------------
# Test Data Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def valid_task_data() -> dict[str, Any]:
    """
    Provide valid task data for POST/PUT requests.

    Returns:
        Dictionary with valid task field values.
    """
    return {
        "title": "Test Task",
        "description": "This is a test task description",
        "status": TaskStatus.PENDING.value,
        "priority": TaskPriority.MEDIUM.value,
        "dueDate": (datetime.now(timezone.utc) + timedelta(days=7)).date().isoformat()
    }


@pytest.fixture
def minimal_task_data() -> dict[str, str]:
    """Provide minimal valid task data (only required fields)."""
    return {"title": "Minimal Task"}


@pytest.fixture
def api_headers() -> dict[str, str]:
    """Provide common headers for API requests."""
    return {
        "Content-Type": "application/json",
        "Accept": "application/json"
    }
