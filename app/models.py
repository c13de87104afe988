"""
Database models for the Task Manager application.

This module defines SQLAlchemy models representing the data structure
of the application. Each model maps to a database table.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from app import db


class TaskStatus(str, Enum):
    """Enumeration of possible task statuses."""

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class TaskPriority(str, Enum):
    """Enumeration of possible task priorities."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def generate_task_id() -> str:
    """Return a fresh opaque task identifier."""
    return uuid.uuid4().hex


def ensure_utc(value: datetime | None) -> datetime | None:
    """
    Normalize a datetime to timezone-aware UTC.

    SQLite commonly returns naive datetime values even when timezone-aware
    columns are declared; those are assumed to already be UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class Task(db.Model):
    """
    Task model representing a to-do item.

    Attributes:
        id: Opaque unique identifier, generated on insert and never reused.
        title: Short title describing the task.
        description: Longer description, empty when not provided.
        status: Current status (pending, in-progress, completed).
        priority: Task priority level (low, medium, high).
        due_date: Optional deadline for the task.
        created_at: Timestamp when the task was created.
        updated_at: Timestamp when the task was last modified.
    """

    __tablename__ = "tasks"

    id: str = db.Column(db.String(32), primary_key=True, default=generate_task_id)
    title: str = db.Column(db.String(100), nullable=False)
    description: str = db.Column(db.String(500), nullable=False, default="")
    status: str = db.Column(
        db.String(20),
        nullable=False,
        default=TaskStatus.PENDING.value
    )
    priority: str = db.Column(
        db.String(20),
        nullable=False,
        default=TaskPriority.MEDIUM.value
    )
    due_date: datetime | None = db.Column(db.DateTime(timezone=True), nullable=True)
    created_at: datetime = db.Column(db.DateTime(timezone=True), nullable=False, index=True)
    updated_at: datetime = db.Column(db.DateTime(timezone=True), nullable=False)

    @staticmethod
    def _to_utc_iso(value: datetime | None) -> str | None:
        """Convert datetime to an ISO-8601 UTC string."""
        value = ensure_utc(value)
        return value.isoformat() if value is not None else None

    def to_dict(self) -> dict[str, Any]:
        """
        Convert the task to its wire representation.

        Returns:
            Dictionary keyed by the field names the client expects.
        """
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "priority": self.priority,
            "dueDate": self._to_utc_iso(self.due_date),
            "createdAt": self._to_utc_iso(self.created_at),
            "updatedAt": self._to_utc_iso(self.updated_at),
        }

    def __repr__(self) -> str:
        """Return string representation of the task."""
        return f"<Task {self.id}: {self.title}>"
