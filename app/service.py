"""
Task resource service.

The single authority for task CRUD. Every operation validates its input,
applies it to the injected store as one logical unit and returns a
``TaskResult`` envelope instead of raising, so the HTTP layer (or any other
caller) only has to translate ``ok``/``kind`` into its own vocabulary.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from app.errors import ErrorKind, TaskError, TaskNotFoundError
from app.models import Task, ensure_utc
from app.store import TaskStore
from app.validation import validate_task

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Server Error"


@dataclass(frozen=True)
class TaskResult:
    """
    Uniform outcome of a task operation.

    Attributes:
        ok: Whether the operation succeeded.
        data: Success payload (a task, a list of tasks, or an empty dict).
        error: Failure message safe to show to the user.
        kind: Failure kind, None on success.
    """

    ok: bool
    data: Any = None
    error: str | None = None
    kind: ErrorKind | None = None

    @classmethod
    def success(cls, data: Any) -> "TaskResult":
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, exc: TaskError) -> "TaskResult":
        message = str(exc)
        if exc.kind is ErrorKind.INTERNAL:
            message = INTERNAL_ERROR_MESSAGE
        return cls(ok=False, error=message, kind=exc.kind)

    def to_dict(self) -> dict[str, Any]:
        """Return the envelope as ``{ok, data}`` or ``{ok, error, kind}``."""
        if self.ok:
            return {"ok": True, "data": self.data}
        return {"ok": False, "error": self.error, "kind": self.kind.value}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _record_of(task: Task) -> dict[str, Any]:
    """Current storage values of a task, used as the base of an update."""
    return {
        "title": task.title,
        "description": task.description or "",
        "status": task.status,
        "priority": task.priority,
        "due_date": ensure_utc(task.due_date),
    }


class TaskService:
    """
    CRUD operations over a task store.

    Args:
        store: The persisted task collection.
        clock: Callable returning the current time. Defaults to UTC now.
    """

    def __init__(self, store: TaskStore, clock: Callable[[], datetime] | None = None):
        self.store = store
        self._clock = clock or _utcnow
        self._lock = threading.Lock()
        self._last_timestamp: datetime | None = None

    def _timestamp(self, after: datetime | None = None) -> datetime:
        """
        Return the current time, strictly later than any timestamp this
        service handed out before and than ``after``.
        """
        with self._lock:
            now = ensure_utc(self._clock())
            floors = [t for t in (self._last_timestamp, ensure_utc(after)) if t is not None]
            if floors and now <= max(floors):
                now = max(floors) + timedelta(microseconds=1)
            self._last_timestamp = now
            return now

    def list_tasks(self) -> TaskResult:
        """Return all tasks ordered by creation time, newest first."""
        try:
            tasks = self.store.find_all()
        except TaskError as exc:
            return TaskResult.failure(exc)
        return TaskResult.success([task.to_dict() for task in tasks])

    def get_task(self, task_id: str) -> TaskResult:
        """Return a single task, or a NotFound failure."""
        try:
            task = self.store.find_by_id(task_id)
            if task is None:
                raise TaskNotFoundError(task_id)
        except TaskError as exc:
            return TaskResult.failure(exc)
        return TaskResult.success(task.to_dict())

    def create_task(self, fields: Mapping[str, Any]) -> TaskResult:
        """
        Validate and persist a new task.

        The store assigns the id; ``createdAt`` and ``updatedAt`` are set to
        the same instant. Unknown fields, including attempts to supply the
        server-assigned ones, are ignored.
        """
        try:
            record = validate_task(fields)
            now = self._timestamp()
            record["created_at"] = now
            record["updated_at"] = now
            task = self.store.insert(record)
        except TaskError as exc:
            return TaskResult.failure(exc)

        logger.info("Created task with ID: %s", task.id)
        return TaskResult.success(task.to_dict())

    def update_task(self, task_id: str, fields: Mapping[str, Any]) -> TaskResult:
        """
        Merge the supplied fields onto a task and persist the result.

        Fields that are not supplied keep their current value. The merged
        document is validated like a new task before anything is written,
        and ``updatedAt`` always moves forward.
        """
        try:
            task = self.store.find_by_id(task_id)
            if task is None:
                raise TaskNotFoundError(task_id)

            record = validate_task(fields, base=_record_of(task))
            record["updated_at"] = self._timestamp(after=task.updated_at)

            task = self.store.replace(task_id, record)
            if task is None:
                raise TaskNotFoundError(task_id)
        except TaskError as exc:
            return TaskResult.failure(exc)

        logger.info("Updated task %s", task_id)
        return TaskResult.success(task.to_dict())

    def delete_task(self, task_id: str) -> TaskResult:
        """Permanently remove a task."""
        try:
            if not self.store.delete(task_id):
                raise TaskNotFoundError(task_id)
        except TaskError as exc:
            return TaskResult.failure(exc)

        logger.info("Deleted task %s", task_id)
        return TaskResult.success({})
