"""
Persisted task collection backed by Flask-SQLAlchemy.

The store speaks storage form (``due_date``, ``created_at``) and reports
"no such task" as ``None``/``False``. Anything SQLAlchemy raises is rolled
back and surfaced as ``StoreError`` so callers can tell a missing document
apart from a broken database.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from app.errors import StoreError
from app.models import Task

logger = logging.getLogger(__name__)

WRITABLE_COLUMNS = ("title", "description", "status", "priority", "due_date")


class TaskStore:
    """
    Task collection over a SQLAlchemy session.

    Args:
        database: The Flask-SQLAlchemy extension whose scoped session is used
            for every call.
    """

    def __init__(self, database: SQLAlchemy):
        self._db = database

    @property
    def session(self):
        return self._db.session

    def _fail(self, action: str, exc: SQLAlchemyError) -> StoreError:
        logger.error("Task store failed to %s: %s", action, exc)
        try:
            self.session.rollback()
        except SQLAlchemyError as rollback_exc:
            logger.error("Task store rollback failed: %s", rollback_exc)
        return StoreError(f"Task store failed to {action}")

    def insert(self, record: Mapping[str, Any]) -> Task:
        """Persist a new task and return it with its generated id."""
        task = Task(**{key: record[key] for key in WRITABLE_COLUMNS})
        task.created_at = record["created_at"]
        task.updated_at = record["updated_at"]
        try:
            self.session.add(task)
            self.session.commit()
        except SQLAlchemyError as exc:
            raise self._fail("insert task", exc) from exc
        return task

    def find_all(self) -> list[Task]:
        """Return every task, newest first."""
        stmt = select(Task).order_by(Task.created_at.desc())
        try:
            return list(self.session.scalars(stmt).all())
        except SQLAlchemyError as exc:
            raise self._fail("list tasks", exc) from exc

    def find_by_id(self, task_id: str) -> Task | None:
        """Return the task with ``task_id``, or None when it does not exist."""
        try:
            return self.session.get(Task, task_id)
        except SQLAlchemyError as exc:
            raise self._fail("load task", exc) from exc

    def replace(self, task_id: str, record: Mapping[str, Any]) -> Task | None:
        """
        Overwrite the writable fields of a task.

        Returns:
            The stored task, or None when ``task_id`` does not exist.
        """
        try:
            task = self.session.get(Task, task_id)
            if task is None:
                return None
            for key in WRITABLE_COLUMNS:
                setattr(task, key, record[key])
            task.updated_at = record["updated_at"]
            self.session.commit()
        except SQLAlchemyError as exc:
            raise self._fail("update task", exc) from exc
        return task

    def delete(self, task_id: str) -> bool:
        """Remove a task. Returns False when ``task_id`` does not exist."""
        try:
            task = self.session.get(Task, task_id)
            if task is None:
                return False
            self.session.delete(task)
            self.session.commit()
        except SQLAlchemyError as exc:
            raise self._fail("delete task", exc) from exc
        return True
