"""
Error taxonomy for the task resource.

Three kinds of failure can come out of a task operation:

- ``ValidationError``: the caller sent something the constraints reject.
  Correctable by the client, reported before any write happens.
- ``NotFound``: the referenced task id does not exist. Malformed ids land
  here as well, there is no separate bad-request class.
- ``InternalError``: the store failed. Never retried, never described to the
  caller beyond a generic message.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Failure kinds reported in a result envelope."""

    VALIDATION = "ValidationError"
    NOT_FOUND = "NotFound"
    INTERNAL = "InternalError"


class TaskError(Exception):
    """Base class for every task operation failure."""

    kind: ErrorKind = ErrorKind.INTERNAL


class TaskValidationError(TaskError):
    """
    A candidate task violates a field constraint.

    Attributes:
        field: Wire name of the offending field.
        reason: Human readable description of the violation.
    """

    kind = ErrorKind.VALIDATION

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"'{field}' {reason}")


class TaskNotFoundError(TaskError):
    """No task exists with the requested id."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__("Task not found")


class StoreError(TaskError):
    """The underlying store could not complete a request."""

    kind = ErrorKind.INTERNAL
