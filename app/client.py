"""
HTTP client and view-state models for the task API.

This is the consumer side of the REST contract:

1. ``TaskAPIClient`` wraps the five task endpoints with :mod:`requests`.
2. ``TaskForm`` is the short-lived form state for creating or editing a task.
3. ``TaskListModel`` owns the cached task list and re-fetches it after every
   mutation. The server stays authoritative; the cache is only ever
   replaced, never patched locally.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import requests

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:5000/api"
RETRY_MESSAGE = "Something went wrong. Please try again."


class TaskAPIError(Exception):
    """
    A task API call did not succeed.

    Attributes:
        message: Error text from the response envelope, or a generic message.
        status_code: HTTP status, or None when the request never got a response.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    @property
    def retryable(self) -> bool:
        """Transport failures and server errors are worth retrying."""
        return self.status_code is None or self.status_code >= 500

    @property
    def user_message(self) -> str:
        """Text to show the user: verbatim for client errors, generic otherwise."""
        return RETRY_MESSAGE if self.retryable else self.message


def _response_error_message(response: requests.Response, default: str) -> str:
    """Extract the ``error`` field from a failure envelope if possible."""
    try:
        payload = response.json()
    except ValueError:
        return default
    message = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(message, str) and message.strip():
        return message
    return default


class TaskAPIClient:
    """
    Thin wrapper around the task REST endpoints.

    Args:
        base_url: API root, e.g. ``http://localhost:5000/api``. Defaults to
            the ``TASK_API_URL`` environment variable.
        session: Optional :class:`requests.Session` to send requests with.
        timeout: Per-request timeout in seconds.
    """

    def __init__(
        self,
        base_url: str | None = None,
        session: requests.Session | None = None,
        timeout: float = 5.0,
    ):
        self.base_url = (base_url or os.environ.get("TASK_API_URL", DEFAULT_API_URL)).rstrip("/")
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})
        self.timeout = timeout

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _request(self, method: str, path: str, **kwargs) -> dict[str, Any]:
        """
        Send a request and return the decoded envelope.

        Raises:
            TaskAPIError: On transport failures and non-2xx responses.
        """
        try:
            response = self.session.request(
                method, self._url(path), timeout=self.timeout, **kwargs
            )
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise TaskAPIError("Task service unavailable") from exc

        if not response.ok:
            message = _response_error_message(response, f"Request failed ({response.status_code})")
            raise TaskAPIError(message, status_code=response.status_code)

        try:
            return response.json()
        except ValueError as exc:
            raise TaskAPIError("Invalid response from task service", response.status_code) from exc

    def get_all_tasks(self) -> dict[str, Any]:
        return self._request("GET", "/tasks")

    def get_task(self, task_id: str) -> dict[str, Any]:
        return self._request("GET", f"/tasks/{task_id}")

    def create_task(self, task_data: dict[str, Any]) -> dict[str, Any]:
        return self._request("POST", "/tasks", json=task_data)

    def update_task(self, task_id: str, task_data: dict[str, Any]) -> dict[str, Any]:
        return self._request("PUT", f"/tasks/{task_id}", json=task_data)

    def delete_task(self, task_id: str) -> dict[str, Any]:
        return self._request("DELETE", f"/tasks/{task_id}")


@dataclass
class TaskForm:
    """Editable copy of a task's fields, discarded after submit or navigation."""

    title: str = ""
    description: str = ""
    status: str = "pending"
    priority: str = "medium"
    due_date: str = ""

    @classmethod
    def from_task(cls, task: dict[str, Any]) -> "TaskForm":
        """Populate the form from a task, truncating ``dueDate`` to the calendar date."""
        due = task.get("dueDate") or ""
        return cls(
            title=task.get("title", ""),
            description=task.get("description") or "",
            status=task.get("status", "pending"),
            priority=task.get("priority", "medium"),
            due_date=due.split("T")[0],
        )

    def to_payload(self) -> dict[str, Any]:
        """Request body for create/update."""
        return {
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "priority": self.priority,
            "dueDate": self.due_date or None,
        }


class TaskListModel:
    """
    Cached task list backed by a :class:`TaskAPIClient`.

    Attributes:
        tasks: Last list fetched from the server, newest first.
        error: Message for the most recent failed call, or None.
    """

    def __init__(self, client: TaskAPIClient):
        self.client = client
        self.tasks: list[dict[str, Any]] = []
        self.error: str | None = None

    def _fail(self, exc: TaskAPIError) -> None:
        self.error = exc.user_message

    def refresh(self) -> bool:
        """Replace the cached list with the server's. Returns False on failure."""
        try:
            self.tasks = self.client.get_all_tasks()["data"]
        except TaskAPIError as exc:
            self._fail(exc)
            return False
        self.error = None
        return True

    def save(self, form: TaskForm, task_id: str | None = None) -> dict[str, Any] | None:
        """
        Create a task, or update ``task_id``, from the form, then re-fetch.

        Returns:
            The saved task, or None if the API rejected it.
        """
        try:
            if task_id is None:
                saved = self.client.create_task(form.to_payload())["data"]
            else:
                saved = self.client.update_task(task_id, form.to_payload())["data"]
        except TaskAPIError as exc:
            self._fail(exc)
            return None
        self.refresh()
        return saved

    def delete(self, task_id: str, confirm: Callable[[dict[str, Any]], bool]) -> bool:
        """
        Delete a task once ``confirm`` approves it, then re-fetch.

        Args:
            task_id: Id of the task to delete.
            confirm: Called with the cached task (or ``{"id": task_id}``);
                nothing is sent when it returns False.

        Returns:
            True if the task was deleted.
        """
        task = next((t for t in self.tasks if t.get("id") == task_id), {"id": task_id})
        if not confirm(task):
            return False
        try:
            self.client.delete_task(task_id)
        except TaskAPIError as exc:
            self._fail(exc)
            return False
        self.refresh()
        return True
