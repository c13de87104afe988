"""
Resilience tests for store failures.

Verifies that database errors surface as a generic 500 error envelope,
that no store detail leaks to the caller, and that the API keeps
working once the store recovers.
"""

from __future__ import annotations

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

pytestmark = [pytest.mark.integration, pytest.mark.resilience]

SECRET_DETAIL = "could not connect to server at db.internal:5432"


def _raise_operational_error(*_, **__):
    raise OperationalError("SELECT", {}, Exception(SECRET_DETAIL))


@pytest.fixture
def broken_reads(db_session, monkeypatch):
    """Make every read through the session fail."""
    monkeypatch.setattr(Session, "scalars", _raise_operational_error)
    monkeypatch.setattr(Session, "get", _raise_operational_error)


@pytest.mark.parametrize(
    "method, path",
    [
        ("get", "/api/tasks"),
        ("get", "/api/tasks/abc"),
        ("put", "/api/tasks/abc"),
        ("delete", "/api/tasks/abc"),
    ],
)
def test_store_failure_returns_generic_500(client, broken_reads, method, path):
    """Test that store errors map to 500 without leaking details."""
    # Act
    response = getattr(client, method)(path, json={})

    # Assert
    assert response.status_code == 500
    body = response.get_json()
    assert body == {"success": False, "error": "Server Error"}
    assert SECRET_DETAIL not in response.get_data(as_text=True)


def test_failed_insert_returns_500_and_stores_nothing(client, db_session, monkeypatch):
    """Test that a failed commit on create is rolled back."""
    # Arrange
    monkeypatch.setattr(Session, "commit", _raise_operational_error)

    # Act
    response = client.post("/api/tasks", json={"title": "Never stored"})
    monkeypatch.undo()

    # Assert
    assert response.status_code == 500
    assert client.get("/api/tasks").get_json()["count"] == 0


def test_validation_errors_do_not_touch_the_store(client, db_session, monkeypatch):
    """Invalid input is rejected with 400 before any write is attempted."""
    # Arrange
    monkeypatch.setattr(Session, "commit", _raise_operational_error)

    # Act
    response = client.post("/api/tasks", json={"title": ""})

    # Assert
    assert response.status_code == 400


def test_api_recovers_after_store_failure(client, db_session, monkeypatch):
    """Test that a transient failure does not poison later requests."""
    # Arrange
    monkeypatch.setattr(Session, "scalars", _raise_operational_error)
    assert client.get("/api/tasks").status_code == 500
    monkeypatch.undo()

    # Act
    create_response = client.post("/api/tasks", json={"title": "After outage"})
    list_response = client.get("/api/tasks")

    # Assert
    assert create_response.status_code == 201
    assert list_response.get_json()["count"] == 1


def test_failed_rollback_still_returns_generic_500(client, db_session, monkeypatch):
    """Test that a rollback failing after a failed commit is still a 500."""
    # Arrange
    monkeypatch.setattr(Session, "commit", _raise_operational_error)
    monkeypatch.setattr(Session, "rollback", _raise_operational_error)

    # Act
    response = client.post("/api/tasks", json={"title": "Never stored"})
    monkeypatch.undo()
    db_session.session.rollback()

    # Assert
    assert response.status_code == 500
    assert response.get_json() == {"success": False, "error": "Server Error"}
    assert SECRET_DETAIL not in response.get_data(as_text=True)
    assert client.get("/api/tasks").get_json()["count"] == 0
