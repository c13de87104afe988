"""
REST API endpoints for Task management.

This module exposes the task service over HTTP. Every response uses the
same envelope: ``{"success": true, "data": ...}`` on success and
``{"success": false, "error": "..."}`` on failure.

Endpoints:
    GET    /api/health         - Health check
    GET    /api/tasks          - List all tasks, newest first
    GET    /api/tasks/<id>     - Get a single task by ID
    POST   /api/tasks          - Create a new task
    PUT    /api/tasks/<id>     - Update an existing task
    DELETE /api/tasks/<id>     - Delete a task
"""

import logging
import os

from flask import Blueprint, Response, current_app, jsonify, request

from app.errors import ErrorKind
from app.service import TaskResult, TaskService

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__)

STATUS_CODES = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INTERNAL: 500,
}


# -----------------------------------------------------------------------------
# Helper Functions
# -----------------------------------------------------------------------------

def get_service() -> TaskService:
    """Return the task service bound to the current application."""
    return current_app.extensions["task_service"]


def error_response(message: str, status_code: int) -> tuple[Response, int]:
    """Build the failure envelope."""
    return jsonify({"success": False, "error": message}), status_code


def respond(result: TaskResult, status_code: int = 200, **extra) -> tuple[Response, int]:
    """
    Translate a service result into an HTTP response.

    Args:
        result: Outcome returned by the task service.
        status_code: Status to use when the result is a success.
        **extra: Additional top-level keys for the success envelope.

    Returns:
        Tuple of JSON response and status code.
    """
    if not result.ok:
        status = STATUS_CODES[result.kind]
        if status == 500:
            logger.error("Request failed with internal error: %s %s", request.method, request.path)
        else:
            logger.warning("%s: %s", result.kind.value, result.error)
        return error_response(result.error, status)

    body = {"success": True, **extra, "data": result.data}
    return jsonify(body), status_code


@api_bp.after_request
def add_cors_headers(response: Response) -> Response:
    """Allow the configured browser origins to call the API."""
    origin = request.headers.get("Origin")
    allowed = current_app.config.get("CORS_ORIGINS", [])
    if origin and (origin in allowed or "*" in allowed):
        response.headers["Access-Control-Allow-Origin"] = origin
        response.headers["Access-Control-Allow-Methods"] = "GET, POST, PUT, DELETE, OPTIONS"
        response.headers["Access-Control-Allow-Headers"] = "Content-Type"
        response.headers["Vary"] = "Origin"
    return response


# -----------------------------------------------------------------------------
# API Endpoints
# -----------------------------------------------------------------------------

@api_bp.route("/health", methods=["GET"])
def health_check() -> tuple[Response, int]:
    """Health check endpoint for deployment verification."""
    return jsonify({
        "status": "healthy",
        "service": "tasks",
        "environment": os.getenv("ENVIRONMENT", "unknown"),
        "version": os.getenv("APP_VERSION", "unknown")
    }), 200


@api_bp.route("/tasks", methods=["GET"])
def get_tasks() -> tuple[Response, int]:
    """
    List all tasks ordered by creation time, newest first.

    Returns:
        JSON envelope with ``count`` and the task list, 200 status code.
    """
    logger.info("GET /api/tasks - Fetching all tasks")

    result = get_service().list_tasks()
    if not result.ok:
        return respond(result)

    logger.info("Found %d tasks", len(result.data))
    return respond(result, count=len(result.data))


@api_bp.route("/tasks/<task_id>", methods=["GET"])
def get_task(task_id: str) -> tuple[Response, int]:
    """
    Get a single task by ID.

    Args:
        task_id: The opaque identifier of the task.

    Returns:
        JSON envelope with the task and 200 status code,
        or an error envelope and 404 if not found.
    """
    logger.info("GET /api/tasks/%s - Fetching task", task_id)
    return respond(get_service().get_task(task_id))


@api_bp.route("/tasks", methods=["POST"])
def create_task() -> tuple[Response, int]:
    """
    Create a new task.

    Request Body (JSON):
        title: Task title (required, 1-100 characters)
        description: Task description (optional, up to 500 characters)
        status: Task status (optional, default: pending)
        priority: Task priority (optional, default: medium)
        dueDate: Due date in ISO format (optional)

    Returns:
        JSON envelope with the created task and 201 status code,
        or an error envelope and 400 if validation fails.
    """
    logger.info("POST /api/tasks - Creating new task")
    data = request.get_json(silent=True)
    return respond(get_service().create_task(data), 201)


@api_bp.route("/tasks/<task_id>", methods=["PUT"])
def update_task(task_id: str) -> tuple[Response, int]:
    """
    Update an existing task.

    Only the supplied fields change; the merged task is validated
    like a new one. A missing body is an empty set of changes.

    Args:
        task_id: The opaque identifier of the task.

    Returns:
        JSON envelope with the updated task and 200 status code,
        or an error envelope and 404/400 if not found or validation fails.
    """
    logger.info("PUT /api/tasks/%s - Updating task", task_id)
    data = request.get_json(silent=True)
    if data is None and not (request.is_json and request.get_data()):
        # No body, or a non-JSON one: nothing to change
        data = {}
    return respond(get_service().update_task(task_id, data))


@api_bp.route("/tasks/<task_id>", methods=["DELETE"])
def delete_task(task_id: str) -> tuple[Response, int]:
    """
    Delete a task.

    Args:
        task_id: The opaque identifier of the task.

    Returns:
        JSON envelope with empty data and 200 status code,
        or an error envelope and 404 if not found.
    """
    logger.info("DELETE /api/tasks/%s - Deleting task", task_id)
    return respond(get_service().delete_task(task_id))


# -----------------------------------------------------------------------------
# Error Handlers
# -----------------------------------------------------------------------------

@api_bp.app_errorhandler(404)
def not_found(error: Exception) -> tuple[Response, int]:
    """Handle 404 Not Found errors."""
    return error_response("Resource not found", 404)


@api_bp.app_errorhandler(405)
def method_not_allowed(error: Exception) -> tuple[Response, int]:
    """Handle 405 Method Not Allowed errors."""
    return error_response("Method not allowed", 405)


@api_bp.app_errorhandler(500)
def internal_error(error: Exception) -> tuple[Response, int]:
    """Handle 500 Internal Server errors."""
    logger.error("Internal server error: %s", error)
    return error_response("Server Error", 500)
