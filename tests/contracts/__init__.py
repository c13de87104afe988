"""Contract tests for the Task Manager API."""
