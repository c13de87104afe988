"""Unit tests for the Task Manager modules."""
