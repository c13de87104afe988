"""
Routes package for the Task Manager application.

This package contains route blueprints:
- api: REST API endpoints for the task resource
"""
