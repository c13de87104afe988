"""
Test suite for the Task Manager application.

This package contains:
- unit/: validation, model, service and client tests
- integration/: REST API tests through the Flask test client
- contracts/: response payloads checked against contracts/openapi.yaml
"""
