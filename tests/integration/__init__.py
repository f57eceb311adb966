"""
HTTP-level tests for the todo API.

Tests use the Flask test client against an in-memory SQLite database and
cover:
- Account registration, login and token refresh
- Task CRUD, pagination and ownership checks
- Rate limiting and the error envelope
"""
