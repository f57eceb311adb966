"""
Test suite for the todo API.

This package contains:
- unit/: Isolated tests for tokens, passwords, the auth gate, the rate
  limiter, validation, services and repositories
- integration/: HTTP-level tests through the Flask test client
"""
