"""Unit tests for individual components of the todo API."""
