"""
Route blueprints for the todo API.

- auth: health probe, registration, login and token refresh
- todos: authenticated task CRUD
"""
