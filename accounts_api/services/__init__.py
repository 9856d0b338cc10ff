"""
High-level use cases for the accounts API.

Each service module orchestrates the repository and security helpers to
implement business rules (register, login, edit profile, revoke sessions).

Routers call these services instead of touching the database directly.
"""
