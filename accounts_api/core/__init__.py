"""
Core utilities shared across the accounts API.

This package hosts configuration, the error taxonomy, password/token
primitives and cross-cutting helpers such as rate limiting.
"""
