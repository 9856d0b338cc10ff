"""Typed failures raised by the account services.

Every error carries a machine-readable ``code`` and a human-readable
``message``. Messages never include hashes, tokens or storage details.
"""

from __future__ import annotations


class ServiceError(Exception):
    """Base class for request-scoped service failures."""

    code = "internal_error"
    default_message = "Unexpected error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def as_dict(self) -> dict:
        return {"error": self.code, "message": self.message}


class WeakInputError(ServiceError):
    code = "weak_input"
    default_message = "Invalid input"


class DuplicateUsernameError(ServiceError):
    code = "duplicate_username"
    default_message = "Username already taken"


class AuthenticationError(ServiceError):
    """Raised for unknown users and wrong passwords alike."""

    code = "authentication_failed"
    default_message = "Invalid username or password"


class TokenExpiredError(ServiceError):
    code = "token_expired"
    default_message = "Session token expired"


class TokenInvalidError(ServiceError):
    code = "token_invalid"
    default_message = "Invalid session token"


class NotFoundError(ServiceError):
    code = "not_found"
    default_message = "User not found"


class StorageError(ServiceError):
    """Wraps any persistence-layer failure; the cause is chained, not exposed."""

    code = "storage_error"
    default_message = "Storage unavailable"


class RateLimitedError(ServiceError):
    code = "rate_limited"
    default_message = "Too many requests. Try again shortly."

    def __init__(self, message: str | None = None, *, retry_after: int = 0):
        super().__init__(message)
        self.retry_after = retry_after
