"""Security helpers (hashing and verification)."""

from __future__ import annotations

import secrets

from argon2 import PasswordHasher, exceptions as argon_exc

from .config import get_settings
from .errors import WeakInputError

_ph = PasswordHasher()


def check_password_strength(password: str | None, min_length: int | None = None) -> str:
    """Return the password unchanged or raise WeakInputError."""
    if min_length is None:
        min_length = get_settings().password_min_length
    if not password:
        raise WeakInputError("Password is required")
    if len(password) < min_length:
        raise WeakInputError(f"Password too short. Use at least {min_length} characters")
    return password


def hash_password(password: str, min_length: int | None = None) -> str:
    """Create a salted Argon2id hash."""
    return _ph.hash(check_password_strength(password, min_length))


def verify_password(password: str, stored_hash: str | None) -> bool:
    if not password or not stored_hash:
        return False
    try:
        return _ph.verify(stored_hash, password)
    except (argon_exc.VerifyMismatchError, argon_exc.VerificationError, argon_exc.InvalidHashError):
        return False


def needs_rehash(stored_hash: str) -> bool:
    """True when the hash was produced with parameters older than the current ones."""
    try:
        return _ph.check_needs_rehash(stored_hash)
    except argon_exc.InvalidHashError:
        return True


def generate_token() -> str:
    return secrets.token_urlsafe(32)


# Verified against when the username is unknown so both login paths cost the same.
DUMMY_HASH = _ph.hash(secrets.token_urlsafe(16))
