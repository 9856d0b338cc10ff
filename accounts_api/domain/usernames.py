"""Domain helpers for username and profile field validation."""
from __future__ import annotations

from typing import Any, Iterable, Mapping

from accounts_api.core.errors import WeakInputError

PROTECTED_FIELDS = frozenset({"id", "username", "password", "password_hash", "version", "created_at", "updated_at"})


def normalize_username(value: str | None, *, case_sensitive: bool = False) -> str:
    """Strip surrounding whitespace and apply the case policy."""
    normalized = (value or "").strip()
    return normalized if case_sensitive else normalized.lower()


def validate_username(value: str, *, max_length: int) -> str:
    if not value:
        raise WeakInputError("Username is required")
    if len(value) > max_length:
        raise WeakInputError(f"Username too long. Use at most {max_length} characters")
    if any(ch.isspace() for ch in value):
        raise WeakInputError("Username must not contain whitespace")
    return value


def filter_profile_fields(fields: Mapping[str, Any] | None, allowed: Iterable[str]) -> dict[str, Any]:
    """Return a copy of ``fields`` or raise when a key is outside the allow-list."""
    if not fields:
        return {}
    allowed_set = set(allowed)
    protected = sorted(key for key in fields if key in PROTECTED_FIELDS)
    if protected:
        raise WeakInputError(f"Profile edit cannot change: {', '.join(protected)}")
    unknown = sorted(key for key in fields if key not in allowed_set)
    if unknown:
        raise WeakInputError(f"Unknown profile field(s): {', '.join(unknown)}")
    return dict(fields)


def merge_profile(current: Mapping[str, Any] | None, changes: Mapping[str, Any]) -> dict[str, Any]:
    """Apply ``changes`` on top of ``current``; ``None`` values remove the key."""
    merged = dict(current or {})
    for key, value in changes.items():
        if value is None:
            merged.pop(key, None)
        else:
            merged[key] = value
    return merged
