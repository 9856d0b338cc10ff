"""
Configuration helpers for the accounts backend.

Routers and services read settings through get_settings() instead of touching
os.environ directly.
"""

from dataclasses import dataclass
from functools import lru_cache
import logging
import os

DEFAULT_PROFILE_FIELDS = ("display_name", "bio", "avatar_url", "location", "website")


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    database_url: str
    session_ttl_seconds: int
    password_min_length: int
    username_max_length: int
    usernames_case_sensitive: bool
    profile_fields: tuple[str, ...]
    profile_update_attempts: int
    login_rate_limit: int
    login_rate_window_seconds: int
    log_level: str


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def _bool(value: str | None, default: bool = False) -> bool:
        if value is None:
            return default
        return value.strip().lower() in {"1", "true", "yes", "on"}

    def _level(value: str | None, default: str = "INFO") -> str:
        name = (value or "").strip().upper()
        # getLevelName maps known names to ints and anything else to a string.
        return name if isinstance(logging.getLevelName(name), int) else default

    def _list(value: str | None, default: tuple[str, ...]) -> tuple[str, ...]:
        if value is None:
            return default
        items = tuple(item.strip() for item in value.split(",") if item.strip())
        return items or default

    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        database_url=os.getenv("DATABASE_URL", "sqlite:///./accounts.db").strip(),
        session_ttl_seconds=_int(os.getenv("SESSION_TTL_SECONDS", "86400"), 86400),
        password_min_length=max(1, _int(os.getenv("PASSWORD_MIN_LENGTH", "6"), 6)),
        username_max_length=_int(os.getenv("USERNAME_MAX_LENGTH", "64"), 64),
        usernames_case_sensitive=_bool(os.getenv("USERNAMES_CASE_SENSITIVE"), False),
        profile_fields=_list(os.getenv("PROFILE_FIELDS"), DEFAULT_PROFILE_FIELDS),
        profile_update_attempts=max(1, _int(os.getenv("PROFILE_UPDATE_ATTEMPTS", "5"), 5)),
        login_rate_limit=_int(os.getenv("LOGIN_RATE_LIMIT", "10"), 10),
        login_rate_window_seconds=_int(os.getenv("LOGIN_RATE_WINDOW_SECONDS", "300"), 300),
        log_level=_level(os.getenv("LOG_LEVEL")),
    )
