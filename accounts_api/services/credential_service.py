"""Password and session-token helpers (issue, verify, revoke)."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from accounts_api.core import security
from accounts_api.core.config import Settings, get_settings
from accounts_api.core.errors import TokenExpiredError, TokenInvalidError
from accounts_api.repositories.sql_repository import SQLRepository

logger = logging.getLogger(__name__)

MIN_TTL_SECONDS = 60


@dataclass(frozen=True)
class Token:
    access_token: str
    user_id: str
    expires_at: datetime
    token_type: str = "bearer"

    def as_dict(self) -> dict:
        """Wire form: expiry as unix seconds, user id omitted."""
        return {
            "access_token": self.access_token,
            "token_type": self.token_type,
            "expires_at": int(self.expires_at.timestamp()),
        }


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass
class CredentialManager:
    """Hashes passwords and manages the server-side session table."""

    settings: Settings = field(default_factory=get_settings)
    repository: SQLRepository = field(default_factory=SQLRepository)

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    @property
    def ttl(self) -> timedelta:
        return timedelta(seconds=max(MIN_TTL_SECONDS, self.settings.session_ttl_seconds))

    # -------------------------------------- passwords --------------------------------------
    def hash_password(self, password: str) -> str:
        return security.hash_password(password, self.settings.password_min_length)

    def verify_password(self, password: str, stored_hash: str | None) -> bool:
        return security.verify_password(password, stored_hash)

    def needs_rehash(self, stored_hash: str) -> bool:
        return security.needs_rehash(stored_hash)

    # -------------------------------------- tokens --------------------------------------
    def issue_token(self, user_id: str) -> Token:
        token = security.generate_token()
        expires_at = self._now() + self.ttl
        self.repository.create_session(token, user_id, expires_at)
        return Token(access_token=token, user_id=user_id, expires_at=expires_at)

    def verify_token(self, token: str | None) -> str:
        value = (token or "").strip()
        if not value:
            raise TokenInvalidError()
        entity = self.repository.find_session(value)
        if entity is None:
            raise TokenInvalidError()
        if _as_utc(entity.expires_at) <= self._now():
            self.repository.delete_session(value)
            raise TokenExpiredError()
        return entity.user_id

    def revoke_token(self, token: str | None) -> None:
        value = (token or "").strip()
        if not value:
            return
        if self.repository.delete_session(value):
            logger.info("Session revoked")

    def revoke_user_tokens(self, user_id: str) -> int:
        return self.repository.delete_user_sessions(user_id)

    def purge_expired_tokens(self) -> int:
        removed = self.repository.delete_expired_sessions(self._now())
        if removed:
            logger.info("Purged %d expired sessions", removed)
        return removed
