"""
Account registration, login and profile use cases.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional

from accounts_api.core import security
from accounts_api.core.config import Settings, get_settings
from accounts_api.core.errors import (
    AuthenticationError,
    DuplicateUsernameError,
    NotFoundError,
    StorageError,
    TokenInvalidError,
)
from accounts_api.db.models import User
from accounts_api.domain.usernames import (
    filter_profile_fields,
    merge_profile,
    normalize_username,
    validate_username,
)
from accounts_api.repositories.sql_repository import SQLRepository
from accounts_api.services.credential_service import CredentialManager, Token

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserView:
    """Read-only projection of a user; never carries credential material."""

    id: str
    username: str
    profile: dict
    created_at: datetime

    @classmethod
    def from_entity(cls, entity: User) -> "UserView":
        return cls(
            id=entity.id,
            username=entity.username,
            profile=dict(entity.profile or {}),
            created_at=entity.created_at,
        )

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "profile": dict(self.profile),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass
class AccountService:
    """Handles registration, login, profile edits, lookups and deletion."""

    settings: Settings = field(default_factory=get_settings)
    repository: SQLRepository = field(default_factory=SQLRepository)
    credentials: Optional[CredentialManager] = None

    def __post_init__(self):
        if self.credentials is None:
            self.credentials = CredentialManager(settings=self.settings, repository=self.repository)

    # -------------------------------------- helpers --------------------------------------
    def _normalize(self, username: str | None) -> str:
        return normalize_username(username, case_sensitive=self.settings.usernames_case_sensitive)

    def _require_user(self, user_id: str) -> User:
        user = self.repository.get_user(user_id) if user_id else None
        if user is None:
            raise NotFoundError()
        return user

    # -------------------------------------- registration --------------------------------------
    def register(self, username: str, password: str, profile: Mapping[str, Any] | None = None) -> UserView:
        name = validate_username(self._normalize(username), max_length=self.settings.username_max_length)
        fields = filter_profile_fields(profile, self.settings.profile_fields)
        security.check_password_strength(password, self.settings.password_min_length)
        if self.repository.get_user_by_username(name):
            raise DuplicateUsernameError()
        password_hash = self.credentials.hash_password(password)
        # The unique constraint settles races the lookup above cannot see.
        user = self.repository.insert_user(name, password_hash, merge_profile({}, fields))
        logger.info("Registered user %s", user.id)
        return UserView.from_entity(user)

    # -------------------------------------- login --------------------------------------
    def login(self, username: str, password: str) -> Token:
        name = self._normalize(username)
        user = self.repository.get_user_by_username(name) if name else None
        if user is None:
            self.credentials.verify_password(password or "", security.DUMMY_HASH)
            logger.info("Login failed")
            raise AuthenticationError()
        if not self.credentials.verify_password(password, user.password_hash):
            logger.info("Login failed")
            raise AuthenticationError()
        if self.credentials.needs_rehash(user.password_hash):
            self.repository.update_user_password(user.id, self.credentials.hash_password(password))
        try:
            token = self.credentials.issue_token(user.id)
        except NotFoundError:
            # Deleted between the password check and the session insert.
            logger.info("Login failed")
            raise AuthenticationError() from None
        logger.info("User %s logged in", user.id)
        return token

    def logout(self, token: str | None) -> None:
        if not token:
            return
        self.credentials.revoke_token(token)

    def logout_all(self, user_id: str) -> int:
        """Revoke every session of the user, including the caller's own."""
        removed = self.credentials.revoke_user_tokens(user_id)
        logger.info("Revoked %d session(s) for user %s", removed, user_id)
        return removed

    def authenticate(self, token: str | None) -> UserView:
        """Resolve a bearer token to the still-existing user it was issued for."""
        user_id = self.credentials.verify_token(token)
        user = self.repository.get_user(user_id)
        if user is None:
            raise TokenInvalidError()
        return UserView.from_entity(user)

    # -------------------------------------- profile --------------------------------------
    def edit_profile(self, acting_user_id: str, fields: Mapping[str, Any]) -> UserView:
        user = self._require_user(acting_user_id)
        changes = filter_profile_fields(fields, self.settings.profile_fields)
        for attempt in range(self.settings.profile_update_attempts):
            if attempt:
                user = self._require_user(acting_user_id)
            merged = merge_profile(user.profile, changes)
            if self.repository.update_user_profile(user.id, merged, expected_version=user.version):
                return UserView(id=user.id, username=user.username, profile=merged, created_at=user.created_at)
        # Every attempt lost the race; distinguish a concurrent delete from contention.
        self._require_user(acting_user_id)
        raise StorageError("Profile is being modified concurrently, try again")

    def get_profile(self, user_id: str) -> UserView:
        return UserView.from_entity(self._require_user(user_id))

    def get_all_users(self) -> list[UserView]:
        return [UserView.from_entity(user) for user in self.repository.list_users()]

    # -------------------------------------- deletion --------------------------------------
    def delete_user(self, user_id: str) -> None:
        if not user_id or not self.repository.delete_user(user_id):
            raise NotFoundError()
        logger.info("Deleted user %s", user_id)
