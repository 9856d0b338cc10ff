"""High-level data access helpers backed by SQLAlchemy."""
from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select, update, delete
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from accounts_api.core.errors import DuplicateUsernameError, NotFoundError, StorageError
from accounts_api.db.models import User, UserSession
from accounts_api.db.session import get_session

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SQLRepository:
    """CRUD helpers wrapping the SQLAlchemy session.

    Lookups report "not found" as ``None`` and deletes as ``False``. Any other
    SQLAlchemy failure is raised as :class:`StorageError`.
    """

    # -------------------------- users --------------------------
    def insert_user(self, username: str, password_hash: str, profile: dict | None = None) -> User:
        now = _utcnow()
        user = User(
            id=uuid.uuid4().hex,
            username=username,
            password_hash=password_hash,
            profile=dict(profile or {}),
            version=1,
            created_at=now,
            updated_at=now,
        )
        with get_session() as session:
            try:
                session.add(user)
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise DuplicateUsernameError() from exc
            except SQLAlchemyError as exc:
                session.rollback()
                logger.exception("insert_user failed")
                raise StorageError() from exc
            return user

    def get_user(self, user_id: str) -> Optional[User]:
        with get_session() as session:
            try:
                return session.get(User, user_id)
            except SQLAlchemyError as exc:
                logger.exception("get_user failed")
                raise StorageError() from exc

    def get_user_by_username(self, username: str) -> Optional[User]:
        with get_session() as session:
            try:
                stmt = select(User).where(User.username == username)
                return session.execute(stmt).scalar_one_or_none()
            except SQLAlchemyError as exc:
                logger.exception("get_user_by_username failed")
                raise StorageError() from exc

    def list_users(self) -> list[User]:
        with get_session() as session:
            try:
                stmt = select(User).order_by(User.created_at, User.id)
                return list(session.execute(stmt).scalars().all())
            except SQLAlchemyError as exc:
                logger.exception("list_users failed")
                raise StorageError() from exc

    def update_user_profile(self, user_id: str, profile: dict, *, expected_version: int) -> bool:
        """Write ``profile`` only if the row still carries ``expected_version``.

        Returns False when no row matched (deleted, or modified concurrently).
        """
        with get_session() as session:
            try:
                stmt = (
                    update(User)
                    .where(User.id == user_id, User.version == expected_version)
                    .values(profile=profile, version=expected_version + 1, updated_at=_utcnow())
                )
                result = session.execute(stmt)
                session.commit()
                return result.rowcount == 1
            except SQLAlchemyError as exc:
                session.rollback()
                logger.exception("update_user_profile failed")
                raise StorageError() from exc

    def update_user_password(self, user_id: str, password_hash: str) -> None:
        with get_session() as session:
            try:
                stmt = (
                    update(User)
                    .where(User.id == user_id)
                    .values(password_hash=password_hash, updated_at=_utcnow())
                )
                session.execute(stmt)
                session.commit()
            except SQLAlchemyError as exc:
                session.rollback()
                logger.exception("update_user_password failed")
                raise StorageError() from exc

    def delete_user(self, user_id: str) -> bool:
        """Remove the user and its sessions in one transaction."""
        with get_session() as session:
            try:
                session.execute(delete(UserSession).where(UserSession.user_id == user_id))
                result = session.execute(delete(User).where(User.id == user_id))
                session.commit()
                return result.rowcount == 1
            except SQLAlchemyError as exc:
                session.rollback()
                logger.exception("delete_user failed")
                raise StorageError() from exc

    # -------------------------- sessions --------------------------
    def create_session(self, token: str, user_id: str, expires_at: datetime) -> UserSession:
        """Insert a session row; raises NotFoundError when the user no longer exists."""
        entity = UserSession(token=token, user_id=user_id, expires_at=expires_at, created_at=_utcnow())
        with get_session() as session:
            try:
                session.add(entity)
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise NotFoundError() from exc
            except SQLAlchemyError as exc:
                session.rollback()
                logger.exception("create_session failed")
                raise StorageError() from exc
            return entity

    def find_session(self, token: str) -> Optional[UserSession]:
        with get_session() as session:
            try:
                return session.get(UserSession, token)
            except SQLAlchemyError as exc:
                logger.exception("find_session failed")
                raise StorageError() from exc

    def delete_session(self, token: str) -> bool:
        with get_session() as session:
            try:
                result = session.execute(delete(UserSession).where(UserSession.token == token))
                session.commit()
                return result.rowcount == 1
            except SQLAlchemyError as exc:
                session.rollback()
                logger.exception("delete_session failed")
                raise StorageError() from exc

    def delete_user_sessions(self, user_id: str) -> int:
        with get_session() as session:
            try:
                result = session.execute(delete(UserSession).where(UserSession.user_id == user_id))
                session.commit()
                return result.rowcount
            except SQLAlchemyError as exc:
                session.rollback()
                logger.exception("delete_user_sessions failed")
                raise StorageError() from exc

    def delete_expired_sessions(self, now: datetime) -> int:
        with get_session() as session:
            try:
                result = session.execute(delete(UserSession).where(UserSession.expires_at < now))
                session.commit()
                return result.rowcount
            except SQLAlchemyError as exc:
                session.rollback()
                logger.exception("delete_expired_sessions failed")
                raise StorageError() from exc
