"""SQLAlchemy repository for User rows. All writes go through save_changes()."""

import hmac
import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from listkeeper.core.audit import mark_deleted, resolve_actor, save_changes, utcnow
from listkeeper.models.user import User

logger = logging.getLogger(__name__)


class UserRepository:
    """User store bound to one request-scoped session."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_by_id(self, user_id: int) -> User | None:
        # Soft-deleted rows are returned too; callers inspect deleted_at.
        return self._session.get(User, user_id)

    def get_by_username(self, username: str) -> User | None:
        stmt = select(User).where(User.username == username, User.deleted_at.is_(None))
        return self._session.execute(stmt).scalars().first()

    def is_taken(self, username: str, email: str, exclude_id: int | None = None) -> bool:
        """True if any other row, soft-deleted or not, uses username or email."""
        stmt = select(User.id).where((User.username == username) | (User.email == email))
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        return self._session.execute(stmt).first() is not None

    def get_all(self) -> list[User]:
        return list(self._session.execute(select(User).order_by(User.id)).scalars().all())

    def add(self, user: User, actor: str | None) -> User:
        logger.info("Adding user with email: %s", user.email)
        self._session.add(user)
        save_changes(self._session, actor)
        self._session.refresh(user)
        return user

    def update(self, user: User, actor: str | None) -> User:
        """Persist a fully merged entity; no partial patching happens here."""
        logger.info("Updating user with ID: %s", user.id)
        self._session.add(user)
        save_changes(self._session, actor)
        self._session.refresh(user)
        return user

    def soft_delete(
        self,
        user_id: int,
        actor: str | None,
        now: datetime | None = None,
    ) -> User | None:
        """
        Mark the user deleted and keep the row. Returns None when the id is
        unknown or the row is already soft-deleted.
        """
        user = self.get_by_id(user_id)
        if user is None or user.is_deleted:
            logger.warning("User with ID: %s not found to delete", user_id)
            return None
        now = now or utcnow()
        mark_deleted(user, resolve_actor(actor), now)
        save_changes(self._session, actor, now)
        self._session.refresh(user)
        return user

    def delete(self, user_id: int, actor: str | None) -> bool:
        return self.soft_delete(user_id, actor) is not None

    def authenticate(self, username: str, password_hash: str) -> User | None:
        """Return the active user whose stored hash equals password_hash exactly."""
        user = self.get_by_username(username)
        if user is None:
            logger.warning("Authentication failed: user not found for %s", username)
            return None
        if not hmac.compare_digest(user.password_hash.encode("utf-8"), password_hash.encode("utf-8")):
            logger.warning("Authentication failed: invalid password for %s", username)
            return None
        return user
