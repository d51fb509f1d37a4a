"""SQLAlchemy ORM models."""

from listkeeper.models.base import AuditMixin, Base
from listkeeper.models.user import ROLE_ADMIN, ROLE_USER, User

__all__ = ["AuditMixin", "Base", "ROLE_ADMIN", "ROLE_USER", "User"]
