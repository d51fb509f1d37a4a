"""ORM model for application users (auth, admin role and audit trail)."""

from sqlalchemy import Column, Integer, String

from listkeeper.models.base import AuditMixin, Base

ROLE_ADMIN = "Admin"
ROLE_USER = "User"


class User(AuditMixin, Base):
    """
    User account for JWT authentication and the admin role check.

    role: 'Admin' or 'User'. password_hash is never returned to clients.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(255), nullable=False, unique=True, index=True)
    email = Column(String(450), nullable=False, unique=True, index=True)
    password_hash = Column(String(450), nullable=False)
    role = Column(String(255), nullable=False, default=ROLE_USER)
    firstname = Column(String(255), nullable=True)
    lastname = Column(String(255), nullable=True)
    phone = Column(String(255), nullable=True)
