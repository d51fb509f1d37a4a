"""Shared helpers: in-memory SQLite sessions and ready-made users."""

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from listkeeper.core.security import HmacPasswordHasher
from listkeeper.models import Base, User

TEST_HASH_KEY = b"test-password-hash-secret"


def make_session_factory() -> sessionmaker:
    """Fresh in-memory database shared by every session from the returned factory."""
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


def make_hasher() -> HmacPasswordHasher:
    return HmacPasswordHasher(TEST_HASH_KEY)


def make_user(
    username: str = "alice",
    email: str = "alice@example.com",
    password: str = "ValidPassword123!",
    role: str = "User",
    **kwargs: object,
) -> User:
    """Build an unsaved User with the password hashed by make_hasher()."""
    return User(
        username=username,
        email=email,
        password_hash=make_hasher().hash(password),
        role=role,
        **kwargs,
    )


def add_user(session: Session, user: User, actor: str | None = "tester") -> User:
    """Insert user through the audited save path and return it refreshed."""
    from listkeeper.core.audit import save_changes

    session.add(user)
    save_changes(session, actor)
    session.refresh(user)
    return user
