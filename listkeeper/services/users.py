"""User CRUD on top of UserRepository: hashing, uniqueness checks and field merging."""

import logging

from sqlalchemy.exc import IntegrityError

from listkeeper.core.errors import UserConflictError, UserNotFoundError
from listkeeper.core.security import PasswordHasher
from listkeeper.models.user import User
from listkeeper.repositories.user_repository import UserRepository
from listkeeper.schemas.user import UserCreate, UserUpdate

logger = logging.getLogger(__name__)


def _ensure_unique(
    repo: UserRepository,
    username: str,
    email: str,
    exclude_id: int | None = None,
) -> None:
    """Raise UserConflictError if username or email belongs to another row."""
    if repo.is_taken(username, email, exclude_id=exclude_id):
        raise UserConflictError(
            f"Could not save user. Username {username} or email {email} is already in use."
        )


def list_users(repo: UserRepository) -> list[User]:
    return repo.get_all()


def get_user(repo: UserRepository, user_id: int) -> User:
    user = repo.get_by_id(user_id)
    if user is None:
        raise UserNotFoundError(user_id)
    return user


def create_user(
    repo: UserRepository,
    hasher: PasswordHasher,
    body: UserCreate,
    actor: str | None,
) -> User:
    """Hash the password and insert a new user. Raises UserConflictError on duplicates."""
    _ensure_unique(repo, body.username, body.email)
    user = User(
        username=body.username,
        email=body.email,
        password_hash=hasher.hash(body.password),
        role=body.role,
        firstname=body.firstname,
        lastname=body.lastname,
        phone=body.phone,
    )
    try:
        return repo.add(user, actor)
    except IntegrityError as e:
        # Lost a race with a concurrent insert of the same username/email.
        raise UserConflictError(
            f"Could not create user. Email {body.email} may already be in use."
        ) from e


def update_user(
    repo: UserRepository,
    user_id: int,
    body: UserUpdate,
    actor: str | None,
) -> User:
    """Copy client-editable fields onto the stored user. The password is never changed here."""
    user = get_user(repo, user_id)
    _ensure_unique(repo, body.username, body.email, exclude_id=user.id)
    user.username = body.username
    user.email = body.email
    user.role = body.role
    user.firstname = body.firstname
    user.lastname = body.lastname
    user.phone = body.phone
    try:
        return repo.update(user, actor)
    except IntegrityError as e:
        raise UserConflictError(
            f"Could not update user {user_id}. Username or email already in use."
        ) from e


def delete_user(repo: UserRepository, user_id: int, actor: str | None) -> None:
    """Soft-delete the user. A second delete of the same id is reported as not found."""
    if not repo.delete(user_id, actor):
        raise UserNotFoundError(user_id)
