"""Credential check and token issuance for the authenticate endpoint."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from listkeeper.core.security import PasswordHasher, create_access_token
from listkeeper.models.user import User
from listkeeper.repositories.user_repository import UserRepository

if TYPE_CHECKING:
    from listkeeper.core.config import Settings

logger = logging.getLogger(__name__)


class AuthState(str, Enum):
    """Login progresses UNAUTHENTICATED -> CREDENTIAL_CHECK -> AUTHENTICATED | REJECTED."""

    UNAUTHENTICATED = "unauthenticated"
    CREDENTIAL_CHECK = "credential_check"
    AUTHENTICATED = "authenticated"
    REJECTED = "rejected"


@dataclass
class AuthResult:
    """Outcome of one login attempt. user and token are set only when authenticated."""

    state: AuthState
    user: User | None = None
    token: str | None = None

    @property
    def ok(self) -> bool:
        return self.state is AuthState.AUTHENTICATED


def _check_credentials(
    repo: UserRepository,
    hasher: PasswordHasher,
    username: str,
    password: str,
) -> User | None:
    if hasher.deterministic:
        return repo.authenticate(username, hasher.hash(password))
    user = repo.get_by_username(username)
    if user is None or not hasher.verify(password, user.password_hash):
        logger.warning("Authentication failed for %s", username)
        return None
    return user


def authenticate_user(
    repo: UserRepository,
    hasher: PasswordHasher,
    username: str,
    password: str,
    settings: "Settings | None" = None,
) -> AuthResult:
    """
    Check username/password and mint a bearer token on success.

    Unknown username and wrong password both end in REJECTED with no further
    detail, so callers cannot probe which usernames exist.
    """
    logger.info("Attempting to authenticate user: %s", username)
    user = _check_credentials(repo, hasher, username, password)
    if user is None:
        return AuthResult(state=AuthState.REJECTED)

    token = create_access_token(
        user_id=user.id,
        username=user.username,
        email=user.email,
        role=user.role,
        settings=settings,
    )
    logger.info("User %s authenticated successfully", username)
    return AuthResult(state=AuthState.AUTHENTICATED, user=user, token=token)
