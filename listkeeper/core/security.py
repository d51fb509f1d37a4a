"""Password hashing and JWT creation/verification for authentication."""

import base64
import hashlib
import hmac
from datetime import UTC, datetime, timedelta
from functools import lru_cache
from typing import TYPE_CHECKING, Any, Protocol

import bcrypt
import jwt

from listkeeper.core.config import get_settings
from listkeeper.core.errors import ConfigurationError

if TYPE_CHECKING:
    from listkeeper.core.config import Settings

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12

# Tolerated clock difference between token issuer and validator.
TOKEN_LEEWAY_SECONDS = 60


def keyed_hash(secret: str, server_key: bytes) -> str:
    """
    HMAC-SHA256 of the UTF-8 secret under server_key, base64 encoded.

    Deterministic and unsalted: equal secrets give equal output for the same key.
    Raises ConfigurationError if server_key is empty.
    """
    if not server_key:
        raise ConfigurationError("Password hashing secret is not configured.")
    digest = hmac.new(server_key, secret.encode("utf-8"), hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


class PasswordHasher(Protocol):
    """Hashes passwords for storage and checks them at login."""

    # True when hash() is repeatable, so stored hashes can be compared directly.
    deterministic: bool

    def hash(self, plain_password: str) -> str: ...

    def verify(self, plain_password: str, hashed: str) -> bool: ...


class HmacPasswordHasher:
    """Keyed HMAC-SHA256 hash; the format existing user rows are stored in."""

    deterministic = True

    def __init__(self, server_key: bytes) -> None:
        if not server_key:
            raise ConfigurationError("Password hashing secret is not configured.")
        self._server_key = server_key

    def hash(self, plain_password: str) -> str:
        return keyed_hash(plain_password, self._server_key)

    def verify(self, plain_password: str, hashed: str) -> bool:
        return hmac.compare_digest(self.hash(plain_password), hashed)


class BcryptPasswordHasher:
    """Salted adaptive hash. Not compatible with rows written by HmacPasswordHasher."""

    deterministic = False

    def __init__(self, rounds: int = BCRYPT_ROUNDS) -> None:
        self._rounds = rounds

    def hash(self, plain_password: str) -> str:
        # bcrypt has a 72-byte limit; truncate to avoid errors.
        pw_bytes = plain_password.encode("utf-8")[:72]
        return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=self._rounds)).decode("utf-8")

    def verify(self, plain_password: str, hashed: str) -> bool:
        pw_bytes = plain_password.encode("utf-8")[:72]
        try:
            return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
        except (ValueError, TypeError):
            return False


def build_password_hasher(settings: "Settings") -> PasswordHasher:
    """Return the hasher selected by PASSWORD_HASHER."""
    if settings.PASSWORD_HASHER == "bcrypt":
        return BcryptPasswordHasher()
    key = settings.USER_PASSWORD_HASH_SECRET.get_secret_value().encode("utf-8")
    return HmacPasswordHasher(key)


@lru_cache
def get_password_hasher() -> PasswordHasher:
    """Cached hasher for dependencies; built once at startup."""
    return build_password_hasher(get_settings())


def create_access_token(
    user_id: int,
    username: str,
    email: str,
    role: str,
    settings: "Settings | None" = None,
) -> str:
    """Create a signed JWT carrying the user's id, name, email and role."""
    settings = settings or get_settings()
    now = datetime.now(UTC)
    expire = now + timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
    payload: dict[str, Any] = {
        "sub": str(user_id),
        "id": user_id,
        "name": username,
        "email": email,
        "role": role,
        "iss": settings.JWT_ISSUER,
        "aud": settings.JWT_AUDIENCE,
        "exp": expire,
        "iat": now,
    }
    secret = settings.JWT_SECRET.get_secret_value()
    return jwt.encode(
        payload,
        secret.encode("utf-8"),
        algorithm=settings.JWT_ALGORITHM,
    )


def decode_access_token(token: str, settings: "Settings | None" = None) -> dict[str, Any]:
    """
    Decode and validate JWT; return payload (sub, id, name, email, role, exp, iat).
    Raises jwt.PyJWTError on invalid signature, issuer, audience or expired token.
    """
    settings = settings or get_settings()
    secret = settings.JWT_SECRET.get_secret_value()
    return jwt.decode(
        token,
        secret.encode("utf-8"),
        algorithms=[settings.JWT_ALGORITHM],
        audience=settings.JWT_AUDIENCE,
        issuer=settings.JWT_ISSUER,
        leeway=TOKEN_LEEWAY_SECONDS,
        options={"require": ["exp", "iat", "sub"]},
    )
