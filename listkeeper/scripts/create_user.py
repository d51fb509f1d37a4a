"""
Create a user from the command line. Run from project root:
  python -m listkeeper.scripts.create_user USERNAME EMAIL PASSWORD [role]
Example:
  python -m listkeeper.scripts.create_user alice alice@example.com your-password User
"""
import argparse
import logging
import sys

from pydantic import ValidationError

from listkeeper.core.database import SessionLocal
from listkeeper.core.errors import UserConflictError
from listkeeper.core.security import get_password_hasher
from listkeeper.models.user import ROLE_ADMIN, ROLE_USER
from listkeeper.repositories.user_repository import UserRepository
from listkeeper.schemas.user import UserCreate
from listkeeper.services.users import create_user


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a ListKeeper user.")
    parser.add_argument("username", help="Username (1-255 chars)")
    parser.add_argument("email", help="Email address")
    parser.add_argument("password", help="Password (1-128 chars)")
    parser.add_argument("role", nargs="?", default=ROLE_USER, choices=[ROLE_USER, ROLE_ADMIN])
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )

    try:
        body = UserCreate(
            username=args.username.strip(),
            email=args.email.strip(),
            password=args.password,
            role=args.role,
        )
    except ValidationError as e:
        print(f"Invalid user: {e}", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        user = create_user(UserRepository(db), get_password_hasher(), body, actor=None)
        print(f"Created user '{user.username}' (id={user.id}) with role '{user.role}'.")
        return 0
    except UserConflictError as e:
        print(e.message, file=sys.stderr)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
