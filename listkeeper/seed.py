"""
Seed the first administrator when the users table is empty.

Runs on application startup (SEED_ON_STARTUP) or manually:

  python -m listkeeper.seed
"""

import logging
import sys
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.orm import Session

from listkeeper.core.audit import SYSTEM_ACTOR, save_changes
from listkeeper.core.config import get_settings
from listkeeper.core.database import SessionLocal
from listkeeper.core.security import PasswordHasher, get_password_hasher
from listkeeper.models.user import ROLE_ADMIN, User

if TYPE_CHECKING:
    from listkeeper.core.config import Settings

logger = logging.getLogger(__name__)


def seed_admin_user(session: Session, settings: "Settings", hasher: PasswordHasher) -> bool:
    """
    Insert the configured admin if no user exists yet. Returns True if a row was added.

    Errors are logged and swallowed so a failed seed does not stop the service.
    """
    logger.info("Starting database seeding process.")
    try:
        if session.execute(select(User.id).limit(1)).first() is not None:
            logger.info("Database already contains users. Seeding process skipped.")
            return False

        logger.info("No users found. Seeding admin user %s.", settings.SEED_ADMIN_USERNAME)
        admin = User(
            username=settings.SEED_ADMIN_USERNAME,
            email=settings.SEED_ADMIN_EMAIL,
            password_hash=hasher.hash(settings.SEED_ADMIN_PASSWORD.get_secret_value()),
            role=ROLE_ADMIN,
            firstname="Admin",
            lastname="User",
        )
        session.add(admin)
        save_changes(session, SYSTEM_ACTOR)
        logger.info("Admin user seeded successfully.")
        return True
    except Exception:
        logger.exception("An error occurred during the database seeding process.")
        session.rollback()
        return False


def main() -> int:
    """Seed the admin user using settings from the environment."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )
    db = SessionLocal()
    try:
        seed_admin_user(db, get_settings(), get_password_hasher())
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
