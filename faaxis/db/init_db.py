"""
Database initialization.

Creates all tables and seeds the configured admin account.
"""

import logging

from sqlmodel import Session, SQLModel

from faaxis.core.config import settings
from faaxis.core.logging_config import mask_email
from faaxis.core.security import is_bcrypt_hash
from faaxis.db.repositories.user import UserRepository
from faaxis.db.session import engine
from faaxis.models.user import User
from faaxis.services.session_service import SessionAuthenticator

logger = logging.getLogger(__name__)


def seed_admin(session: Session) -> None:
    """
    Create or promote the admin from ``ADMIN_EMAIL`` / ``ADMIN_PASSWORD_HASH``.

    Only a precomputed bcrypt hash is accepted; plaintext admin
    passwords are never read from configuration.
    """
    if not settings.ADMIN_EMAIL or not settings.ADMIN_PASSWORD_HASH:
        logger.info("No admin account configured, skipping seed")
        return
    if not is_bcrypt_hash(settings.ADMIN_PASSWORD_HASH):
        logger.error("ADMIN_PASSWORD_HASH is not a bcrypt hash, admin not seeded")
        return

    repository = UserRepository(session)
    email = settings.ADMIN_EMAIL.strip().lower()
    user = repository.get_by_username(email)
    if user is None:
        repository.create(User(username=email, hashed_password=settings.ADMIN_PASSWORD_HASH, is_admin=True,
                               email_verified=True))
        logger.info("Admin account %s created", mask_email(email))
    elif not user.is_admin:
        user.is_admin = True
        repository.update(user)
        logger.info("Existing account %s promoted to admin", mask_email(email))


def init_db() -> None:
    """
    Initialize database schema.

    - Creates all SQLModel tables
    - Seeds the admin account (if configured)
    - Removes expired sessions
    """
    # Import all models so SQLModel.metadata has them
    import faaxis.db.base  # noqa: F401

    logger.info("Creating database tables...")
    SQLModel.metadata.create_all(engine)
    logger.info("Tables created successfully")

    with Session(engine) as session:
        seed_admin(session)
        SessionAuthenticator(session).purge_expired()

    logger.info("Database initialization complete")


if __name__ == "__main__":
    from faaxis.core.logging_config import setup_logging

    setup_logging()
    init_db()
