"""Database initialization and couple provisioning."""

import logging

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from spiritlove.config import settings
from spiritlove.database import Base, SessionLocal, engine
from spiritlove.models import User
from spiritlove.services.repositories import UserRepository

logger = logging.getLogger(__name__)


def create_tables(bind: Engine = engine) -> None:
    """Create all database tables."""
    Base.metadata.create_all(bind=bind)


def provision_couple(db: Session, names: list[str], emails: list[str] | None = None) -> list[User]:
    """
    Create the couple's accounts (without passwords) and link them as partners.

    Idempotent: existing accounts are reused and an existing link between the
    same two accounts is kept. Accounts start in the needs-setup state; each
    partner chooses a password through setup-password.

    Returns:
        The provisioned users, in the order of ``names``
    """
    emails = emails or []
    if len(names) not in (0, 2):
        raise ValueError("A couple is exactly two accounts")

    repo = UserRepository(db)
    users = []
    for index, name in enumerate(names):
        user = repo.find_by_name(name)
        if user is None:
            email = emails[index] if index < len(emails) else None
            user = repo.create(name=name, email=email)
            logger.info(f"Provisioned account '{name}' (needs password setup)")
        users.append(user)

    if users:
        repo.link_partners(users[0], users[1])
    db.commit()
    return users


def initialize() -> None:
    """Create tables and provision the configured couple."""
    create_tables()
    if not settings.couple_names:
        return
    db = SessionLocal()
    try:
        provision_couple(db, settings.couple_names, settings.couple_emails)
    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    initialize()
