"""Purge expired sessions and stale password reset tokens.

Optional maintenance: expired tokens and sessions are already rejected on use.
"""

import logging

from sqlalchemy.orm import Session as DBSession

from spiritlove.services.auth import ResetTokenService
from spiritlove.services.repositories import SessionRepository, UserRepository
from spiritlove.utils.datetime_utils import utcnow

logger = logging.getLogger(__name__)


def purge_expired(db: DBSession) -> tuple[int, int]:
    """
    Delete expired sessions and clear expired reset tokens.

    Returns:
        Tuple of (sessions deleted, reset tokens cleared)
    """
    now = utcnow()
    sessions = SessionRepository(db).purge_expired(now)
    tokens = ResetTokenService(UserRepository(db)).purge_expired(now)
    db.commit()
    logger.info("Purged %d expired sessions and %d expired reset tokens", sessions, tokens)
    return sessions, tokens


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    from spiritlove.database import SessionLocal

    db = SessionLocal()
    try:
        purge_expired(db)
    finally:
        db.close()
