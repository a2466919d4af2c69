"""Server-side session store."""

import logging
from datetime import datetime

from sqlalchemy import delete
from sqlalchemy.orm import Session

from spiritlove.models import Session as UserSession
from spiritlove.utils.datetime_utils import as_utc

logger = logging.getLogger(__name__)


class SessionRepository:
    """Persistence for login sessions, keyed by session id."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def find_active(self, sid: str, now: datetime) -> UserSession | None:
        """Find a session that has not expired."""
        record = self._db.query(UserSession).filter(UserSession.sid == sid).first()
        if record is None:
            return None
        if as_utc(record.expires_at) <= now:
            return None
        return record

    def create(self, sid: str, user_id: str, data: dict, expires_at: datetime) -> UserSession:
        record = UserSession(sid=sid, user_id=user_id, data=data, expires_at=expires_at)
        self._db.add(record)
        self._db.flush()
        return record

    def delete(self, sid: str) -> bool:
        """Delete one session. Returns False if it did not exist."""
        result = self._db.execute(
            delete(UserSession)
            .where(UserSession.sid == sid)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    def delete_for_user(self, user_id: str, keep_sid: str | None = None) -> int:
        """Delete every session of a user, optionally sparing one."""
        stmt = delete(UserSession).where(UserSession.user_id == user_id)
        if keep_sid is not None:
            stmt = stmt.where(UserSession.sid != keep_sid)
        result = self._db.execute(stmt.execution_options(synchronize_session=False))
        return result.rowcount

    def purge_expired(self, now: datetime) -> int:
        """Delete sessions past their expiry. Returns rows deleted."""
        result = self._db.execute(
            delete(UserSession)
            .where(UserSession.expires_at <= now)
            .execution_options(synchronize_session=False)
        )
        logger.debug(f"Purged {result.rowcount} expired sessions")
        return result.rowcount
