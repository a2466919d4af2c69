"""Server-side sessions carried by a signed, HTTP-only cookie."""

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta

from fastapi import Request, Response
from itsdangerous import BadSignature, TimestampSigner

from spiritlove.config import Settings, settings
from spiritlove.models import User
from spiritlove.services.repositories import SessionRepository
from spiritlove.utils.datetime_utils import utcnow

logger = logging.getLogger(__name__)

_SIGNER_SALT = "slp.session.v1"


@dataclass(frozen=True)
class SessionData:
    sid: str
    user_id: str
    user_name: str
    authenticated_at: datetime


class SessionManager:
    """Issues, loads and destroys login sessions.

    The cookie holds only the session id, signed with ``settings.session_secret``;
    the identity lives in the ``user_sessions`` table. Every change of
    authentication state goes through ``regenerate`` so a session id fixed
    before login is worthless afterwards.
    """

    def __init__(self, sessions: SessionRepository, config: Settings = settings) -> None:
        self._sessions = sessions
        self._config = config

    def _signer(self) -> TimestampSigner:
        return TimestampSigner(self._config.session_secret, salt=_SIGNER_SALT)

    def read_sid(self, request: Request) -> str | None:
        """Session id from the request cookie, if present and correctly signed."""
        cookie = request.cookies.get(self._config.session_cookie_name)
        if not cookie:
            return None
        try:
            sid = self._signer().unsign(cookie, max_age=self._config.session_max_age_seconds)
        except BadSignature:
            logger.debug("Rejected session cookie with bad or expired signature")
            return None
        return sid.decode("utf-8")

    def load(self, request: Request, now: datetime | None = None) -> SessionData | None:
        """Return the live session for this request, if any."""
        sid = self.read_sid(request)
        if sid is None:
            return None
        record = self._sessions.find_active(sid, now or utcnow())
        if record is None:
            return None
        data = record.data or {}
        return SessionData(
            sid=record.sid,
            user_id=record.user_id,
            user_name=data.get("userName", ""),
            authenticated_at=datetime.fromisoformat(data["authenticatedAt"]),
        )

    def regenerate(self, request: Request, response: Response, user: User) -> SessionData:
        """Issue a new session id bound to the user, then drop the old one.

        The new record is written before the old id is deleted, and both happen
        in the caller's transaction, so there is no moment without a valid session.
        """
        now = utcnow()
        sid = secrets.token_urlsafe(32)
        data = {"userId": user.id, "userName": user.name, "authenticatedAt": now.isoformat()}
        self._sessions.create(
            sid,
            user_id=user.id,
            data=data,
            expires_at=now + timedelta(days=self._config.session_max_age_days),
        )

        old_sid = self.read_sid(request)
        if old_sid is not None and old_sid != sid:
            self._sessions.delete(old_sid)

        self._set_cookie(response, sid)
        return SessionData(sid=sid, user_id=user.id, user_name=user.name, authenticated_at=now)

    def destroy(self, request: Request, response: Response) -> None:
        """Invalidate the request's session and clear the cookie."""
        sid = self.read_sid(request)
        if sid is not None:
            self._sessions.delete(sid)
        response.delete_cookie(
            key=self._config.session_cookie_name,
            path="/",
            secure=self._config.cookie_secure,
            httponly=True,
            samesite="lax",
        )

    def destroy_other_sessions(self, user_id: str, keep_sid: str | None) -> int:
        """Drop every session of the user except ``keep_sid``."""
        return self._sessions.delete_for_user(user_id, keep_sid=keep_sid)

    def _set_cookie(self, response: Response, sid: str) -> None:
        response.set_cookie(
            key=self._config.session_cookie_name,
            value=self._signer().sign(sid).decode("utf-8"),
            max_age=self._config.session_max_age_seconds,
            path="/",
            secure=self._config.cookie_secure,
            httponly=True,
            samesite="lax",
        )
