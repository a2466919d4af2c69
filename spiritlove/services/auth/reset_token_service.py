"""Single-use, time-boxed password reset tokens."""

import hashlib
import logging
import secrets
from datetime import datetime, timedelta

from spiritlove.config import settings
from spiritlove.models import User
from spiritlove.services.repositories import UserRepository
from spiritlove.utils.datetime_utils import as_utc, utcnow

from .password_hasher import PasswordHasher

logger = logging.getLogger(__name__)


class ResetTokenService:
    """Issues, validates and consumes password reset tokens.

    Per user the token state is either idle (no digest stored) or active
    (digest, issue time and expiry stored on the user row):

    - issuing overwrites any previous digest, so older raw tokens stop working
    - validating never changes state
    - completing replaces the password and clears the state
    - an expired token fails both checks; its columns stay until overwritten,
      cleared or purged

    The raw token (hex of ``settings.reset_token_bytes`` random bytes) is handed
    back exactly once for delivery; only its SHA-256 digest is persisted, and
    lookups go by digest.
    """

    def __init__(self, users: UserRepository, expiry: timedelta | None = None) -> None:
        self._users = users
        self._expiry = expiry or timedelta(hours=settings.reset_token_expiry_hours)

    @staticmethod
    def hash_token(token: str) -> str:
        """SHA-256 hex digest of a raw token."""
        return hashlib.sha256(token.encode("utf-8")).hexdigest()

    @classmethod
    def generate_token(cls) -> tuple[str, str]:
        """Return a fresh (raw_token, digest) pair."""
        raw_token = secrets.token_hex(settings.reset_token_bytes)
        return raw_token, cls.hash_token(raw_token)

    def issue(self, user: User, now: datetime | None = None) -> str:
        """Store a new token for the user and return the raw value."""
        now = now or utcnow()
        raw_token, token_hash = self.generate_token()
        self._users.set_reset_token(
            user,
            token_hash=token_hash,
            issued_at=now,
            expires_at=now + self._expiry,
        )
        logger.info(f"Password reset token issued for user {user.id}")
        return raw_token

    def request(self, email: str, now: datetime | None = None) -> tuple[User, str] | None:
        """Issue a token for the account with this email, if there is one.

        Callers must answer identically whether or not this returns None.
        """
        user = self._users.find_by_email(email)
        if user is None:
            logger.info("Password reset requested for unknown email")
            return None
        return user, self.issue(user, now=now)

    def validate(self, token: str, now: datetime | None = None) -> User | None:
        """Return the user owning a live token, without consuming it."""
        if not token:
            return None
        now = now or utcnow()
        user = self._users.find_by_reset_token_hash(self.hash_token(token))
        if user is None:
            return None

        issued_at = as_utc(user.reset_token_issued_at)
        expires_at = as_utc(user.reset_token_expires_at)
        if expires_at is None or now >= expires_at:
            return None
        if issued_at is not None and now < issued_at:
            return None
        return user

    def complete(self, token: str, new_password: str, now: datetime | None = None) -> User | None:
        """Consume a live token and set the new password.

        Returns the user on success, None when the token is unknown, expired,
        or was consumed concurrently.
        """
        user = self.validate(token, now=now)
        if user is None:
            return None

        password_hash = PasswordHasher.hash_password(new_password)
        if not self._users.consume_reset_token(user.id, self.hash_token(token), password_hash):
            logger.warning(f"Reset token for user {user.id} was consumed concurrently")
            return None
        logger.info(f"Password reset completed for user {user.id}")
        return user

    def purge_expired(self, now: datetime | None = None) -> int:
        """Clear expired token state. Optional hardening; not needed for correctness."""
        return self._users.purge_expired_reset_tokens(now or utcnow())
