"""User data access layer (credential store)."""

import logging
from datetime import datetime

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from spiritlove.models import User
from spiritlove.utils.datetime_utils import utcnow

from .exceptions import DuplicateError, ImmutableFieldError, NotFoundError

logger = logging.getLogger(__name__)

# Fields the generic profile-update path may touch
_UPDATABLE_FIELDS = frozenset({"name", "email"})
_IMMUTABLE_FIELDS = frozenset({"partner_id", "partnerId"})


def normalize_email(email: str | None) -> str | None:
    """Emails are stored and compared trimmed and lower-cased."""
    if email is None:
        return None
    email = email.strip().lower()
    return email or None


class UserRepository:
    """Centralized user data access.

    Naming conventions:
    - find_* : Query that may return None
    - get_* : Query that raises exception if missing
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    def find_by_id(self, user_id: str) -> User | None:
        """Find user by primary key."""
        return self._db.query(User).filter(User.id == user_id).first()

    def get_by_id(self, user_id: str) -> User:
        """Get user by primary key or raise NotFoundError."""
        user = self.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    def find_by_name(self, name: str) -> User | None:
        """Find user by account name (exact match)."""
        return self._db.query(User).filter(User.name == name.strip()).first()

    def find_by_email(self, email: str) -> User | None:
        """Find user by email (case-insensitive)."""
        normalized = normalize_email(email)
        if normalized is None:
            return None
        return self._db.query(User).filter(User.email == normalized).first()

    def find_by_login(self, identifier: str) -> User | None:
        """Find user by account name, falling back to email when no name matches.

        Names may contain ``@``, so the name lookup always runs first.
        """
        user = self.find_by_name(identifier)
        if user is not None:
            return user
        return self.find_by_email(identifier)

    def find_by_reset_token_hash(self, token_hash: str) -> User | None:
        """Find the user holding a reset token with this digest."""
        return self._db.query(User).filter(User.reset_token_hash == token_hash).first()

    def find_partner(self, user: User) -> User | None:
        """Return the linked partner, only if the link is mutual."""
        if not user.partner_id:
            return None
        partner = self.find_by_id(user.partner_id)
        if partner is None or partner.partner_id != user.id:
            logger.warning(f"Partner link for user {user.id} is not mutual")
            return None
        return partner

    def create(self, name: str, email: str | None = None, password_hash: str | None = None) -> User:
        """Insert a user.

        Raises DuplicateError when the name or email is already taken, including
        when a concurrent insert wins the race after the caller's pre-check.
        """
        user = User(name=name.strip(), email=normalize_email(email), password_hash=password_hash)
        if password_hash is not None:
            user.password_updated_at = utcnow()
        self._db.add(user)
        try:
            self._db.flush()
        except IntegrityError as e:
            self._db.rollback()
            logger.info(f"Unique constraint violation creating user '{name}': {e.orig}")
            raise DuplicateError("User") from e
        return user

    def update(self, user: User, **fields) -> User:
        """Generic profile update.

        ``partner_id`` is rejected unconditionally: partner links are set once
        by provisioning and never through this path.
        """
        immutable = _IMMUTABLE_FIELDS.intersection(fields)
        if immutable:
            raise ImmutableFieldError("User", "partner_id")
        unknown = set(fields) - _UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Unsupported user fields: {', '.join(sorted(unknown))}")

        if fields.get("name") is not None:
            user.name = fields["name"].strip()
        if "email" in fields:
            user.email = normalize_email(fields["email"])
        try:
            self._db.flush()
        except IntegrityError as e:
            self._db.rollback()
            raise DuplicateError("User") from e
        return user

    def set_password(self, user: User, password_hash: str) -> None:
        """Replace the password hash."""
        user.password_hash = password_hash
        user.password_updated_at = utcnow()
        self._db.flush()

    def set_password_if_unset(self, user_id: str, password_hash: str) -> bool:
        """Set the first password atomically.

        The ``password_hash IS NULL`` precondition is evaluated by the database,
        so of two racing setup calls exactly one succeeds. Returns False when a
        password was already present.
        """
        result = self._db.execute(
            update(User)
            .where(User.id == user_id, User.password_hash.is_(None))
            .values(password_hash=password_hash, password_updated_at=utcnow())
            .execution_options(synchronize_session="evaluate")
        )
        return result.rowcount == 1

    def set_reset_token(
        self, user: User, token_hash: str, issued_at: datetime, expires_at: datetime
    ) -> None:
        """Store a reset token digest, superseding any previous one."""
        user.reset_token_hash = token_hash
        user.reset_token_issued_at = issued_at
        user.reset_token_expires_at = expires_at
        self._db.flush()

    def clear_reset_token(self, user: User) -> None:
        """Drop the reset token state."""
        user.reset_token_hash = None
        user.reset_token_issued_at = None
        user.reset_token_expires_at = None
        self._db.flush()

    def consume_reset_token(self, user_id: str, token_hash: str, password_hash: str) -> bool:
        """Replace the password and clear the reset token in one statement.

        Conditional on the stored digest still matching, so a token is consumed
        at most once even when two completions race. Returns False otherwise.
        """
        result = self._db.execute(
            update(User)
            .where(User.id == user_id, User.reset_token_hash == token_hash)
            .values(
                password_hash=password_hash,
                password_updated_at=utcnow(),
                reset_token_hash=None,
                reset_token_issued_at=None,
                reset_token_expires_at=None,
            )
            .execution_options(synchronize_session="evaluate")
        )
        return result.rowcount == 1

    def purge_expired_reset_tokens(self, now: datetime) -> int:
        """Clear reset token state whose expiry has passed. Returns rows touched."""
        result = self._db.execute(
            update(User)
            .where(User.reset_token_expires_at.is_not(None), User.reset_token_expires_at <= now)
            .values(reset_token_hash=None, reset_token_issued_at=None, reset_token_expires_at=None)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def link_partners(self, first: User, second: User) -> None:
        """Mutually link two accounts. Provisioning only.

        An existing link between exactly this pair is left as is; any other
        existing link raises ImmutableFieldError.
        """
        if first.id == second.id:
            raise ValueError("A user cannot be their own partner")
        if first.partner_id == second.id and second.partner_id == first.id:
            return
        if first.partner_id is not None or second.partner_id is not None:
            raise ImmutableFieldError("User", "partner_id")
        first.partner_id = second.id
        second.partner_id = first.id
        self._db.flush()
