"""Password hashing with bcrypt."""

import logging
from functools import lru_cache

import bcrypt

from spiritlove.config import settings

logger = logging.getLogger(__name__)

# bcrypt only reads the first 72 bytes of its input
MAX_PASSWORD_BYTES = 72


@lru_cache(maxsize=4)
def _dummy_hash(rounds: int) -> str:
    return bcrypt.hashpw(b"dummy-password-for-timing", bcrypt.gensalt(rounds=rounds)).decode("utf-8")


class PasswordHasher:
    """Slow, salted one-way hashing for account passwords.

    Hashes are self-describing (``$2b$<cost>$<salt><digest>``), so verification
    needs nothing but the stored string. The cost factor comes from
    ``settings.bcrypt_rounds`` (12, i.e. 2^12 iterations, a few hundred
    milliseconds per hash).
    """

    @staticmethod
    def hash_password(password: str, rounds: int | None = None) -> str:
        """Hash a password using bcrypt.

        Raises ValueError if the password is longer than bcrypt accepts.
        """
        encoded = password.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password exceeds {MAX_PASSWORD_BYTES} bytes")
        salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
        return bcrypt.hashpw(encoded, salt).decode("utf-8")

    @staticmethod
    def verify_password(password: str, hashed: str | None) -> bool:
        """Verify a password against its hash in constant time.

        Malformed or missing hashes verify as False.
        """
        if not hashed:
            return False
        encoded = password.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            return False
        try:
            return bcrypt.checkpw(encoded, hashed.encode("utf-8"))
        except ValueError as e:
            logger.error(f"Password verification error: {e}")
            return False

    @staticmethod
    def get_dummy_hash() -> str:
        """A hash at the configured cost, for timing-consistent failed logins."""
        return _dummy_hash(settings.bcrypt_rounds)
