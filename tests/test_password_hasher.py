"""Tests for password hashing."""

import pytest

from spiritlove.config import Settings
from spiritlove.services.auth import PasswordHasher
from spiritlove.services.auth.password_hasher import MAX_PASSWORD_BYTES


def test_default_cost_factor_is_12():
    """Production hashes use 2^12 bcrypt iterations."""
    assert Settings().bcrypt_rounds == 12

    hashed = PasswordHasher.hash_password("secure_password_123", rounds=12)
    assert hashed.startswith("$2b$12$")


def test_hash_password():
    password = "secure_password_123"
    hashed = PasswordHasher.hash_password(password)

    assert hashed != password
    assert hashed.startswith("$2b$")


def test_hash_is_salted():
    """Hashing the same password twice gives different hashes."""
    assert PasswordHasher.hash_password("same-password") != PasswordHasher.hash_password(
        "same-password"
    )


def test_verify_password_correct():
    hashed = PasswordHasher.hash_password("secure_password_123")
    assert PasswordHasher.verify_password("secure_password_123", hashed) is True


def test_verify_password_incorrect():
    hashed = PasswordHasher.hash_password("secure_password_123")
    assert PasswordHasher.verify_password("wrong_password", hashed) is False


@pytest.mark.parametrize(
    "password",
    [
        "",
        "pässwörd-ünïcødé",
        "密码密码密码密码",
        "🔐❤️💕 emoji pass",
        "x" * MAX_PASSWORD_BYTES,
    ],
)
def test_verify_round_trip_edge_passwords(password):
    """Empty, unicode and maximum-length passwords verify against their hash."""
    hashed = PasswordHasher.hash_password(password)
    assert PasswordHasher.verify_password(password, hashed) is True


def test_hash_rejects_password_over_bcrypt_limit():
    with pytest.raises(ValueError):
        PasswordHasher.hash_password("x" * (MAX_PASSWORD_BYTES + 1))


def test_verify_rejects_password_over_bcrypt_limit():
    """A longer password sharing the first 72 bytes must not verify."""
    base = "y" * MAX_PASSWORD_BYTES
    hashed = PasswordHasher.hash_password(base)
    assert PasswordHasher.verify_password(base + "extra", hashed) is False


@pytest.mark.parametrize("bad_hash", ["", None, "not-a-bcrypt-hash", "$2b$12$short"])
def test_verify_malformed_hash_returns_false(bad_hash):
    assert PasswordHasher.verify_password("whatever", bad_hash) is False


def test_dummy_hash_never_matches_real_passwords():
    assert PasswordHasher.verify_password("password123", PasswordHasher.get_dummy_hash()) is False
