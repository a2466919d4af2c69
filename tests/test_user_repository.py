"""Tests for UserRepository."""

from datetime import UTC, datetime, timedelta

import pytest

from spiritlove.models.user import User
from spiritlove.services.repositories import (
    DuplicateError,
    ImmutableFieldError,
    NotFoundError,
    UserRepository,
)


@pytest.fixture
def test_user(db_session):
    user = User(name="alice", email="alice@example.com", password_hash="hash")
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture
def couple(db_session):
    repo = UserRepository(db_session)
    first = repo.create(name="daniel", email="daniel@example.com")
    second = repo.create(name="pacharee", email="pacharee@example.com")
    repo.link_partners(first, second)
    db_session.commit()
    return first, second


class TestUserRepository:
    """Test cases for UserRepository lookups and writes."""

    def test_find_by_id_returns_user(self, db_session, test_user):
        user = UserRepository(db_session).find_by_id(test_user.id)
        assert user is not None
        assert user.id == test_user.id

    def test_find_by_id_returns_none_for_missing(self, db_session):
        assert UserRepository(db_session).find_by_id("nonexistent-uuid-12345") is None

    def test_get_by_id_raises_for_missing(self, db_session):
        with pytest.raises(NotFoundError):
            UserRepository(db_session).get_by_id("nonexistent-uuid-12345")

    def test_find_by_name(self, db_session, test_user):
        assert UserRepository(db_session).find_by_name("alice").id == test_user.id
        assert UserRepository(db_session).find_by_name("bob") is None

    def test_find_by_email_is_case_insensitive(self, db_session, test_user):
        user = UserRepository(db_session).find_by_email("  ALICE@Example.COM ")
        assert user is not None
        assert user.email == "alice@example.com"

    def test_find_by_login_accepts_name_or_email(self, db_session, test_user):
        repo = UserRepository(db_session)
        assert repo.find_by_login("alice").id == test_user.id
        assert repo.find_by_login("Alice@example.com").id == test_user.id

    def test_find_by_login_prefers_name_containing_at_sign(self, db_session, test_user):
        repo = UserRepository(db_session)
        named = repo.create(name="al@home", email="al@example.com")
        db_session.commit()

        assert repo.find_by_login("al@home").id == named.id
        assert repo.find_by_login("al@example.com").id == named.id
        assert repo.find_by_login("nobody@example.com") is None

    def test_create_normalizes_email(self, db_session):
        user = UserRepository(db_session).create(name="bob", email="Bob@Example.com")
        db_session.commit()
        assert user.email == "bob@example.com"
        assert user.password_hash is None
        assert user.needs_password_setup is True

    def test_create_duplicate_name_raises(self, db_session, test_user):
        with pytest.raises(DuplicateError):
            UserRepository(db_session).create(name="alice", email="other@example.com")

    def test_create_duplicate_email_differing_in_case_raises(self, db_session, test_user):
        with pytest.raises(DuplicateError):
            UserRepository(db_session).create(name="alice2", email="ALICE@example.com")

    def test_set_password_if_unset_only_once(self, db_session):
        repo = UserRepository(db_session)
        user = repo.create(name="carol")
        db_session.commit()

        assert repo.set_password_if_unset(user.id, "first-hash") is True
        assert repo.set_password_if_unset(user.id, "second-hash") is False
        db_session.commit()

        db_session.expire_all()
        assert repo.find_by_id(user.id).password_hash == "first-hash"

    def test_consume_reset_token_is_single_use(self, db_session, test_user):
        repo = UserRepository(db_session)
        now = datetime.now(UTC)
        repo.set_reset_token(test_user, "digest", issued_at=now, expires_at=now + timedelta(hours=1))
        db_session.commit()

        assert repo.consume_reset_token(test_user.id, "digest", "new-hash") is True
        assert repo.consume_reset_token(test_user.id, "digest", "newer-hash") is False
        db_session.commit()

        db_session.expire_all()
        user = repo.find_by_id(test_user.id)
        assert user.password_hash == "new-hash"
        assert user.reset_token_hash is None
        assert user.reset_token_expires_at is None
        assert user.reset_token_issued_at is None

    def test_clear_reset_token(self, db_session, test_user):
        repo = UserRepository(db_session)
        now = datetime.now(UTC)
        repo.set_reset_token(test_user, "digest", issued_at=now, expires_at=now + timedelta(hours=1))
        repo.clear_reset_token(test_user)
        db_session.commit()

        assert repo.find_by_reset_token_hash("digest") is None
        assert test_user.reset_token_expires_at is None

    def test_purge_expired_reset_tokens(self, db_session, test_user):
        repo = UserRepository(db_session)
        now = datetime.now(UTC)
        repo.set_reset_token(
            test_user, "old", issued_at=now - timedelta(hours=2), expires_at=now - timedelta(hours=1)
        )
        db_session.commit()

        assert repo.purge_expired_reset_tokens(now) == 1
        db_session.commit()
        db_session.expire_all()
        assert repo.find_by_id(test_user.id).reset_token_hash is None


class TestPartnerLink:
    """The partner link is set by provisioning and immutable afterwards."""

    def test_link_is_mutual(self, db_session, couple):
        first, second = couple
        repo = UserRepository(db_session)
        assert first.partner_id == second.id
        assert second.partner_id == first.id
        assert repo.find_partner(first).id == second.id
        assert repo.find_partner(second).id == first.id

    def test_relinking_same_pair_is_a_no_op(self, db_session, couple):
        first, second = couple
        UserRepository(db_session).link_partners(first, second)
        assert first.partner_id == second.id

    def test_linking_to_someone_else_is_rejected(self, db_session, couple, test_user):
        first, _ = couple
        with pytest.raises(ImmutableFieldError):
            UserRepository(db_session).link_partners(first, test_user)

    @pytest.mark.parametrize("value", [None, "", "someone-else", "self"])
    def test_generic_update_rejects_partner_id(self, db_session, couple, value):
        first, second = couple
        repo = UserRepository(db_session)
        new_value = first.id if value == "self" else value

        with pytest.raises(ImmutableFieldError):
            repo.update(first, partner_id=new_value)
        with pytest.raises(ImmutableFieldError):
            repo.update(first, name="renamed", partnerId=second.id)

        db_session.expire_all()
        assert repo.find_by_id(first.id).partner_id == second.id
        assert repo.find_by_id(first.id).name == "daniel"

    def test_generic_update_changes_name_and_email(self, db_session, test_user):
        repo = UserRepository(db_session)
        repo.update(test_user, name="alicia", email="ALICIA@example.com")
        db_session.commit()
        assert test_user.name == "alicia"
        assert test_user.email == "alicia@example.com"

    def test_find_partner_ignores_one_sided_link(self, db_session, couple):
        first, second = couple
        # Corrupt the link directly in the table
        second.partner_id = None
        db_session.commit()
        assert UserRepository(db_session).find_partner(first) is None
