"""Tests for the user store functions."""

import pytest

from restapi.services.auth_service import InvalidCredentials, login, signup
from restapi.services.user_service import (
    UserAlreadyExists,
    create_user,
    get_user_by_email,
    get_user_by_id,
    get_user_by_username,
    get_users,
)
from tests.test_utils import utcnow


class TestCreateUser:
    def test_create_user(self, db_session, hasher):
        user = create_user(db_session, hasher, "alice@example.com", "alice", "password123")

        assert user.id is not None
        assert user.created_at <= utcnow()
        assert hasher.compare("password123", user.password)

    def test_lookups(self, db_session, hasher):
        user = create_user(db_session, hasher, "alice@example.com", "alice", "password123")

        assert get_user_by_id(db_session, user.id) is user
        assert get_user_by_email(db_session, "alice@example.com") is user
        assert get_user_by_username(db_session, "alice") is user
        assert get_user_by_id(db_session, user.id + 1) is None
        assert get_user_by_email(db_session, "nobody@example.com") is None

    def test_get_users_ordered_by_id(self, db_session, hasher):
        first = create_user(db_session, hasher, "a@example.com", "a", "pw")
        second = create_user(db_session, hasher, "b@example.com", "b", "pw")

        assert [u.id for u in get_users(db_session)] == [first.id, second.id]

    def test_duplicate_username(self, db_session, hasher):
        create_user(db_session, hasher, "alice@example.com", "alice", "pw")

        with pytest.raises(UserAlreadyExists, match="Username alice is already taken."):
            create_user(db_session, hasher, "other@example.com", "alice", "pw")

    def test_duplicate_email(self, db_session, hasher):
        create_user(db_session, hasher, "alice@example.com", "alice", "pw")

        with pytest.raises(UserAlreadyExists, match="already exists"):
            create_user(db_session, hasher, "alice@example.com", "bob", "pw")


class TestAuthFlows:
    def test_signup_then_login(self, db_session, hasher, token_service):
        user, signup_token = signup(
            db_session, hasher, token_service, "alice@example.com", "alice", "password123"
        )
        same_user, login_token = login(
            db_session, hasher, token_service, "alice@example.com", "password123"
        )

        assert same_user.id == user.id
        assert token_service.check_token(signup_token) == user.id
        assert token_service.check_token(login_token) == user.id

    def test_login_wrong_password(self, db_session, hasher, token_service):
        signup(db_session, hasher, token_service, "alice@example.com", "alice", "password123")

        with pytest.raises(InvalidCredentials):
            login(db_session, hasher, token_service, "alice@example.com", "wrong")

    def test_login_unknown_email(self, db_session, hasher, token_service):
        with pytest.raises(InvalidCredentials):
            login(db_session, hasher, token_service, "ghost@example.com", "password123")

    def test_login_unknown_email_still_runs_argon2(
        self, db_session, hasher, token_service, monkeypatch
    ):
        compared = []
        real_compare = hasher.compare

        def recording_compare(plaintext, encoded_hash):
            compared.append(encoded_hash)
            return real_compare(plaintext, encoded_hash)

        monkeypatch.setattr(hasher, "compare", recording_compare)

        with pytest.raises(InvalidCredentials):
            login(db_session, hasher, token_service, "ghost@example.com", "password123")

        assert compared == [hasher.dummy_hash]
