"""Unit tests for auth/passwords.py -- bcrypt hashing and login verification.

Covers:
- hash() produces a salted digest that verify() accepts
- verify() rejects the wrong password and malformed hashes
- authenticate_user() returns the user only for a matching email/password
- authenticate_user() still runs bcrypt for unknown emails
"""

from unittest.mock import patch

import pytest

from auth.models import User
from auth.passwords import PasswordHasher, authenticate_user
from auth.store import UserStore


@pytest.fixture
def hasher():
    return PasswordHasher(rounds=4)


@pytest.fixture
def store(hasher):
    s = UserStore("sqlite:///:memory:")
    s.create_user(User(name="Ada", email="ada@example.com", hashed_password=hasher.hash("secret1")))
    yield s
    s.close()


class TestPasswordHasher:
    def test_round_trip(self, hasher):
        digest = hasher.hash("secret1")
        assert digest != "secret1"
        assert hasher.verify("secret1", digest) is True

    def test_wrong_password(self, hasher):
        assert hasher.verify("secret2", hasher.hash("secret1")) is False

    def test_same_password_different_salt(self, hasher):
        assert hasher.hash("secret1") != hasher.hash("secret1")

    def test_cost_factor_is_encoded_in_hash(self, hasher):
        assert hasher.hash("secret1").startswith("$2b$04$")

    @pytest.mark.parametrize("bad_hash", ["", "not-a-bcrypt-hash", "$2b$04$short"])
    def test_malformed_hash_is_a_mismatch(self, hasher, bad_hash):
        assert hasher.verify("secret1", bad_hash) is False

    def test_dummy_hash_is_cached(self, hasher):
        assert hasher.dummy_hash is hasher.dummy_hash


class TestAuthenticateUser:
    def test_valid_credentials(self, store, hasher):
        user = authenticate_user(store, hasher, "ada@example.com", "secret1")
        assert user is not None
        assert user.name == "Ada"

    def test_wrong_password(self, store, hasher):
        assert authenticate_user(store, hasher, "ada@example.com", "wrong-pw") is None

    def test_unknown_email(self, store, hasher):
        assert authenticate_user(store, hasher, "nobody@example.com", "secret1") is None

    def test_unknown_email_still_runs_bcrypt(self, store, hasher):
        with patch.object(hasher, "verify", wraps=hasher.verify) as spy:
            authenticate_user(store, hasher, "nobody@example.com", "secret1")
        spy.assert_called_once()
