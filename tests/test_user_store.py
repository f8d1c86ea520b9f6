"""Unit tests for auth/store.py -- UserStore persistence."""

import pytest
from sqlalchemy.exc import IntegrityError

from auth.models import User
from auth.store import UserStore


@pytest.fixture
def store():
    s = UserStore("sqlite:///:memory:")
    yield s
    s.close()


def _user(email="ada@example.com", name="Ada"):
    return User(name=name, email=email, hashed_password="$2b$04$hash", avatar="https://example.com/a.png")


def test_create_and_lookup(store):
    uid = store.create_user(_user())
    by_id = store.get_by_id(uid)
    by_email = store.get_by_email("ada@example.com")
    assert by_id == by_email
    assert by_id.id == uid
    assert by_id.created_at


def test_duplicate_email_raises(store):
    store.create_user(_user())
    with pytest.raises(IntegrityError):
        store.create_user(_user(name="Other Ada"))


def test_missing_user(store):
    assert store.get_by_id(999) is None
    assert store.get_by_email("nobody@example.com") is None


def test_get_many_skips_unknown_ids(store):
    a = store.create_user(_user("a@example.com", "A"))
    b = store.create_user(_user("b@example.com", "B"))
    found = store.get_many({a, b, 999})
    assert set(found) == {a, b}
    assert found[b].name == "B"
    assert store.get_many(set()) == {}


def test_delete_user(store):
    uid = store.create_user(_user())
    assert store.count_users() == 1
    assert store.delete_user(uid) is True
    assert store.delete_user(uid) is False
    assert store.count_users() == 0
