"""Unit tests for users/store.py and auth/store.py.

Covers:
- UserStore CRUD, email uniqueness, partial updates, unknown-field rejection
- SessionStore create/get/delete, FK enforcement, ON DELETE CASCADE, purge
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import IntegrityError

from auth.models import Session
from auth.store import SessionStore
from core.errors import ConflictError
from users.models import User
from users.store import UserStore


@pytest.fixture
def users(database):
    return UserStore(database)


@pytest.fixture
def sessions(database):
    return SessionStore(database)


def _future(**kwargs) -> str:
    return (datetime.now(timezone.utc) + timedelta(**kwargs)).isoformat()


# ---------------------------------------------------------------------------
# UserStore
# ---------------------------------------------------------------------------


def test_seeded_users_present(users):
    assert users.count() == 2
    assert [u.email for u in users.list_all()] == ["john@example.com", "jane@example.com"]


def test_create_populates_id_and_timestamps(users):
    created = users.create(User(email="kim@example.com", name="Kim", password_hash="x"))
    assert created.id == 3
    assert created.created_at == created.updated_at
    assert users.get_by_id(3) == created
    assert users.get_by_email("kim@example.com") == created


def test_duplicate_email_raises_conflict(users):
    with pytest.raises(ConflictError):
        users.create(User(email="john@example.com", name="Another John", password_hash="x"))
    assert users.count() == 2


def test_get_missing_returns_none(users):
    assert users.get_by_id(42) is None
    assert users.get_by_email("nobody@example.com") is None


def test_update_changes_given_fields_and_bumps_updated_at(users):
    before = users.get_by_id(1)
    updated = users.update(1, name="Johnny")
    assert updated.name == "Johnny"
    assert updated.email == before.email
    assert updated.password_hash == before.password_hash
    assert updated.created_at == before.created_at
    assert updated.updated_at >= before.updated_at


def test_update_missing_returns_none(users):
    assert users.update(99, name="Ghost") is None


def test_update_rejects_unknown_fields(users):
    with pytest.raises(ValueError):
        users.update(1, id="7")


def test_update_to_existing_email_raises_conflict(users):
    with pytest.raises(ConflictError):
        users.update(2, email="john@example.com")
    assert users.get_by_id(2).email == "jane@example.com"


def test_delete(users):
    assert users.delete(2) is True
    assert users.delete(2) is False
    assert users.get_by_id(2) is None


# ---------------------------------------------------------------------------
# SessionStore
# ---------------------------------------------------------------------------


def test_session_roundtrip(sessions):
    created = sessions.create(Session(id="abc", user_id=1, expires_at=_future(hours=1)))
    assert created.created_at is not None
    assert sessions.get("abc") == created


def test_session_requires_existing_user(sessions):
    with pytest.raises(IntegrityError):
        sessions.create(Session(id="orphan", user_id=999, expires_at=_future(hours=1)))


def test_duplicate_session_id_rejected(sessions):
    sessions.create(Session(id="dup", user_id=1, expires_at=_future(hours=1)))
    with pytest.raises(IntegrityError):
        sessions.create(Session(id="dup", user_id=2, expires_at=_future(hours=1)))


def test_deleting_user_cascades_to_sessions(users, sessions):
    sessions.create(Session(id="jane-1", user_id=2, expires_at=_future(hours=1)))
    sessions.create(Session(id="jane-2", user_id=2, expires_at=_future(hours=1)))
    sessions.create(Session(id="john-1", user_id=1, expires_at=_future(hours=1)))

    users.delete(2)

    assert sessions.get("jane-1") is None
    assert sessions.get("jane-2") is None
    assert sessions.get("john-1") is not None


def test_delete_and_delete_for_user(sessions):
    sessions.create(Session(id="a", user_id=1, expires_at=_future(hours=1)))
    sessions.create(Session(id="b", user_id=1, expires_at=_future(hours=1)))
    sessions.create(Session(id="c", user_id=2, expires_at=_future(hours=1)))

    assert sessions.delete("a") is True
    assert sessions.delete("a") is False
    assert sessions.delete_for_user(1) == 1
    assert sessions.get("c") is not None


def test_purge_expired(sessions):
    sessions.create(Session(id="old", user_id=1, expires_at=_future(hours=-1)))
    sessions.create(Session(id="new", user_id=1, expires_at=_future(hours=1)))

    assert sessions.purge_expired(datetime.now(timezone.utc).isoformat()) == 1
    assert sessions.get("old") is None
    assert sessions.get("new") is not None
