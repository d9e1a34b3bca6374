"""Unit tests for auth/service.py -- login, validation, expiry, logout, purge.

A controllable clock is injected into AuthService so expiry can be crossed
without sleeping. Stores run against the per-test SQLite file.
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select

from auth.service import AuthService
from auth.store import SessionStore
from auth.tokens import hash_password, verify_password
from core.errors import UnauthorizedError
from db.schema import sessions as sessions_table
from users.store import UserStore

T0 = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(T0)


@pytest.fixture
def sessions(database):
    return SessionStore(database)


@pytest.fixture
def service(database, sessions, clock):
    return AuthService(UserStore(database), sessions, bcrypt_rounds=4, clock=clock)


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------


def test_login_issues_session_with_24h_expiry(service, sessions):
    result = service.login("john@example.com", "password123")
    assert result.user.email == "john@example.com"
    assert datetime.fromisoformat(result.expires_at) == T0 + timedelta(hours=24)
    stored = sessions.get(result.session_id)
    assert stored is not None
    assert stored.user_id == result.user.id


def test_session_ids_are_long_and_unique(service):
    ids = {service.login("john@example.com", "password123").session_id for _ in range(5)}
    assert len(ids) == 5
    assert all(len(i) >= 43 for i in ids)


def test_login_normalises_email(service):
    assert service.login("  JOHN@example.com ", "password123").user.id == 1


def test_unknown_email_and_wrong_password_raise_same_error(service):
    with pytest.raises(UnauthorizedError) as unknown:
        service.login("ghost@example.com", "password123")
    with pytest.raises(UnauthorizedError) as wrong:
        service.login("john@example.com", "nope")
    assert unknown.value.code == wrong.value.code == "invalid_credentials"
    assert unknown.value.message == wrong.value.message


def test_failed_login_creates_no_session(service, database):
    with pytest.raises(UnauthorizedError):
        service.login("john@example.com", "nope")
    with database.connect() as conn:
        assert conn.execute(select(func.count()).select_from(sessions_table)).scalar() == 0


def test_custom_ttl(database, sessions, clock):
    service = AuthService(UserStore(database), sessions, session_ttl=timedelta(minutes=5), bcrypt_rounds=4, clock=clock)
    result = service.login("john@example.com", "password123")
    assert datetime.fromisoformat(result.expires_at) == T0 + timedelta(minutes=5)


# ---------------------------------------------------------------------------
# Validation and expiry
# ---------------------------------------------------------------------------


def test_session_valid_until_expiry(service, clock):
    session_id = service.login("jane@example.com", "password456").session_id
    clock.advance(hours=23, minutes=59, seconds=59)
    result = service.validate(session_id)
    assert result.valid is True
    assert result.user.email == "jane@example.com"


def test_session_invalid_at_expiry_and_row_removed(service, sessions, clock):
    session_id = service.login("jane@example.com", "password456").session_id
    clock.advance(hours=24)
    result = service.validate(session_id)
    assert result.valid is False
    assert result.user is None
    assert sessions.get(session_id) is None


def test_unknown_session_is_invalid_not_error(service):
    result = service.validate("definitely-not-issued")
    assert result.valid is False
    assert result.user is None


def test_session_of_deleted_user_is_invalid(service, database):
    session_id = service.login("jane@example.com", "password456").session_id
    assert UserStore(database).delete(2) is True
    assert service.validate(session_id).valid is False


# ---------------------------------------------------------------------------
# Logout and purge
# ---------------------------------------------------------------------------


def test_logout_destroys_session(service):
    session_id = service.login("john@example.com", "password123").session_id
    assert service.logout(session_id) is True
    assert service.validate(session_id).valid is False
    assert service.logout(session_id) is False


def test_purge_expired_removes_only_expired(service, sessions, clock):
    old = service.login("john@example.com", "password123").session_id
    clock.advance(hours=12)
    fresh = service.login("jane@example.com", "password456").session_id
    clock.advance(hours=12)

    assert service.purge_expired() == 1
    assert sessions.get(old) is None
    assert sessions.get(fresh) is not None


# ---------------------------------------------------------------------------
# Password primitives
# ---------------------------------------------------------------------------


def test_hash_and_verify_password():
    hashed = hash_password("s3cret-pass", rounds=4)
    assert hashed != "s3cret-pass"
    assert verify_password("s3cret-pass", hashed) is True
    assert verify_password("other", hashed) is False


def test_verify_password_with_garbage_hash_is_false():
    assert verify_password("anything", "not-a-bcrypt-hash") is False
