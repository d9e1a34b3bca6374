"""
auth/service.py -- Login, session validation, and logout.

Flow:
  login:    UserRepository.get_by_email -> bcrypt verify -> SessionRepository.create
  validate: SessionRepository.get -> expiry check -> UserRepository.get_by_id
  logout:   SessionRepository.delete

Security:
  Unknown email and wrong password raise the same UnauthorizedError, and the
  unknown-email path still runs bcrypt (against dummy_hash) so the two cases
  cost the same time.

  validate() never raises for a bad session id. Missing, expired, and orphaned
  sessions all come back as SessionValidation(valid=False) so callers can tell
  routine invalidity apart from a system failure (which does propagate).

  Expired rows are removed when validate() encounters them. The periodic
  sweep in api/main.py calls purge_expired() for rows nobody asks about.

The clock is injectable: tests pass a callable returning a controlled
timezone-aware datetime to move past a session's expiry.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from auth.interfaces import SessionRepository
from auth.models import LoginResult, Session, SessionValidation
from auth.tokens import DEFAULT_ROUNDS, dummy_hash, generate_session_id, session_expiry, verify_password
from core.errors import UnauthorizedError
from users.interfaces import UserRepository

logger = logging.getLogger("userauth.auth")

DEFAULT_SESSION_TTL = timedelta(hours=24)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuthService:
    def __init__(
        self,
        users: UserRepository,
        sessions: SessionRepository,
        *,
        session_ttl: timedelta = DEFAULT_SESSION_TTL,
        bcrypt_rounds: int = DEFAULT_ROUNDS,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._users = users
        self._sessions = sessions
        self._session_ttl = session_ttl
        self._bcrypt_rounds = bcrypt_rounds
        self._clock = clock

    def login(self, email: str, password: str) -> LoginResult:
        """Verify credentials and issue a new session.

        Raises UnauthorizedError("invalid_credentials") for an unknown email or
        a wrong password, with no way to tell which.
        """
        user = self._users.get_by_email(email.strip().lower())
        if user is None:
            verify_password(password, dummy_hash(self._bcrypt_rounds))
            logger.info("Login rejected: bad credentials")
            raise _bad_credentials()
        if not verify_password(password, user.password_hash):
            logger.info("Login rejected: bad credentials")
            raise _bad_credentials()

        now = self._clock()
        session = self._sessions.create(
            Session(
                id=generate_session_id(),
                user_id=user.id,
                expires_at=session_expiry(now, self._session_ttl).isoformat(),
                created_at=now.isoformat(),
            )
        )
        logger.info("Session issued for user_id=%s", user.id)
        return LoginResult(session_id=session.id, expires_at=session.expires_at, user=user)

    def validate(self, session_id: str) -> SessionValidation:
        """Resolve a session id to its user, or report it invalid."""
        session = self._sessions.get(session_id)
        if session is None:
            return SessionValidation(valid=False)
        if self._clock() >= datetime.fromisoformat(session.expires_at):
            self._sessions.delete(session.id)
            logger.debug("Removed expired session for user_id=%s", session.user_id)
            return SessionValidation(valid=False)
        user = self._users.get_by_id(session.user_id)
        if user is None:
            return SessionValidation(valid=False)
        return SessionValidation(valid=True, user=user)

    def logout(self, session_id: str) -> bool:
        """Destroy a session. Idempotent; returns whether a row was removed."""
        removed = self._sessions.delete(session_id)
        if removed:
            logger.info("Session destroyed")
        return removed

    def purge_expired(self) -> int:
        """Delete every session that has expired as of now. Returns rows removed."""
        removed = self._sessions.purge_expired(self._clock().isoformat())
        if removed:
            logger.info("Purged %d expired session(s)", removed)
        return removed


def _bad_credentials() -> UnauthorizedError:
    return UnauthorizedError("Invalid email or password.", code="invalid_credentials")
