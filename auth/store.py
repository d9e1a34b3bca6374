"""
auth/store.py -- SQLAlchemy Core persistence layer for sessions.

Pattern: Repository + Data Mapper (same as users/store.py).
SessionStore is the repository; _row_to_session is the mapper.

Security:
  All queries use bound parameters. No f-strings in SQL.

Expiry:
  The store does not judge validity -- AuthService compares expires_at with
  its clock. purge_expired() is the only place expiry is evaluated in SQL,
  and it relies on ISO 8601 UTC strings sorting chronologically.

Layer rule: no imports from api/.
"""

from __future__ import annotations

from datetime import datetime, timezone

from auth.models import Session
from db.database import Database
from db.schema import sessions as _sessions


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class SessionStore:
    """Repository for Session entities.

    Usage:
        store = SessionStore(db)
        store.create(Session(id=generate_session_id(), user_id=1, expires_at=...))
        session = store.get(session_id)
        store.delete(session_id)
    """

    def __init__(self, db: Database) -> None:
        self._db = db

    def create(self, session: Session) -> Session:
        """Insert a session row. The referenced user must exist (FK)."""
        created_at = session.created_at or _now_iso()
        with self._db.begin() as conn:
            conn.execute(
                _sessions.insert().values(
                    id=session.id,
                    user_id=session.user_id,
                    expires_at=session.expires_at,
                    created_at=created_at,
                )
            )
        return Session(id=session.id, user_id=session.user_id, expires_at=session.expires_at, created_at=created_at)

    def get(self, session_id: str) -> Session | None:
        """Look up a session by id. O(1) via the primary key. Returns None if absent."""
        with self._db.connect() as conn:
            row = conn.execute(_sessions.select().where(_sessions.c.id == session_id)).fetchone()
        return _row_to_session(row) if row is not None else None

    def delete(self, session_id: str) -> bool:
        """Delete one session. Returns True if a row was removed."""
        with self._db.begin() as conn:
            result = conn.execute(_sessions.delete().where(_sessions.c.id == session_id))
        return result.rowcount > 0

    def delete_for_user(self, user_id: int) -> int:
        """Delete every session owned by user_id. Returns the number removed."""
        with self._db.begin() as conn:
            result = conn.execute(_sessions.delete().where(_sessions.c.user_id == user_id))
        return result.rowcount

    def purge_expired(self, now_iso: str) -> int:
        """Delete sessions whose expires_at is at or before now_iso. Returns rows removed."""
        with self._db.begin() as conn:
            result = conn.execute(_sessions.delete().where(_sessions.c.expires_at <= now_iso))
        return result.rowcount


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_session(row) -> Session:
    return Session(
        id=row.id,
        user_id=row.user_id,
        expires_at=row.expires_at,
        created_at=row.created_at,
    )
