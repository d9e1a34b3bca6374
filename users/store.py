"""
users/store.py -- SQLAlchemy Core persistence for user accounts.

Pattern: Repository + Data Mapper. UserStore is the repository; _row_to_user
is the mapper. Services and routes never touch SQL directly.

Uniqueness of email is enforced by the UNIQUE column; the resulting
IntegrityError is translated to core.errors.ConflictError here so callers
never depend on SQLAlchemy exception types.

Layer rule: no imports from api/ or auth/.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from core.errors import ConflictError
from db.database import Database
from db.schema import users as _users
from users.models import User

_UPDATABLE_FIELDS = frozenset({"email", "name", "password_hash"})


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class UserStore:
    """Repository for User entities.

    Usage:
        store = UserStore(db)
        user = store.create(User(email="a@example.com", name="A", password_hash=hash_password("secret")))
        store.get_by_email("a@example.com")
    """

    def __init__(self, db: Database) -> None:
        self._db = db

    def create(self, user: User) -> User:
        """Insert a new user and return it with id and timestamps populated.

        Raises ConflictError if the email is already registered.
        """
        now = _now_iso()
        try:
            with self._db.begin() as conn:
                result = conn.execute(
                    _users.insert().values(
                        email=user.email,
                        name=user.name,
                        password_hash=user.password_hash,
                        created_at=now,
                        updated_at=now,
                    )
                )
                user_id = result.inserted_primary_key[0]
        except IntegrityError as exc:
            raise ConflictError("A user with that email already exists.", code="email_taken") from exc
        return User(
            id=user_id,
            email=user.email,
            name=user.name,
            password_hash=user.password_hash,
            created_at=now,
            updated_at=now,
        )

    def get_by_id(self, user_id: int) -> User | None:
        with self._db.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.id == user_id)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_by_email(self, email: str) -> User | None:
        """Exact match; emails are normalised to lower case before they get here."""
        with self._db.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.email == email)).fetchone()
        return _row_to_user(row) if row is not None else None

    def list_all(self) -> list[User]:
        """Return all users ordered by id."""
        with self._db.connect() as conn:
            rows = conn.execute(_users.select().order_by(_users.c.id)).fetchall()
        return [_row_to_user(r) for r in rows]

    def update(self, user_id: int, **fields: str) -> User | None:
        """Apply a partial update and bump updated_at.

        Accepted fields: email, name, password_hash. Unknown keys raise
        ValueError. Returns the updated user, or None if user_id does not exist.
        Raises ConflictError if the new email belongs to another user.
        """
        unknown = set(fields) - _UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown user fields: {sorted(unknown)!r}")
        values = {**fields, "updated_at": _now_iso()}
        try:
            with self._db.begin() as conn:
                result = conn.execute(_users.update().where(_users.c.id == user_id).values(**values))
        except IntegrityError as exc:
            raise ConflictError("A user with that email already exists.", code="email_taken") from exc
        if result.rowcount == 0:
            return None
        return self.get_by_id(user_id)

    def delete(self, user_id: int) -> bool:
        """Delete a user. Their sessions go with them (ON DELETE CASCADE).

        Returns True if a row was deleted, False if user_id was not found.
        """
        with self._db.begin() as conn:
            result = conn.execute(_users.delete().where(_users.c.id == user_id))
        return result.rowcount > 0

    def count(self) -> int:
        with self._db.connect() as conn:
            result = conn.execute(select(func.count()).select_from(_users)).scalar()
        return result or 0


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        email=row.email,
        name=row.name,
        password_hash=row.password_hash,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
