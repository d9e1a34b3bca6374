"""
users/service.py -- User management use cases.

Wraps a UserRepository with the rules the HTTP layer needs: passwords are
hashed before they reach the store, missing users raise NotFoundError,
duplicate emails surface as ConflictError (raised by the store), and a
password change ends every session the user holds.
"""

from __future__ import annotations

import logging
from typing import Optional

from auth.interfaces import SessionRepository
from auth.tokens import DEFAULT_ROUNDS, hash_password
from core.errors import NotFoundError
from users.interfaces import UserRepository
from users.models import User

logger = logging.getLogger("userauth.users")


class UserService:
    def __init__(
        self,
        users: UserRepository,
        sessions: SessionRepository,
        *,
        bcrypt_rounds: int = DEFAULT_ROUNDS,
    ) -> None:
        self._users = users
        self._sessions = sessions
        self._bcrypt_rounds = bcrypt_rounds

    def list_users(self) -> list[User]:
        return self._users.list_all()

    def get_user(self, user_id: int) -> User:
        user = self._users.get_by_id(user_id)
        if user is None:
            raise _user_not_found()
        return user

    def create_user(self, email: str, name: str, password: str) -> User:
        user = self._users.create(
            User(email=email, name=name, password_hash=hash_password(password, self._bcrypt_rounds))
        )
        logger.info("Created user_id=%s", user.id)
        return user

    def update_user(
        self,
        user_id: int,
        *,
        email: Optional[str] = None,
        name: Optional[str] = None,
        password: Optional[str] = None,
    ) -> User:
        """Apply only the fields that were supplied.

        An update with nothing to change returns the current user untouched
        (updated_at is not bumped).
        """
        fields: dict[str, str] = {}
        if email is not None:
            fields["email"] = email
        if name is not None:
            fields["name"] = name
        if password is not None:
            fields["password_hash"] = hash_password(password, self._bcrypt_rounds)

        if not fields:
            return self.get_user(user_id)

        updated = self._users.update(user_id, **fields)
        if updated is None:
            raise _user_not_found()
        logger.info("Updated user_id=%s (%s)", user_id, ", ".join(sorted(fields)))
        if "password_hash" in fields:
            ended = self._sessions.delete_for_user(user_id)
            logger.info("Ended %d session(s) for user_id=%s after password change", ended, user_id)
        return updated

    def delete_user(self, user_id: int) -> None:
        if not self._users.delete(user_id):
            raise _user_not_found()
        logger.info("Deleted user_id=%s", user_id)


def _user_not_found() -> NotFoundError:
    return NotFoundError("User not found.", code="user_not_found")
