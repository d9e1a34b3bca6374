from __future__ import annotations

from typing import Protocol

from users.models import User


class UserRepository(Protocol):
    """Persistence contract for users. users.store.UserStore is the implementation."""

    def create(self, user: User) -> User: ...

    def get_by_id(self, user_id: int) -> User | None: ...

    def get_by_email(self, email: str) -> User | None: ...

    def list_all(self) -> list[User]: ...

    def update(self, user_id: int, **fields: str) -> User | None: ...

    def delete(self, user_id: int) -> bool: ...

    def count(self) -> int: ...
