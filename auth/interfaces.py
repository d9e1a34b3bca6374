from __future__ import annotations

from typing import Protocol

from auth.models import Session


class SessionRepository(Protocol):
    """Persistence contract for sessions. auth.store.SessionStore is the implementation."""

    def create(self, session: Session) -> Session: ...

    def get(self, session_id: str) -> Session | None: ...

    def delete(self, session_id: str) -> bool: ...

    def delete_for_user(self, user_id: int) -> int: ...

    def purge_expired(self, now_iso: str) -> int: ...
