"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors users/models.py
-- dataclasses own domain shape; stores and services do the work.

Layer rule: no imports from api/ or db/.
"""

from __future__ import annotations

from dataclasses import dataclass

from users.models import User


@dataclass
class Session:
    """Server-held proof of authentication.

    id is the bearer credential itself. expires_at is an absolute ISO 8601 UTC
    timestamp; the session is valid only while now < expires_at.
    """

    id: str
    user_id: int
    expires_at: str
    created_at: str | None = None


@dataclass
class LoginResult:
    session_id: str
    expires_at: str
    user: User


@dataclass
class SessionValidation:
    """Outcome of a validation. Missing and expired sessions both give valid=False."""

    valid: bool
    user: User | None = None
