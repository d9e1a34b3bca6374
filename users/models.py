"""
users/models.py -- Domain dataclass for user accounts.

Pattern: Data class (pure data container, zero logic). Stores and services do
the work; api/models.py owns the HTTP shape.

password_hash is carried on the domain object so the auth service can verify
credentials. It never crosses into an API response -- api/models.UserResponse
has no field for it.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    email: str
    name: str
    password_hash: str
    id: int | None = None
    created_at: str | None = None
    updated_at: str | None = None
