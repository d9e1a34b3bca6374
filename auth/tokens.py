"""
auth/tokens.py -- Password hashing and session identifier utilities.

Security design decisions:
  Passwords: bcrypt, used directly (no passlib wrapper). The cost factor is
       passed in by the caller from Settings.bcrypt_rounds so tests can run
       with the minimum cost while production keeps the default of 12.

  Timing equalization: dummy_hash() returns a bcrypt hash at the same cost as
       real hashes. The login path verifies against it when the email is
       unknown, so response time does not reveal whether an account exists.

  Session ids: secrets.token_urlsafe(32) -- 256 bits of entropy, URL-safe,
       43 characters. The raw id is the bearer credential and is stored as the
       primary key of the sessions table.

Layer rule: no imports from api/, users/, or db/.
"""

from __future__ import annotations

import secrets
from datetime import datetime, timedelta
from functools import lru_cache

import bcrypt

DEFAULT_ROUNDS = 12
# bcrypt only looks at the first 72 bytes; api/models.py rejects longer passwords.
MAX_PASSWORD_BYTES = 72


def hash_password(plain: str, rounds: int = DEFAULT_ROUNDS) -> str:
    """Return a bcrypt hash of the given plaintext password."""
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash.

    bcrypt.checkpw compares in constant time. A malformed hash or an
    over-long password is a failed verification, not an error.
    """
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


@lru_cache(maxsize=8)
def dummy_hash(rounds: int = DEFAULT_ROUNDS) -> str:
    """Hash of a throwaway secret at the given cost, computed once per cost."""
    return hash_password("userauth_timing_dummy", rounds)


def generate_session_id() -> str:
    return secrets.token_urlsafe(32)


def session_expiry(now: datetime, ttl: timedelta) -> datetime:
    return now + ttl
