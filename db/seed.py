"""
db/seed.py -- Demo accounts for local development and tests.

Idempotent: seeding is skipped entirely when any user already exists, so it
is safe to run on every startup (SEED_DEMO_DATA=true) or from the CLI.
On an empty database the demo users receive ids 1 and 2 in list order.
"""

from __future__ import annotations

import logging

from auth.tokens import DEFAULT_ROUNDS, hash_password
from db.database import Database
from users.models import User
from users.store import UserStore

logger = logging.getLogger("userauth.db")

DEMO_USERS: list[tuple[str, str, str]] = [
    ("john@example.com", "John Doe", "password123"),
    ("jane@example.com", "Jane Smith", "password456"),
]


def seed_database(db: Database, bcrypt_rounds: int = DEFAULT_ROUNDS) -> int:
    """Insert DEMO_USERS into an empty database. Returns the number inserted."""
    store = UserStore(db)
    if store.count() > 0:
        logger.info("Seed skipped: users table is not empty")
        return 0
    for email, name, password in DEMO_USERS:
        store.create(User(email=email, name=name, password_hash=hash_password(password, bcrypt_rounds)))
    logger.info("Seeded %d demo user(s)", len(DEMO_USERS))
    return len(DEMO_USERS)
