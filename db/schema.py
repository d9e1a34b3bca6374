"""
db/schema.py -- SQLAlchemy Core table definitions.

Timestamps are ISO 8601 UTC strings (datetime.isoformat()). Every writer uses
the same format, so lexical comparison in SQL matches chronological order;
SessionStore.purge_expired() relies on this.

sessions.user_id cascades on delete. SQLite only honours the cascade when
PRAGMA foreign_keys=ON is set on the connection -- db/database.py does that
for every pooled connection.
"""

from __future__ import annotations

from sqlalchemy import Column, ForeignKey, Index, Integer, MetaData, String, Table, Text

metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("name", String(255), nullable=False),
    Column("password_hash", Text, nullable=False),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
)

sessions = Table(
    "sessions",
    metadata,
    Column("id", String(64), primary_key=True),  # secrets.token_urlsafe(32)
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
    Column("expires_at", String(32), nullable=False),
    Column("created_at", String(32), nullable=False),
)

Index("ix_sessions_user_id", sessions.c.user_id)
