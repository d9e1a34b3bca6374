"""
db/database.py -- Storage handle and database provisioning.

Pattern: explicitly constructed handle. A Database owns one SQLAlchemy Engine
and is created by the application lifespan (or a test fixture) and passed
down to the stores. There is no module-level engine and no global accessor.

Provisioning:
  create_database(url)           -- app database; creates the parent directory
                                    of a file-backed SQLite URL, applies schema.
  create_test_database(base_dir) -- fresh file per call, named
                                    test-<epoch ms>-<random>.sqlite, so parallel
                                    tests never share rows.
  cleanup_test_database(db)      -- disposes the engine and deletes the file.

Layer rule: database.py and schema.py import only stdlib and sqlalchemy.
seed.py sits above them and may use users/ and auth/ primitives.
"""

from __future__ import annotations

import logging
import secrets
import time
from pathlib import Path
from typing import Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Connection, Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

from db.schema import metadata

logger = logging.getLogger("userauth.db")

_SQLITE_SIDE_FILES = ("-wal", "-shm", "-journal")


def _sqlite_path(url: str) -> Optional[Path]:
    """Return the file path of a file-backed SQLite URL, or None for anything else."""
    parsed = make_url(url)
    if not parsed.drivername.startswith("sqlite"):
        return None
    database = parsed.database
    if not database or database == ":memory:" or database.startswith("file:"):
        return None
    return Path(database)


def _is_memory(url: str) -> bool:
    parsed = make_url(url)
    return parsed.drivername.startswith("sqlite") and parsed.database in (None, "", ":memory:")


# ---------------------------------------------------------------------------
# Per-connection PRAGMAs
# ---------------------------------------------------------------------------


def _enable_foreign_keys(dbapi_conn, connection_record) -> None:
    """Turn on FK enforcement. SQLite defaults it off per connection, which
    would silently disable ON DELETE CASCADE for sessions."""
    dbapi_conn.execute("PRAGMA foreign_keys=ON")


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode so readers are not blocked by a writer."""
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


# ---------------------------------------------------------------------------
# Handle
# ---------------------------------------------------------------------------


class Database:
    """Owns the Engine for one SQLite (or other SQLAlchemy) database.

    Usage:
        db = create_database("sqlite:///data/database.sqlite")
        users = UserStore(db)
        ...
        db.close()
    """

    def __init__(self, url: str, *, echo: bool = False) -> None:
        self.url = url
        self.path: Optional[Path] = _sqlite_path(url)
        kwargs: dict = {"echo": echo}
        if url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
            if _is_memory(url):
                # One shared connection, otherwise every pooled connection
                # would see its own empty in-memory database.
                kwargs["poolclass"] = StaticPool
        self.engine: Engine = create_engine(url, **kwargs)
        if url.startswith("sqlite"):
            event.listen(self.engine, "connect", _enable_foreign_keys)
            if self.path is not None:
                event.listen(self.engine, "connect", _set_wal_mode)

    def create_schema(self) -> None:
        """Create any missing tables. Idempotent."""
        metadata.create_all(self.engine)

    def connect(self) -> Connection:
        return self.engine.connect()

    def begin(self):
        """Context manager yielding a Connection inside a committed-on-exit transaction."""
        return self.engine.begin()

    def ping(self) -> bool:
        """Return True if a trivial query succeeds."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError:
            logger.exception("Database ping failed")
            return False
        return True

    def close(self) -> None:
        self.engine.dispose()

    def __repr__(self) -> str:
        return f"Database({self.url!r})"


# ---------------------------------------------------------------------------
# Provisioning
# ---------------------------------------------------------------------------


def create_database(url: str, *, echo: bool = False) -> Database:
    """Build the application database handle and apply the schema."""
    path = _sqlite_path(url)
    if path is not None:
        path.parent.mkdir(parents=True, exist_ok=True)
    db = Database(url, echo=echo)
    db.create_schema()
    logger.info("Database ready at %s", path if path is not None else url)
    return db


def create_test_database(base_dir: str | Path) -> Database:
    """Provision an isolated SQLite file for a single test and apply the schema.

    The file name combines a millisecond timestamp with a random suffix, so
    two tests started in the same millisecond still get separate files.
    """
    test_dir = Path(base_dir)
    test_dir.mkdir(parents=True, exist_ok=True)
    name = f"test-{int(time.time() * 1000)}-{secrets.token_hex(4)}.sqlite"
    db = Database(f"sqlite:///{test_dir / name}")
    db.create_schema()
    return db


def cleanup_test_database(db: Database, *, remove_file: bool = True) -> None:
    """Dispose of a test database's connections and (by default) delete its files.

    A file that cannot be removed is logged and left behind; cleanup never
    fails the test that is tearing down.
    """
    db.close()
    if not remove_file or db.path is None:
        return
    for candidate in (db.path, *(db.path.with_name(db.path.name + s) for s in _SQLITE_SIDE_FILES)):
        try:
            candidate.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Could not remove test database file %s: %s", candidate, exc)
