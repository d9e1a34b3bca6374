"""Unit tests for db/database.py and db/seed.py -- provisioning and isolation.

Covers:
- create_test_database() names files test-<ms>-<random>.sqlite and applies schema
- Two provisioned databases never see each other's rows
- cleanup_test_database() disposes and removes the file
- create_database() creates missing parent directories; foreign keys are on
- seed_database() is idempotent
"""

import re

from sqlalchemy import text

from db.database import Database, cleanup_test_database, create_database, create_test_database
from db.seed import DEMO_USERS, seed_database
from users.models import User
from users.store import UserStore

_TEST_FILE_RE = re.compile(r"^test-\d{13}-[0-9a-f]{8}\.sqlite$")


def test_test_database_file_naming(tmp_path):
    db = create_test_database(tmp_path)
    try:
        assert db.path is not None
        assert db.path.parent == tmp_path
        assert _TEST_FILE_RE.match(db.path.name)
        assert db.path.exists()
    finally:
        cleanup_test_database(db)


def test_provisioned_databases_are_isolated(tmp_path):
    first = create_test_database(tmp_path)
    second = create_test_database(tmp_path)
    try:
        assert first.path != second.path
        seed_database(first, bcrypt_rounds=4)
        UserStore(second).create(User(email="only@second.com", name="Only", password_hash="x"))

        assert [u.email for u in UserStore(first).list_all()] == [email for email, _, _ in DEMO_USERS]
        assert [u.email for u in UserStore(second).list_all()] == ["only@second.com"]
    finally:
        cleanup_test_database(first)
        cleanup_test_database(second)


def test_cleanup_removes_file(tmp_path):
    db = create_test_database(tmp_path)
    UserStore(db).count()
    path = db.path
    cleanup_test_database(db)
    assert not path.exists()
    assert list(tmp_path.iterdir()) == []


def test_cleanup_can_keep_file(tmp_path):
    db = create_test_database(tmp_path)
    cleanup_test_database(db, remove_file=False)
    assert db.path.exists()


def test_create_database_makes_parent_dirs(tmp_path):
    target = tmp_path / "nested" / "dir" / "app.sqlite"
    db = create_database(f"sqlite:///{target}")
    try:
        assert target.exists()
        assert db.ping() is True
    finally:
        db.close()


def test_foreign_keys_enabled(database):
    with database.connect() as conn:
        assert conn.execute(text("PRAGMA foreign_keys")).scalar() == 1


def test_in_memory_database_shares_one_connection():
    db = Database("sqlite:///:memory:")
    db.create_schema()
    try:
        UserStore(db).create(User(email="mem@example.com", name="Mem", password_hash="x"))
        assert UserStore(db).count() == 1
        assert db.path is None
    finally:
        db.close()


def test_seed_is_idempotent(tmp_path):
    db = create_test_database(tmp_path)
    try:
        assert seed_database(db, bcrypt_rounds=4) == len(DEMO_USERS)
        assert seed_database(db, bcrypt_rounds=4) == 0
        john = UserStore(db).get_by_id(1)
        assert john.email == "john@example.com"
    finally:
        cleanup_test_database(db)


def test_fixture_database_lives_in_configured_test_dir(database, test_settings, tmp_path):
    assert database.path.parent == tmp_path / test_settings.test_data_dir
    assert _TEST_FILE_RE.match(database.path.name)
