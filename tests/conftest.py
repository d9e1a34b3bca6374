"""
tests/conftest.py -- Shared test fixtures for User Auth API tests.

This module provides:
  - test_settings: Settings with the cheapest bcrypt cost and no purge task
  - database:      a fresh SQLite file per test, seeded with the demo users
  - client:        TestClient around create_app(test_settings, database)
  - login:         helper that logs in through the API, returns the session id
  - auth_headers:  Authorization header for a session logged in as john

Design: every test provisions its own database file through
create_test_database() (timestamp + random suffix) in Settings.test_data_dir,
rooted at tmp_path, so tests never see each other's rows and can run in any
order or in parallel. The app adopts the handle instead of opening its own,
and the fixture disposes of it afterwards.
"""

from __future__ import annotations

from collections.abc import Callable, Generator

import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from core.config import Settings
from db.database import Database, cleanup_test_database, create_test_database
from db.seed import seed_database

# bcrypt's minimum cost. Keeps each hash in the low milliseconds.
TEST_BCRYPT_ROUNDS = 4


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        _env_file=None,
        debug=True,
        bcrypt_rounds=TEST_BCRYPT_ROUNDS,
        session_purge_interval_seconds=0,
        seed_demo_data=False,
        allowed_hosts=["*"],
    )


@pytest.fixture
def database(tmp_path, test_settings: Settings) -> Generator[Database, None, None]:
    """Isolated, seeded database for a single test, under tmp_path/<test_data_dir>."""
    db = create_test_database(tmp_path / test_settings.test_data_dir)
    seed_database(db, bcrypt_rounds=TEST_BCRYPT_ROUNDS)
    yield db
    cleanup_test_database(db)


@pytest.fixture
def client(test_settings: Settings, database: Database) -> Generator[TestClient, None, None]:
    app = create_app(settings=test_settings, database=database)
    with TestClient(app, raise_server_exceptions=True) as c:
        yield c


@pytest.fixture
def login(client: TestClient) -> Callable[..., str]:
    """Return a helper that logs in through the API and returns the session id.

    Defaults to the seeded john@example.com account.
    """

    def _login(email: str = "john@example.com", password: str = "password123") -> str:
        resp = client.post("/auth/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.text
        return resp.json()["sessionId"]

    return _login


@pytest.fixture
def auth_headers(login: Callable[..., str]) -> dict[str, str]:
    return {"Authorization": f"Bearer {login()}"}
