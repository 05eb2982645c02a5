"""
Shared test fixtures.

Provides an in-memory SQLite store carrying the portal schema and seed rows,
a FastAPI TestClient wired to that store, and bearer-token helpers.
"""

import os
os.environ.setdefault("JWT_SECRET", "test-secret")  # Must be set before token helpers run

import pytest
from fastapi.testclient import TestClient

from covid_portal.auth_utils import create_access_token, hash_password
from covid_portal.db import SqliteStore, get_store

SCHEMA = """
CREATE TABLE "user" (
    username TEXT PRIMARY KEY,
    password TEXT NOT NULL
);
CREATE TABLE state (
    state_id INTEGER PRIMARY KEY,
    state_name TEXT,
    population INTEGER
);
CREATE TABLE district (
    district_id INTEGER PRIMARY KEY AUTOINCREMENT,
    district_name TEXT,
    state_id INTEGER,
    cases INTEGER,
    cured INTEGER,
    active INTEGER,
    deaths INTEGER
);
"""

SEED = """
INSERT INTO state (state_id, state_name, population) VALUES
    (1, 'Andaman and Nicobar Islands', 380581),
    (2, 'Andhra Pradesh', 49386799),
    (3, 'Goa', 1458545);
INSERT INTO district (district_id, district_name, state_id, cases, cured, active, deaths) VALUES
    (1, 'Nicobar', 1, 120, 100, 15, 5),
    (2, 'North and Middle Andaman', 1, 80, 70, 8, 2),
    (3, 'Krishna', 2, 3000, 2500, 400, 100);
"""

# bcrypt is slow on purpose; hash once per session
ALICE_PASSWORD = "correct"
ALICE_HASH = hash_password(ALICE_PASSWORD)


def build_store(path: str = ":memory:") -> SqliteStore:
    store = SqliteStore(path)
    store.executescript(SCHEMA)
    store.executescript(SEED)
    store.execute('INSERT INTO "user" (username, password) VALUES (%s, %s)', ["alice", ALICE_HASH])
    return store


@pytest.fixture()
def store() -> SqliteStore:
    s = build_store()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture()
def client(store: SqliteStore) -> TestClient:
    """TestClient whose requests hit the in-memory store."""
    from covid_portal.main import app

    app.dependency_overrides[get_store] = lambda: store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def token() -> str:
    return create_access_token("alice")


@pytest.fixture()
def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
