# SPDX-FileCopyrightText: 2025 Blackcat Informatics® Inc.
# SPDX-License-Identifier: MIT

from pathlib import Path

import pytest

from users_schema.config import resolve_database_url
from users_schema.database import open_connection, truncate
from users_schema.errors import ConfigurationError
from users_schema.expectations import USERS_TABLE

ROOT = Path(__file__).resolve().parents[1]
USERS_DDL = ROOT / "sql" / "users.sql"


class FakeCursor:
    def __init__(self, conn):
        self._conn = conn
        self.rowcount = -1

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False

    def execute(self, query, params=None):
        self._conn.executed.append((query, list(params or [])))
        error, self._conn.error = self._conn.error, None
        if error is None and self._conn.reject is not None:
            error = self._conn.reject(query)
        if error is not None:
            raise error
        self.rowcount = len(self._conn.rows)

    def fetchall(self):
        return list(self._conn.rows)

    def fetchone(self):
        return self._conn.rows[0] if self._conn.rows else None


class FakeConnection:
    """Stands in for a psycopg connection: canned rows, recorded queries, one-shot error.

    ``reject`` maps each executed query to an exception to raise, or None.
    """

    def __init__(self, rows=(), error=None, reject=None):
        self.rows = list(rows)
        self.error = error
        self.reject = reject
        self.executed = []
        self.closed = False

    def cursor(self, **_kwargs):
        return FakeCursor(self)

    def close(self):
        self.closed = True


@pytest.fixture
def fake_conn_factory():
    return FakeConnection


@pytest.fixture(scope="session")
def database_url():
    try:
        return resolve_database_url(ROOT / ".env")
    except ConfigurationError as exc:
        pytest.skip(f"integration database not configured: {exc}")


@pytest.fixture(scope="session")
def db_conn(database_url):
    with open_connection(database_url) as conn:
        with conn.cursor() as cur:
            cur.execute(USERS_DDL.read_text())
        yield conn


@pytest.fixture
def users_table(db_conn):
    truncate(db_conn, USERS_TABLE)
    yield db_conn
    truncate(db_conn, USERS_TABLE)
