# SPDX-FileCopyrightText: 2025 Blackcat Informatics® Inc.
# SPDX-License-Identifier: MIT

import psycopg
import pytest
from psycopg import errors as pg_errors
from psycopg import sql

from users_schema import database
from users_schema.database import fetch_rows, insert_row, open_connection, truncate
from users_schema.errors import ConstraintViolation, DatabaseUnavailable


def _render(composable):
    # as_string() needs a live connection only for literals, not identifiers.
    return composable.as_string(None)


def test_open_connection_translates_operational_error(monkeypatch):
    def refuse(*_args, **_kwargs):
        raise psycopg.OperationalError("connection refused")

    monkeypatch.setattr(database.psycopg, "connect", refuse)
    with pytest.raises(DatabaseUnavailable, match="connection refused"):
        with open_connection("postgresql://nowhere/db"):
            pass


def test_open_connection_closes_on_failure(monkeypatch, fake_conn_factory):
    conn = fake_conn_factory()
    calls = {}

    def connect(dsn, **kwargs):
        calls["dsn"] = dsn
        calls.update(kwargs)
        return conn

    monkeypatch.setattr(database.psycopg, "connect", connect)
    with pytest.raises(RuntimeError):
        with open_connection("postgresql://db/app"):
            raise RuntimeError("boom")
    assert conn.closed
    assert calls == {"dsn": "postgresql://db/app", "autocommit": True}


def test_insert_row_binds_values(fake_conn_factory):
    conn = fake_conn_factory(rows=[{"updated_at": "now"}])
    result = insert_row(conn, "users", {"email": "a@b.co", "city": "CABA"}, returning=("updated_at",))

    query, params = conn.executed[0]
    assert isinstance(query, sql.Composed)
    assert _render(query) == (
        'INSERT INTO "users" ("email", "city") VALUES (%s, %s) RETURNING "updated_at"'
    )
    assert params == ["a@b.co", "CABA"]
    assert result.rowcount == 1
    assert result.returned == {"updated_at": "now"}


def test_insert_row_requires_values(fake_conn_factory):
    with pytest.raises(ValueError):
        insert_row(fake_conn_factory(), "users", {})


def test_insert_row_wraps_driver_errors(fake_conn_factory):
    driver_error = pg_errors.NotNullViolation('null value in column "city" of relation "users"')
    conn = fake_conn_factory(error=driver_error)

    with pytest.raises(ConstraintViolation) as excinfo:
        insert_row(conn, "users", {"email": "a@b.co"})
    assert excinfo.value.kind == "not_null"
    assert excinfo.value.__cause__ is driver_error


def test_fetch_rows_filters_with_parameters(fake_conn_factory):
    conn = fake_conn_factory(rows=[{"enabled": False}])
    rows = fetch_rows(conn, "users", where={"email": "x@y.z"})

    query, params = conn.executed[0]
    assert _render(query) == 'SELECT * FROM "users" WHERE "email" = %s'
    assert params == ["x@y.z"]
    assert rows == [{"enabled": False}]


def test_truncate_quotes_table(fake_conn_factory):
    conn = fake_conn_factory()
    truncate(conn, "users")
    assert _render(conn.executed[0][0]) == 'TRUNCATE "users"'
