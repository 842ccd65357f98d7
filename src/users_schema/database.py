# SPDX-FileCopyrightText: 2025 Blackcat Informatics® Inc.
# SPDX-License-Identifier: MIT

"""Thin psycopg helpers: scoped connections and parameterized row access."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence

import psycopg
from psycopg import sql
from psycopg.rows import dict_row

from .errors import ConstraintViolation, DatabaseUnavailable


@dataclass
class InsertResult:
    rowcount: int
    returned: Optional[Dict[str, Any]] = None


@contextmanager
def open_connection(dsn: str) -> Iterator[psycopg.Connection]:
    """Yield one autocommit connection and always close it afterwards."""
    try:
        conn = psycopg.connect(dsn, autocommit=True)
    except psycopg.OperationalError as exc:
        raise DatabaseUnavailable(f"cannot connect to database: {exc}") from exc
    try:
        yield conn
    finally:
        conn.close()


def insert_row(
    conn: psycopg.Connection,
    table: str,
    values: Mapping[str, Any],
    returning: Sequence[str] = (),
) -> InsertResult:
    if not values:
        raise ValueError("insert_row needs at least one column value")
    columns = list(values)
    query = sql.SQL("INSERT INTO {table} ({columns}) VALUES ({params})").format(
        table=sql.Identifier(table),
        columns=sql.SQL(", ").join(sql.Identifier(col) for col in columns),
        params=sql.SQL(", ").join(sql.Placeholder() for _ in columns),
    )
    if returning:
        query = query + sql.SQL(" RETURNING {fields}").format(
            fields=sql.SQL(", ").join(sql.Identifier(col) for col in returning)
        )

    try:
        with conn.cursor(row_factory=dict_row) as cur:
            cur.execute(query, [values[col] for col in columns])
            returned = cur.fetchone() if returning else None
            return InsertResult(rowcount=cur.rowcount, returned=returned)
    except (psycopg.IntegrityError, psycopg.DataError) as exc:
        raise ConstraintViolation.from_driver_error(exc) from exc


def fetch_rows(
    conn: psycopg.Connection,
    table: str,
    where: Optional[Mapping[str, Any]] = None,
) -> List[Dict[str, Any]]:
    query = sql.SQL("SELECT * FROM {table}").format(table=sql.Identifier(table))
    params: List[Any] = []
    if where:
        query = query + sql.SQL(" WHERE ") + sql.SQL(" AND ").join(
            sql.SQL("{} = {}").format(sql.Identifier(col), sql.Placeholder())
            for col in where
        )
        params = list(where.values())
    with conn.cursor(row_factory=dict_row) as cur:
        cur.execute(query, params)
        return cur.fetchall()


def truncate(conn: psycopg.Connection, table: str) -> None:
    with conn.cursor() as cur:
        cur.execute(sql.SQL("TRUNCATE {table}").format(table=sql.Identifier(table)))


def count_rows(conn: psycopg.Connection, table: str) -> int:
    with conn.cursor() as cur:
        cur.execute(sql.SQL("SELECT count(*) FROM {table}").format(table=sql.Identifier(table)))
        row = cur.fetchone()
        return int(row[0]) if row else 0
