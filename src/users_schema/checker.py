# SPDX-FileCopyrightText: 2025 Blackcat Informatics® Inc.
# SPDX-License-Identifier: MIT

"""Compare a table's catalog entry against a registry of expected fields.

Every expectation is checked even after a failure so that a report always
covers the whole registry. Types are compared as exact strings, the way
``information_schema.columns.data_type`` reports them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import psycopg

from .errors import AssertionMismatch, DatabaseUnavailable
from .expectations import FieldExpectation

ActualSchema = Dict[str, str]

CATALOG_QUERY = (
    "SELECT column_name, data_type FROM information_schema.columns WHERE table_name = %s"
)
SCHEMA_FILTER = " AND table_schema = %s"


@dataclass(frozen=True)
class FieldPresence:
    name: str
    present: bool


@dataclass(frozen=True)
class FieldTypeMatch:
    name: str
    expected_type: str
    actual_type: Optional[str]
    matches: bool


@dataclass
class ConformanceReport:
    table: str
    presence: List[FieldPresence]
    types: List[FieldTypeMatch]
    extra: List[str] = field(default_factory=list)

    @property
    def missing(self) -> List[str]:
        return [result.name for result in self.presence if not result.present]

    @property
    def mismatched(self) -> List[str]:
        # Missing fields also fail the type check; list them only once.
        missing = set(self.missing)
        return [
            result.name
            for result in self.types
            if not result.matches and result.name not in missing
        ]

    @property
    def conforms(self) -> bool:
        return all(r.present for r in self.presence) and all(r.matches for r in self.types)


def fetch_actual_schema(
    conn: psycopg.Connection,
    table_name: str,
    schema: Optional[str] = None,
) -> ActualSchema:
    """Return ``{column_name: data_type}``; empty when the table is absent."""
    query = CATALOG_QUERY
    params = [table_name]
    if schema is not None:
        query += SCHEMA_FILTER
        params.append(schema)
    try:
        with conn.cursor() as cur:
            cur.execute(query, params)
            rows = cur.fetchall()
    except psycopg.OperationalError as exc:
        raise DatabaseUnavailable(f"catalog query failed: {exc}") from exc

    actual: ActualSchema = {}
    for column_name, data_type in rows:
        actual[column_name] = data_type
    return actual


def check_field_presence(
    expectations: Sequence[FieldExpectation], actual: ActualSchema
) -> List[FieldPresence]:
    return [FieldPresence(exp.name, exp.name in actual) for exp in expectations]


def check_field_type(
    expectations: Sequence[FieldExpectation], actual: ActualSchema
) -> List[FieldTypeMatch]:
    results = []
    for exp in expectations:
        actual_type = actual.get(exp.name)
        results.append(
            FieldTypeMatch(
                name=exp.name,
                expected_type=exp.type,
                actual_type=actual_type,
                matches=actual_type == exp.type,
            )
        )
    return results


def check_conformance(
    conn: psycopg.Connection,
    table_name: str,
    expectations: Sequence[FieldExpectation],
    schema: Optional[str] = None,
) -> ConformanceReport:
    actual = fetch_actual_schema(conn, table_name, schema=schema)
    expected_names = {exp.name for exp in expectations}
    return ConformanceReport(
        table=table_name,
        presence=check_field_presence(expectations, actual),
        types=check_field_type(expectations, actual),
        extra=sorted(name for name in actual if name not in expected_names),
    )


def assert_conforms(report: ConformanceReport) -> None:
    if report.conforms:
        return
    problems = [f"missing column {name!r}" for name in report.missing]
    for result in report.types:
        if result.name in report.mismatched:
            problems.append(
                f"column {result.name!r} is {result.actual_type!r}, expected {result.expected_type!r}"
            )
    raise AssertionMismatch(f"table {report.table!r} does not conform: " + "; ".join(problems))
