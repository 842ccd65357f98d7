# SPDX-FileCopyrightText: 2025 Blackcat Informatics® Inc.
# SPDX-License-Identifier: MIT

"""Insert probes for the rules the ``users`` table enforces on writes."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

import psycopg

from .database import insert_row, truncate
from .errors import ConstraintViolation
from .expectations import USERS_TABLE


@dataclass(frozen=True)
class ConstraintProbe:
    """One attempted insert and the outcome the table should produce.

    ``expected_kind`` is a ``ConstraintViolation.kind`` for negative probes
    and ``None`` for rows that must be accepted. ``expect`` maps returned
    columns to a literal value or to a type the value must be an instance of.
    """

    name: str
    row: Mapping[str, Any]
    expected_kind: Optional[str] = None
    pattern: Optional[str] = None
    expect: Mapping[str, Any] = field(default_factory=dict)


@dataclass
class ProbeOutcome:
    probe: ConstraintProbe
    passed: bool
    actual_kind: Optional[str]
    detail: str
    returned: Optional[Dict[str, Any]] = None


VALID_USER: Dict[str, Any] = {
    "email": "user@example.com",
    "username": "user",
    "birthdate": "2024-01-02",
    "city": "La Plata",
    "password": "root",
}


def _without(row: Mapping[str, Any], *columns: str) -> Dict[str, Any]:
    return {key: value for key, value in row.items() if key not in columns}


USERS_CONSTRAINT_PROBES: Tuple[ConstraintProbe, ...] = (
    ConstraintProbe(
        "valid_user",
        VALID_USER,
        expect={"email": "user@example.com", "created_at": dt.datetime},
    ),
    ConstraintProbe(
        "invalid_email",
        {**VALID_USER, "email": "user", "password": "root123"},
        expected_kind="check",
        pattern="users_email_check",
    ),
    ConstraintProbe(
        "invalid_birthdate",
        _without({**VALID_USER, "birthdate": "invalid_date"}, "password"),
        expected_kind="invalid_datetime",
        pattern="invalid input syntax for type date",
    ),
    ConstraintProbe(
        "missing_city",
        _without(VALID_USER, "city", "password"),
        expected_kind="not_null",
        pattern='null value in column "city"',
    ),
    ConstraintProbe(
        "missing_password",
        {
            "email": "nopass@demo.com",
            "username": "nopass_user",
            "birthdate": "2000-01-01",
            "city": "CABA",
        },
        expected_kind="not_null",
        pattern="password",
    ),
    ConstraintProbe(
        "enabled_defaults_false",
        {
            "email": "enabled@demo.com",
            "username": "enabled_user",
            "birthdate": "2000-01-01",
            "city": "CABA",
            "password": "clave123",
        },
        expect={"enabled": False},
    ),
    ConstraintProbe(
        "updated_at_populated",
        {
            "email": "auto@demo.com",
            "username": "auto_user",
            "birthdate": "2000-01-01",
            "city": "CABA",
            "password": "clave123",
        },
        expect={"updated_at": dt.datetime},
    ),
)


def _value_matches(expected: Any, actual: Any) -> bool:
    if isinstance(expected, type):
        return isinstance(actual, expected)
    return actual == expected


def _check_returned(probe: ConstraintProbe, returned: Optional[Mapping[str, Any]]) -> Optional[str]:
    for column, expected in probe.expect.items():
        actual = (returned or {}).get(column)
        if not _value_matches(expected, actual):
            wanted = expected.__name__ if isinstance(expected, type) else repr(expected)
            return f"{column} is {actual!r}, expected {wanted}"
    return None


def _judge_violation(probe: ConstraintProbe, violation: ConstraintViolation) -> ProbeOutcome:
    if probe.expected_kind is None:
        return ProbeOutcome(probe, False, violation.kind, f"rejected: {violation.message}")
    if violation.kind != probe.expected_kind:
        return ProbeOutcome(
            probe,
            False,
            violation.kind,
            f"expected {probe.expected_kind} violation, got {violation.kind}: {violation.message}",
        )
    if probe.pattern and not violation.matches(probe.pattern):
        return ProbeOutcome(
            probe,
            False,
            violation.kind,
            f"message does not mention {probe.pattern!r}: {violation.message}",
        )
    return ProbeOutcome(probe, True, violation.kind, violation.message)


def run_probe(
    conn: psycopg.Connection,
    probe: ConstraintProbe,
    table: str = USERS_TABLE,
) -> ProbeOutcome:
    """Attempt the probe's insert, then truncate ``table``.

    A statement the server cannot plan (missing table or column) fails the
    probe with kind ``"error"``; nothing reached the table, so nothing is
    truncated.
    """
    try:
        result = insert_row(conn, table, probe.row, returning=tuple(probe.expect))
    except ConstraintViolation as violation:
        truncate(conn, table)
        return _judge_violation(probe, violation)
    except psycopg.ProgrammingError as exc:
        return ProbeOutcome(probe, False, "error", f"insert failed: {str(exc).strip()}")
    truncate(conn, table)

    if probe.expected_kind is not None:
        return ProbeOutcome(
            probe, False, None, f"row accepted, expected {probe.expected_kind} violation", result.returned
        )
    if result.rowcount != 1:
        return ProbeOutcome(probe, False, None, f"affected {result.rowcount} rows, expected 1", result.returned)
    problem = _check_returned(probe, result.returned)
    if problem:
        return ProbeOutcome(probe, False, None, problem, result.returned)
    return ProbeOutcome(probe, True, None, "inserted 1 row", result.returned)
