# SPDX-FileCopyrightText: 2025 Blackcat Informatics® Inc.
# SPDX-License-Identifier: MIT

"""Exception hierarchy shared by the checker, the probes and the CLI."""

from __future__ import annotations

import re
from typing import Optional

import psycopg
from psycopg import errors as pg_errors


class UsersSchemaError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(UsersSchemaError):
    """No connection string could be found."""


class DatabaseUnavailable(UsersSchemaError, ConnectionError):
    """The database could not be reached or rejected the credentials."""


class AssertionMismatch(UsersSchemaError, AssertionError):
    """The live schema or data diverges from what was expected."""


# Ordered most specific first; the first isinstance hit wins.
_KINDS = (
    (pg_errors.CheckViolation, "check"),
    (pg_errors.NotNullViolation, "not_null"),
    (pg_errors.UniqueViolation, "unique"),
    (pg_errors.ForeignKeyViolation, "foreign_key"),
    (pg_errors.InvalidDatetimeFormat, "invalid_datetime"),
    (psycopg.IntegrityError, "integrity"),
    (psycopg.DataError, "data"),
)


class ConstraintViolation(UsersSchemaError):
    """A row was rejected by a rule the database enforces."""

    def __init__(
        self,
        message: str,
        *,
        kind: str,
        sqlstate: Optional[str] = None,
        constraint: Optional[str] = None,
        column: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.sqlstate = sqlstate
        self.constraint = constraint
        self.column = column

    @classmethod
    def from_driver_error(cls, exc: psycopg.Error) -> "ConstraintViolation":
        kind = "integrity"
        for error_type, name in _KINDS:
            if isinstance(exc, error_type):
                kind = name
                break
        diag = exc.diag
        return cls(
            str(exc).strip(),
            kind=kind,
            sqlstate=exc.sqlstate,
            constraint=diag.constraint_name,
            column=diag.column_name,
        )

    def matches(self, pattern: str) -> bool:
        return re.search(pattern, self.message) is not None

    def __repr__(self) -> str:
        return (
            f"ConstraintViolation(kind={self.kind!r}, sqlstate={self.sqlstate!r}, "
            f"constraint={self.constraint!r}, column={self.column!r})"
        )
