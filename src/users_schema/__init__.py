"""Schema conformance checks for the ``users`` table.

The checker compares ``information_schema.columns`` against a declared
registry of fields; the probes exercise the write-time rules the table
enforces. Both take an already-open psycopg connection so callers decide
how long the connection lives.
"""

from .checker import (
    ConformanceReport,
    FieldPresence,
    FieldTypeMatch,
    assert_conforms,
    check_conformance,
    check_field_presence,
    check_field_type,
    fetch_actual_schema,
)
from .database import fetch_rows, insert_row, open_connection, truncate
from .errors import (
    AssertionMismatch,
    ConfigurationError,
    ConstraintViolation,
    DatabaseUnavailable,
    UsersSchemaError,
)
from .expectations import USERS_FIELDS, USERS_TABLE, FieldExpectation, load_expectations
from .probes import USERS_CONSTRAINT_PROBES, ConstraintProbe, ProbeOutcome, run_probe

__all__: list[str] = [
    "AssertionMismatch",
    "ConfigurationError",
    "ConformanceReport",
    "ConstraintProbe",
    "ConstraintViolation",
    "DatabaseUnavailable",
    "FieldExpectation",
    "FieldPresence",
    "FieldTypeMatch",
    "ProbeOutcome",
    "USERS_CONSTRAINT_PROBES",
    "USERS_FIELDS",
    "USERS_TABLE",
    "UsersSchemaError",
    "assert_conforms",
    "check_conformance",
    "check_field_presence",
    "check_field_type",
    "fetch_actual_schema",
    "fetch_rows",
    "insert_row",
    "load_expectations",
    "open_connection",
    "run_probe",
    "truncate",
]
