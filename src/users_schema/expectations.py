# SPDX-FileCopyrightText: 2025 Blackcat Informatics® Inc.
# SPDX-License-Identifier: MIT

"""Expected shape of the ``users`` table."""

from __future__ import annotations

import csv
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple


@dataclass(frozen=True)
class FieldExpectation:
    name: str
    type: str  # information_schema.columns.data_type, verbatim


USERS_TABLE = "users"

USERS_FIELDS: Tuple[FieldExpectation, ...] = (
    FieldExpectation("id", "integer"),
    FieldExpectation("email", "character varying"),
    FieldExpectation("username", "character varying"),
    FieldExpectation("birthdate", "date"),
    FieldExpectation("city", "character varying"),
    FieldExpectation("password", "character varying"),
    FieldExpectation("enabled", "boolean"),
    FieldExpectation("created_at", "timestamp without time zone"),
    FieldExpectation("updated_at", "timestamp without time zone"),
)


def load_expectations(path: Path) -> Tuple[FieldExpectation, ...]:
    """Read ``name,type`` rows from a CSV file, keeping file order."""
    fields: List[FieldExpectation] = []
    seen = set()
    with path.open(newline="") as fh:
        reader = csv.DictReader(fh)
        required = {"name", "type"}
        missing = required - set(reader.fieldnames or [])
        if missing:
            raise ValueError(f"{path} missing columns: {', '.join(sorted(missing))}")
        for line_no, row in enumerate(reader, start=2):
            name = (row["name"] or "").strip()
            type_ = (row["type"] or "").strip()
            if not name:
                raise ValueError(f"{path}:{line_no} has an empty field name")
            if name in seen:
                raise ValueError(f"{path}:{line_no} duplicates field {name!r}")
            seen.add(name)
            fields.append(FieldExpectation(name, type_))
    return tuple(fields)
