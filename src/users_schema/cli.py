# SPDX-FileCopyrightText: 2025 Blackcat Informatics® Inc.
# SPDX-License-Identifier: MIT

"""Check a live table against its expected schema and report as CSV."""

from __future__ import annotations

import argparse
import csv
import sys
from pathlib import Path
from typing import List, Optional, Sequence, TextIO

from .checker import ConformanceReport, check_conformance
from .config import resolve_database_url
from .database import open_connection
from .errors import ConfigurationError, DatabaseUnavailable
from .expectations import USERS_FIELDS, USERS_TABLE, load_expectations
from .probes import USERS_CONSTRAINT_PROBES, ProbeOutcome, run_probe

PREFIX = "[users-schema]"


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="users-schema-check", description=__doc__)
    parser.add_argument("--dsn", help="Connection string (overrides DATABASE_URL)")
    parser.add_argument("--env", type=Path, help="Env file holding DATABASE_URL (default: ./.env)")
    parser.add_argument("--table", default=USERS_TABLE)
    parser.add_argument("--schema", help="Restrict the catalog lookup to this schema")
    parser.add_argument("--expectations", type=Path, help="CSV file with name,type columns")
    parser.add_argument("--output", type=Path)
    parser.add_argument("--only-failures", action="store_true")
    parser.add_argument(
        "--probe-constraints",
        action="store_true",
        help="Also run the insert probes (inserts rows, then truncates the table)",
    )
    return parser.parse_args(argv)


def write_report(
    report: ConformanceReport, out: TextIO, only_failures: bool = False
) -> None:
    writer = csv.writer(out)
    writer.writerow(["name", "expected_type", "actual_type", "present", "matches"])
    for presence, type_match in zip(report.presence, report.types):
        if only_failures and presence.present and type_match.matches:
            continue
        writer.writerow([
            presence.name,
            type_match.expected_type,
            type_match.actual_type or "",
            str(presence.present).lower(),
            str(type_match.matches).lower(),
        ])


def write_probes(outcomes: List[ProbeOutcome], out: TextIO, only_failures: bool = False) -> None:
    writer = csv.writer(out)
    writer.writerow(["probe", "expected_kind", "actual_kind", "passed", "detail"])
    for outcome in outcomes:
        if only_failures and outcome.passed:
            continue
        writer.writerow([
            outcome.probe.name,
            outcome.probe.expected_kind or "",
            outcome.actual_kind or "",
            str(outcome.passed).lower(),
            outcome.detail,
        ])


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    try:
        dsn = args.dsn or resolve_database_url(args.env)
    except ConfigurationError as exc:
        print(f"{PREFIX} {exc}", file=sys.stderr)
        return 2

    try:
        expectations = load_expectations(args.expectations) if args.expectations else USERS_FIELDS
    except (OSError, ValueError) as exc:
        print(f"{PREFIX} {exc}", file=sys.stderr)
        return 2

    outcomes: List[ProbeOutcome] = []
    try:
        with open_connection(dsn) as conn:
            report = check_conformance(conn, args.table, expectations, schema=args.schema)
            if args.probe_constraints:
                outcomes = [run_probe(conn, probe, args.table) for probe in USERS_CONSTRAINT_PROBES]
    except DatabaseUnavailable as exc:
        print(f"{PREFIX} {exc}", file=sys.stderr)
        return 2

    out = args.output.open("w", newline="") if args.output else sys.stdout
    try:
        write_report(report, out, args.only_failures)
        if args.probe_constraints:
            out.write("\n")
            write_probes(outcomes, out, args.only_failures)
    finally:
        if args.output:
            out.close()

    if not report.presence:
        print(f"{PREFIX} no expectations to check", file=sys.stderr)
    elif not report.conforms:
        print(
            f"{PREFIX} {args.table}: missing={report.missing} mismatched={report.mismatched}",
            file=sys.stderr,
        )
    failed_probes = [outcome.probe.name for outcome in outcomes if not outcome.passed]
    if failed_probes:
        print(f"{PREFIX} failed probes: {', '.join(failed_probes)}", file=sys.stderr)
    return 0 if report.conforms and not failed_probes else 1


if __name__ == "__main__":  # pragma: no cover - exercised via the console script
    sys.exit(main(sys.argv[1:]))
