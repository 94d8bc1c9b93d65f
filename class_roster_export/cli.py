"""
Command-line interface: parse a class list export and write JSON / CSV / ICS.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

from . import __version__
from .config import get_config
from .export import export
from .logging import setup_logging
from .models import ParsedRoster
from .roster_csv import parse_roster_csv


def _print_summary(roster: ParsedRoster) -> None:
    """Fields are heuristic guesses; show them for review before the file is used."""
    print(f"Course Code  : {roster.course_code}")
    print(f"Subject      : {roster.subject_name}")
    print(f"Section      : {roster.section} ({roster.department})")
    print(f"Faculty      : {roster.faculty_name or '-'}")
    print(f"Year Level   : {roster.year_level or '-'}")
    for s in roster.schedules:
        print(f"Schedule     : {s.day} {s.time} ({s.room})")
    print(f"Students     : {len(roster.students)}")


def _print_students(roster: ParsedRoster) -> None:
    print("  # | Student No  | Full Name")
    print("-" * 60)
    for i, student in enumerate(roster.students, start=1):
        print(f"{i:>3} | {student.student_no or '':<11} | {student.full_name}")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description=(
            "Parse a class list CSV exported from the enrollment system and export the "
            "roster to JSON / CSV (students) / ICS (meeting schedule)."
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("export_file", metavar="EXPORT_FILE", help="Class list CSV export to parse.")
    parser.add_argument(
        "-o",
        "--output",
        default="class_roster",
        help="Output path (without extension). Default: class_roster",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["json", "csv", "ics"],
        default="json",
        help="Export format. Default: json",
    )
    parser.add_argument(
        "--term-start",
        metavar="YYYY-MM-DD",
        help="(ICS only) First class day of the term, e.g. 2025-08-11.",
    )
    parser.add_argument(
        "--term-end",
        metavar="YYYY-MM-DD",
        help="(ICS only) Last class day of the term, e.g. 2025-12-13.",
    )
    parser.add_argument(
        "--list-students",
        action="store_true",
        help="Print the parsed student list then exit without writing a file.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    args = parser.parse_args(argv)

    config = get_config()
    setup_logging(json_output=config.log_json, log_level="DEBUG" if args.verbose else config.log_level)

    path = Path(args.export_file)
    if not path.exists():
        print(f"Error: export file not found: {path}", file=sys.stderr)
        return 1

    roster = parse_roster_csv(csv_path=path, config=config)
    if roster is None:
        print(
            f"Error: could not read a class list from {path} "
            "(course code, subject title or student rows missing).",
            file=sys.stderr,
        )
        return 1

    _print_summary(roster)
    if args.list_students:
        print()
        _print_students(roster)
        return 0

    ext = {"json": ".json", "csv": ".csv", "ics": ".ics"}[args.format]
    out_path = Path(args.output).with_suffix(ext) if Path(args.output).suffix else Path(args.output + ext)
    try:
        export(roster, out_path, args.format, term_start=args.term_start, term_end=args.term_end)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    print(f"Exported {roster.course_code} {roster.section} to {out_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
