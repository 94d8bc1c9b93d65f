"""
Parse a registrar class list export (CSV saved from the enrollment system)
into a ParsedRoster.

The export has no fixed column layout: labels ("Class Section",
"Subject Title", "Faculty", ...) and their values sit somewhere on the same
comma-separated line or on the next few lines, schedules wrap onto
continuation rows, and the student list is mixed with page footers and
print stamps. Every field therefore has its own detector scanning the whole
file, and the assembler keeps the result only when course code, subject
title and at least one student were found.
"""
from __future__ import annotations

import csv
import re
from pathlib import Path
from typing import Callable, Iterable, Iterator, List, Sequence

from .config import RosterConfig, get_config
from .logging import get_logger
from .models import ParsedRoster, ScheduleEntry, StudentEntry

log = get_logger(__name__)

UNKNOWN_SECTION = "UNKNOWN"

_COURSE_CODE_RE = re.compile(r"\b([A-Z]{2,4}\d{3,4})\b")

# Day letters, "H:MM AM - H:MM PM", then "(ROOM)"
_SCHEDULE_RE = re.compile(
    r"([MTWFS]{1,3})\s+"
    r"(\d{1,2}:\d{2}\s+(?:AM|PM)\s*-\s*\d{1,2}:\d{2}\s+(?:AM|PM))"
    r"\s*\(([^)]+)\)",
    re.IGNORECASE,
)
_CONTINUATION_ROW_RE = re.compile(r"^,{10,}|^[\s,]+[MTWFS]")

_STUDENT_NO_RE = re.compile(r"^\d{9,11}$")
_NAME_CELL_RE = re.compile(r"^[A-Z][A-Z\s,]+[A-Z]$")
_NAME_SHAPE_RE = re.compile(r"^[A-Z][A-Z\s,]+[A-Z]")
_QUOTED_RE = re.compile(r'"([^"]+)"')
_ISO_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")
_BRACKETED_HOST_RE = re.compile(r"\[ip-[\d.-]+\]", re.IGNORECASE)

_MIN_ROW_LENGTH = 5

_NOISE_MARKERS = (
    "TOTAL NUMBER",
    "Page",
    "Date Printed",
    "OFFICIAL LIST",
    "ip-",
    ".compute.internal",
)
_MONTHS = (
    "January", "February", "March", "April", "May", "June", "July",
    "August", "September", "October", "November", "December",
)


# ── Line scanner ───────────────────────────────────────────────

def _scan_lines(text: str) -> List[str]:
    """Split on newlines and trim. Blank lines are kept."""
    if not text:
        return []
    return [line.strip() for line in text.split("\n")]


def _split_cells(line: str) -> List[str]:
    """
    Comma-split one line, honouring CSV quoting so that "LAST, FIRST"
    stays one cell. Cells are trimmed and stripped of stray quotes.
    """
    try:
        row = next(csv.reader([line.replace("\0", "")]), [])
    except csv.Error:
        # Bare \r (old Mac line endings) or a cell past the csv field limit
        row = line.split(",")
    return [cell.strip().replace('"', "") for cell in row]


# ── Overwrite policies ─────────────────────────────────────────

def _keep_first(candidates: Iterable[str]) -> str:
    """First non-empty candidate wins; later ones are never looked at."""
    return next((c for c in candidates if c), "")


def _keep_last(candidates: Iterable[str]) -> str:
    """Every non-empty candidate overwrites the previous one."""
    found = ""
    for c in candidates:
        if c:
            found = c
    return found


# ── Section ────────────────────────────────────────────────────

def _section_pattern(programs: Sequence[str]) -> re.Pattern[str]:
    alternatives = "|".join(re.escape(p) for p in programs)
    return re.compile(rf"({alternatives})[\s-]?(\d+[A-Z])", re.IGNORECASE)


def _normalize_section(raw: str) -> str:
    """'BSIT-4D' / 'bsit 4d' -> 'BSIT4D'."""
    return re.sub(r"[\s-]+", "", raw).upper()


def _bare_section_candidates(lines: Sequence[str], pattern: re.Pattern[str]) -> Iterator[str]:
    for line in lines:
        m = pattern.search(line)
        if m:
            yield _normalize_section(m.group(0))


def _labelled_section_candidates(lines: Sequence[str], pattern: re.Pattern[str]) -> Iterator[str]:
    """One candidate per 'Class Section' line: its first matching cell."""
    for line in lines:
        if "Class Section" not in line:
            continue
        for cell in _split_cells(line):
            m = pattern.search(cell)
            if m:
                yield _normalize_section(m.group(0))
                break


def _detect_section(lines: Sequence[str], pattern: re.Pattern[str]) -> str:
    """Section from 'Class Section' lines; a later labelled match overrides an earlier one."""
    return _keep_last(_labelled_section_candidates(lines, pattern))


# ── Course code ────────────────────────────────────────────────

def _detect_course_code(lines: Sequence[str]) -> str:
    return _keep_first(
        m.group(1) for m in (_COURSE_CODE_RE.search(line) for line in lines) if m
    )


# ── Subject title ──────────────────────────────────────────────

def _is_subject_cell(cell: str) -> bool:
    return (
        bool(cell)
        and cell != "Subject Title"
        and len(cell) > 5
        and not cell[0].isdigit()
        and "Subject" not in cell
    )


def _subject_candidates(lines: Sequence[str]) -> Iterator[str]:
    """Cells of each 'Subject Title' line and the two lines after it, in order."""
    for i, line in enumerate(lines):
        if "Subject Title" not in line:
            continue
        for window_line in lines[i:i + 3]:
            for cell in _split_cells(window_line):
                if _is_subject_cell(cell):
                    yield cell


def _detect_subject_name(lines: Sequence[str]) -> str:
    return _keep_first(_subject_candidates(lines))


# ── Faculty ────────────────────────────────────────────────────

def _clean_faculty_name(name: str) -> str:
    """Drop quotes and trim, keeping 'Last, First' order: '"CARUMBA ,  PRINCE "' -> 'CARUMBA, PRINCE'."""
    cleaned = name.replace('"', "").strip()
    if "," in cleaned:
        return ", ".join(part.strip() for part in cleaned.split(","))
    return cleaned


def _faculty_from_line(line: str) -> str:
    """Quoted names on the line win over bare cells."""
    for quoted in _QUOTED_RE.findall(line):
        name = _clean_faculty_name(quoted)
        if name and name != "Faculty" and len(name) > 2:
            return name

    for cell in _split_cells(line):
        if not cell or cell == "Faculty" or len(cell) <= 2 or not cell[0].isupper():
            continue
        if "," in cell or len(cell.split(" ")) >= 2:
            return _clean_faculty_name(cell)
    return ""


def _detect_faculty_name(lines: Sequence[str]) -> str:
    # Later "Faculty" lines overwrite earlier ones
    return _keep_last(_faculty_from_line(line) for line in lines if "Faculty" in line)


# ── Year level ─────────────────────────────────────────────────

def _year_level_from_line(line: str) -> str:
    for cell in _split_cells(line):
        if cell and cell != "Year Level" and "Year" in cell:
            return cell
    return ""


def _detect_year_level(lines: Sequence[str]) -> str:
    return _keep_first(_year_level_from_line(line) for line in lines if "Year Level" in line)


# ── Schedules ──────────────────────────────────────────────────

ScheduleStrategy = Callable[[str], Iterable[re.Match]]


def _match_whole_line(line: str) -> Iterable[re.Match[str]]:
    m = _SCHEDULE_RE.search(line)
    return [m] if m else []


def _match_schedule_cells(line: str) -> Iterable[re.Match[str]]:
    """'Schedule(s),,,M 1:00 PM - 2:30 PM (Makeshift-06),,' -> one match per cell."""
    if "Schedule" not in line:
        return []
    matches = (_SCHEDULE_RE.search(cell) for cell in _split_cells(line))
    return [m for m in matches if m]


def _match_continuation_row(line: str) -> Iterable[re.Match[str]]:
    """Wrapped schedule cells land on rows that start with a run of commas."""
    if not _CONTINUATION_ROW_RE.search(line):
        return []
    return _match_whole_line(line)


SCHEDULE_STRATEGIES: tuple[ScheduleStrategy, ...] = (
    _match_whole_line,
    _match_schedule_cells,
    _match_continuation_row,
)


def _detect_schedules(
    lines: Sequence[str],
    strategies: Sequence[ScheduleStrategy] = SCHEDULE_STRATEGIES,
) -> List[ScheduleEntry]:
    """Run every strategy on every line; keep the first entry per day|time|room."""
    schedules: List[ScheduleEntry] = []
    seen: set[str] = set()
    for line in lines:
        for strategy in strategies:
            for m in strategy(line):
                entry = ScheduleEntry(day=m.group(1), time=m.group(2), room=m.group(3).strip())
                if entry.key in seen:
                    continue
                seen.add(entry.key)
                schedules.append(entry)
    return schedules


# ── Students ───────────────────────────────────────────────────

def _is_roster_header(line: str) -> bool:
    return "#" in line and ("Student No" in line or "Full Name" in line)


def _is_noise_line(line: str) -> bool:
    """Page footers, print stamps, host names and dates between student rows."""
    if any(marker in line for marker in _NOISE_MARKERS):
        return True
    if any(month in line for month in _MONTHS):
        return True
    return bool(_ISO_DATE_RE.search(line) or _BRACKETED_HOST_RE.search(line))


def _is_name_shape(name: str) -> bool:
    """Uppercase-led 'LAST, First' shape used for every accepted student name."""
    return "," in name and bool(_NAME_SHAPE_RE.match(name))


def _is_noise_name(name: str) -> bool:
    lowered = name.lower()
    return (
        "date printed" in lowered
        or "ip-" in lowered
        or ".compute.internal" in lowered
        or bool(_ISO_DATE_RE.search(name))
    )


def _quoted_name(line: str) -> str:
    """First quoted substring of the row, if it looks like 'LAST, First'."""
    m = _QUOTED_RE.search(line)
    if not m:
        return ""
    name = m.group(1).strip()
    if (
        "," in name
        and name[:1].isupper()
        and not re.search(r"\d{4}", name)
        and "[ip-" not in name.lower()
        and len(name) > 5
    ):
        return name
    return ""


def _parse_student_row(line: str) -> StudentEntry | None:
    """',1.,,2022310039,"ABUTON, Harold Y",' -> StudentEntry."""
    student_no = ""
    full_name = ""
    for cell in _split_cells(line):
        if _STUDENT_NO_RE.match(cell):
            student_no = cell
        if "," in cell and _NAME_CELL_RE.match(cell):
            full_name = cell

    if not full_name:
        full_name = _quoted_name(line)

    full_name = full_name.strip()
    if len(full_name) <= 3 or not _is_name_shape(full_name) or _is_noise_name(full_name):
        return None
    return StudentEntry(full_name=full_name, student_no=student_no or None)


def _detect_students(lines: Sequence[str]) -> List[StudentEntry]:
    start = next((i for i, line in enumerate(lines) if _is_roster_header(line)), None)
    if start is None:
        return []

    students: List[StudentEntry] = []
    for line in lines[start + 1:]:
        if len(line) < _MIN_ROW_LENGTH or _is_noise_line(line):
            continue
        student = _parse_student_row(line)
        if student is not None:
            students.append(student)
    return students


# ── Assembly ───────────────────────────────────────────────────

def _leading_letters(value: str) -> str:
    m = re.match(r"[A-Z]+", value)
    return m.group(0) if m else ""


def _derive_department(section: str, course_code: str, default: str) -> str:
    """BSIT4D -> BSIT; without a section IT413 -> IT; otherwise the default."""
    if section:
        return _leading_letters(section) or default
    if course_code:
        return _leading_letters(course_code) or default
    return default


def parse_roster_text(text: str, config: RosterConfig | None = None) -> ParsedRoster | None:
    """
    Parse the full text of a class list export.

    Returns None when the course code, the subject title or every student row
    is missing; nothing partial is returned in that case.
    """
    config = config or get_config()
    lines = _scan_lines(text)
    section_re = _section_pattern(config.section_programs)

    section = _detect_section(lines, section_re)
    course_code = _detect_course_code(lines)
    subject_name = _detect_subject_name(lines)
    faculty_name = _detect_faculty_name(lines)
    year_level = _detect_year_level(lines)
    schedules = _detect_schedules(lines)
    students = _detect_students(lines)

    # Exports without a "Class Section" label still print the code somewhere;
    # the first bare match in the file is kept
    if not section:
        section = _keep_first(_bare_section_candidates(lines, section_re))

    department = _derive_department(section, course_code, config.default_department)

    missing = [
        name
        for name, value in (
            ("course_code", course_code),
            ("subject_name", subject_name),
            ("students", students),
        )
        if not value
    ]
    if missing:
        log.debug("roster_rejected", missing=missing, lines=len(lines))
        return None

    log.debug(
        "roster_parsed",
        course_code=course_code,
        section=section or UNKNOWN_SECTION,
        students=len(students),
        schedules=len(schedules),
    )
    return ParsedRoster(
        section=section or UNKNOWN_SECTION,
        course_code=course_code,
        subject_name=subject_name,
        faculty_name=faculty_name,
        year_level=year_level,
        department=department,
        students=tuple(students),
        schedules=tuple(schedules),
    )


def parse_roster_csv(
    csv_path: str | Path | None = None,
    csv_content: str | None = None,
    config: RosterConfig | None = None,
) -> ParsedRoster | None:
    """
    Parse a saved class list export file or its text.

    :param csv_path: Path to the CSV export. Omit if csv_content is provided.
    :param csv_content: Raw export text. Used when csv_path is not provided.
    :param config: Settings override; defaults to get_config().
    """
    if csv_content is not None:
        text = csv_content
    elif csv_path is not None:
        # Spreadsheet tools often save with a BOM
        text = Path(csv_path).read_text(encoding="utf-8-sig", errors="ignore")
    else:
        raise ValueError("Provide either csv_path or csv_content.")
    return parse_roster_text(text, config=config)
