"""
Export a parsed roster to JSON, CSV (student list) or ICS (weekly meetings).
"""
from __future__ import annotations

import csv
import hashlib
import re
from datetime import date, datetime, timedelta, timezone
from pathlib import Path

import icalendar
import pytz

from .config import get_config
from .models import ParsedRoster, ScheduleEntry

# Day letters used by the class list. T covers both Tuesday and Thursday.
_DAY_CODES = {
    "M": 0,
    "T": 1,
    "W": 2,
    "F": 4,
    "S": 5,
}

STUDENT_CSV_FIELDS = ["studentNo", "fullName", "section", "courseCode", "subjectName"]


def _parse_time_range(text: str) -> tuple[str, str] | None:
    """'1:00 PM - 2:30 PM' -> ('13:00', '14:30')."""
    m = re.search(
        r"(\d{1,2}):(\d{2})\s*(AM|PM|am|pm)?\s*-\s*"
        r"(\d{1,2}):(\d{2})\s*(AM|PM|am|pm)?",
        text,
    )
    if not m:
        return None
    h1, m1, ap1, h2, m2, ap2 = m.groups()

    def to_24(h: str, mm: str, ap: str | None) -> str:
        hour = int(h)
        if ap:
            if ap.upper() == "AM" and hour == 12:
                hour = 0
            elif ap.upper() == "PM" and hour != 12:
                hour += 12
        return f"{hour:02d}:{int(mm):02d}"

    return to_24(h1, m1, ap1), to_24(h2, m2, ap2)


def _weekdays(day: str) -> list[int]:
    """'TF' -> [1, 4]. Unknown letters are ignored."""
    days = []
    for letter in day.upper():
        idx = _DAY_CODES.get(letter)
        if idx is not None and idx not in days:
            days.append(idx)
    return days


def _first_date_for_weekday(start: date, weekday: int) -> date:
    """First date on/after start falling on weekday (Mon=0)."""
    return start + timedelta(days=(weekday - start.weekday()) % 7)


def _meeting_events(
    roster: ParsedRoster,
    entry: ScheduleEntry,
    term_start: date,
    term_end: date,
    tz,
) -> list[icalendar.Event]:
    times = _parse_time_range(entry.time)
    if not times:
        return []
    start_hm, end_hm = (datetime.strptime(t, "%H:%M").time() for t in times)

    summary = f"{roster.course_code} {roster.section}"
    desc = f"Subject: {roster.subject_name}\nFaculty: {roster.faculty_name}"
    until_dt = datetime.combine(term_end, datetime.max.time()).replace(
        microsecond=0, tzinfo=timezone.utc
    )

    events = []
    for weekday in _weekdays(entry.day):
        first = _first_date_for_weekday(term_start, weekday)
        if first > term_end:
            continue
        event = icalendar.Event()
        uid_string = f"{summary}-{weekday}-{entry.key}"
        uid_hash = hashlib.md5(uid_string.encode("utf-8")).hexdigest()
        event.add("uid", f"{uid_hash}@class-roster-export")
        event.add("summary", summary)
        event.add("description", desc)
        event.add("location", entry.room)
        event.add("dtstart", tz.localize(datetime.combine(first, start_hm)))
        event.add("dtend", tz.localize(datetime.combine(first, end_hm)))
        event.add("dtstamp", datetime.now(timezone.utc))
        event.add("rrule", {"freq": "weekly", "until": until_dt})
        events.append(event)
    return events


def export_ics(
    roster: ParsedRoster,
    out_path: str | Path,
    term_start: str | None = None,
    term_end: str | None = None,
) -> None:
    """Export the meeting schedule as weekly recurring events between term_start and term_end (YYYY-MM-DD)."""
    if not term_start or not term_end:
        raise ValueError("ICS export needs --term-start and --term-end (YYYY-MM-DD).")
    start = date.fromisoformat(term_start)
    end = date.fromisoformat(term_end)
    if end < start:
        raise ValueError(f"Term end {term_end} is before term start {term_start}.")

    tz_name = get_config().timezone
    tz = pytz.timezone(tz_name)

    cal = icalendar.Calendar()
    cal.add("prodid", "-//Class Roster Export//EN")
    cal.add("version", "2.0")
    cal.add("calscale", "GREGORIAN")
    cal.add("x-wr-calname", f"{roster.course_code} {roster.section}")
    cal.add("x-wr-timezone", tz_name)

    for entry in roster.schedules:
        for event in _meeting_events(roster, entry, start, end, tz):
            cal.add_component(event)

    Path(out_path).write_text(cal.to_ical().decode("utf-8"), encoding="utf-8")


def export_csv(roster: ParsedRoster, out_path: str | Path) -> None:
    """Export the student list to CSV, one row per student."""
    with open(out_path, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=STUDENT_CSV_FIELDS)
        w.writeheader()
        for student in roster.students:
            w.writerow({
                "studentNo": student.student_no or "",
                "fullName": student.full_name,
                "section": roster.section,
                "courseCode": roster.course_code,
                "subjectName": roster.subject_name,
            })


def export_json(roster: ParsedRoster, out_path: str | Path) -> None:
    """Export the whole roster to JSON with camelCase keys."""
    Path(out_path).write_text(roster.model_dump_json(indent=2, by_alias=True), encoding="utf-8")


def export(
    roster: ParsedRoster,
    out_path: str | Path,
    fmt: str,
    term_start: str | None = None,
    term_end: str | None = None,
) -> None:
    """Export to the given format: json, csv, or ics."""
    fmt = fmt.lower()
    if fmt == "json":
        export_json(roster, out_path)
    elif fmt == "csv":
        export_csv(roster, out_path)
    elif fmt == "ics":
        export_ics(roster, out_path, term_start=term_start, term_end=term_end)
    else:
        raise ValueError(f"Unsupported format: {fmt}. Use json, csv, or ics.")
