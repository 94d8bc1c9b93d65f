"""Pydantic models for parsed class lists.

Instances are frozen: a roster is built once per parse and handed to the
caller as-is. JSON output uses camelCase keys (courseCode, studentNo, ...).
"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

_FROZEN = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class StudentEntry(BaseModel):
    """One student row from the roster section of the export."""

    model_config = _FROZEN

    full_name: str  # "ABUTON, Harold Y"
    student_no: str | None = None  # 9-11 digits, e.g. "2022310039"


class ScheduleEntry(BaseModel):
    """One meeting slot, e.g. M 1:00 PM - 2:30 PM (Makeshift-06)."""

    model_config = _FROZEN

    day: str  # "M", "TF", "S"
    time: str  # "1:00 PM - 2:30 PM"
    room: str  # "Makeshift-06", "PHYSICS LABORATORY"

    @property
    def key(self) -> str:
        return f"{self.day}|{self.time}|{self.room}"


class ParsedRoster(BaseModel):
    """Everything recovered from one class list export."""

    model_config = _FROZEN

    section: str  # "BSIT4D" or "UNKNOWN"
    course_code: str  # "IT413"
    subject_name: str
    faculty_name: str = ""  # "Last, First" as printed
    year_level: str = ""  # "4th Year - Baccalaureate"
    department: str  # "BSIT"
    students: tuple[StudentEntry, ...] = ()
    schedules: tuple[ScheduleEntry, ...] = ()
