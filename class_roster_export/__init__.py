"""
Extract course-section class lists (registrar CSV exports) into structured rosters.
"""
from __future__ import annotations

__version__ = "0.1.0"

from .models import ParsedRoster, ScheduleEntry, StudentEntry
from .roster_csv import parse_roster_csv, parse_roster_text

__all__ = [
    "ParsedRoster",
    "ScheduleEntry",
    "StudentEntry",
    "parse_roster_csv",
    "parse_roster_text",
]
