"""Parsing and formatting helpers for calendar dates and clock times.

Dates travel as ``YYYY-MM-DD`` strings and times as zero padded 24-hour
``HH:MM`` strings. Internally a time of day is a number of minutes since
midnight and weekdays are numbered 0 (Sunday) through 6 (Saturday).
"""

from __future__ import annotations

import re
from datetime import date
from typing import List, Optional

_YMD_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_DMY_RE = re.compile(r"^(\d{2})-(\d{2})-(\d{4})$")
_HHMM_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")
_DAYS_OFF_SPLIT_RE = re.compile(r"[\s,;]+")


def parse_date(value: str) -> Optional[date]:
    """Return the calendar date for a ``YYYY-MM-DD`` string, or ``None``."""
    text = str(value or "").strip()
    if not _YMD_RE.match(text):
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        return None


def to_ymd(value: str) -> Optional[str]:
    """Normalise ``DD-MM-YYYY`` or ``YYYY-MM-DD`` input to ``YYYY-MM-DD``.

    Returns ``None`` for anything else, including impossible dates.
    """
    text = str(value or "").strip()
    if not text:
        return None
    match = _DMY_RE.match(text)
    if match:
        day, month, year = match.groups()
        text = f"{year}-{month}-{day}"
    parsed = parse_date(text)
    return parsed.isoformat() if parsed else None


def is_valid_time(value: str) -> bool:
    return bool(_HHMM_RE.match(str(value or "")))


def to_minutes(hhmm: str) -> int:
    match = _HHMM_RE.match(str(hhmm or ""))
    if not match:
        raise ValueError(f"Invalid time {hhmm!r}, expected HH:MM")
    return int(match.group(1)) * 60 + int(match.group(2))


def from_minutes(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def weekday_of(day: date) -> int:
    """Weekday with Sunday as 0."""
    return day.isoweekday() % 7


def parse_days_off(text: str) -> List[date]:
    """Parse a free-text list of day-off dates.

    Entries may be separated by whitespace, commas or semicolons and written
    as ``YYYY-MM-DD`` or ``DD-MM-YYYY``. Unparseable entries are dropped.
    """
    days: List[date] = []
    for chunk in _DAYS_OFF_SPLIT_RE.split(str(text or "")):
        ymd = to_ymd(chunk)
        if ymd:
            days.append(date.fromisoformat(ymd))
    return days
