"""
Request value validators

Turn raw date and time strings into checked values, raising a
``SchedulingError`` with the matching rejection kind when they are malformed.
"""

from __future__ import annotations

from datetime import date

from agenda.scheduling.timeutil import is_valid_time, parse_date, to_ymd
from agenda.services.exceptions import RejectionKind, SchedulingError


def require_date(value: str, field_name: str = "date", *, allow_dmy: bool = False) -> date:
    """
    Validate a date string and return it as a ``date``.

    Args:
        value: ``YYYY-MM-DD`` string (``DD-MM-YYYY`` too when ``allow_dmy``)
        field_name: name of the field for error messages

    Raises:
        SchedulingError: kind ``InvalidDate``
    """
    text = str(value or "").strip()
    if allow_dmy:
        text = to_ymd(text) or text
    parsed = parse_date(text)
    if parsed is None:
        raise SchedulingError(
            RejectionKind.INVALID_DATE,
            f"Invalid {field_name} {value!r}. Use YYYY-MM-DD",
        )
    return parsed


def require_time(value: str, field_name: str = "time") -> str:
    """Validate an ``HH:MM`` string, raising ``InvalidTime`` otherwise."""
    text = str(value or "").strip()
    if not is_valid_time(text):
        raise SchedulingError(
            RejectionKind.INVALID_TIME,
            f"Invalid {field_name} {value!r}. Use HH:MM",
        )
    return text


def require_weekday(value: int) -> int:
    if not isinstance(value, int) or not 0 <= value <= 6:
        raise SchedulingError(
            RejectionKind.PLAN_RANGE_INVALID,
            f"Weekday must be between 0 (Sunday) and 6 (Saturday), got {value!r}",
        )
    return value
