"""
Slot Generation

Turns a provider's schedule into the discrete appointment start times
offered on a calendar date.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import FrozenSet, List

from .timeutil import from_minutes, to_minutes, weekday_of

MAX_SLOT_MINUTES = 240


@dataclass(frozen=True)
class ScheduleConfig:
    """Working hours of a single provider."""

    start: str = "09:00"
    end: str = "18:00"
    lunch_start: str = "12:00"
    lunch_end: str = "13:00"
    slot_minutes: int = 60
    work_days: FrozenSet[int] = frozenset({1, 2, 3, 4, 5, 6})
    days_off: FrozenSet[date] = field(default_factory=frozenset)


def generate_slots(target_date: date, config: ScheduleConfig) -> List[str]:
    """
    Return the ordered ``HH:MM`` slot start times offered on ``target_date``.

    Rules:
        - non-working weekday or explicit day off: no slots
        - ``end <= start`` or slot length outside (0, 240]: no slots
        - slots must end by ``end``
        - a slot overlapping ``[lunch_start, lunch_end)`` at all is skipped
    """
    if weekday_of(target_date) not in config.work_days:
        return []
    if target_date in config.days_off:
        return []

    start = to_minutes(config.start)
    end = to_minutes(config.end)
    lunch_start = to_minutes(config.lunch_start)
    lunch_end = to_minutes(config.lunch_end)
    slot = config.slot_minutes

    if end <= start:
        return []
    if slot <= 0 or slot > MAX_SLOT_MINUTES:
        return []

    slots = []
    current = start
    while current + slot <= end:
        overlaps_lunch = current < lunch_end and current + slot > lunch_start
        if not overlaps_lunch:
            slots.append(from_minutes(current))
        current += slot

    return slots
