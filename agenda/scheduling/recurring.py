"""
Recurring Plan Index

Weekly standing reservations ("mensalista" plans):
- which times a plan blocks on a given date
- which concrete date stands in for a weekday when validating plan times
- whether two plans claim the same weekly slot over overlapping ranges
- expansion of a plan into its dated occurrences
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import AbstractSet, Iterable, List, Optional, Set

from .timeutil import weekday_of

DEFAULT_DAY_SEARCH_LIMIT = 400
DEFAULT_WEEK_SKIP_LIMIT = 60


class NoRepresentativeDateError(Exception):
    """No usable date was found for a weekday within the search bounds."""


@dataclass
class RecurringPlan:
    id: str
    provider_id: int
    client_name: str
    weekday: int
    time: str
    start_date: date
    end_date: Optional[date] = None
    contact: Optional[str] = None
    created_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    @property
    def end_or_max(self) -> date:
        return self.end_date or date.max

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_or_max


def blocked_times(plans: Iterable[RecurringPlan], target_date: date) -> Set[str]:
    """Times claimed on ``target_date`` by any plan active that day."""
    weekday = weekday_of(target_date)
    return {
        plan.time
        for plan in plans
        if plan.weekday == weekday and plan.covers(target_date)
    }


def representative_date(
    weekday: int,
    days_off: AbstractSet[date],
    *,
    today: date,
    day_limit: int = DEFAULT_DAY_SEARCH_LIMIT,
    week_limit: int = DEFAULT_WEEK_SKIP_LIMIT,
) -> date:
    """
    Find a concrete date falling on ``weekday`` that is not a day off.

    Starting from ``today``, advance day by day until the weekday matches,
    then jump whole weeks past any day-off dates. Both walks are bounded;
    running out of either raises ``NoRepresentativeDateError``.
    """
    candidate = today
    for _ in range(day_limit):
        if weekday_of(candidate) == weekday:
            break
        candidate += timedelta(days=1)
    else:
        raise NoRepresentativeDateError(
            f"No date falling on weekday {weekday} within {day_limit} days"
        )

    for _ in range(week_limit):
        if candidate not in days_off:
            return candidate
        candidate += timedelta(days=7)

    raise NoRepresentativeDateError(
        f"Every weekday {weekday} within {week_limit} weeks is a day off"
    )


def ranges_overlap(
    start_a: date, end_a: Optional[date], start_b: date, end_b: Optional[date]
) -> bool:
    """Closed date ranges intersect; a missing end is unbounded."""
    return start_a <= (end_b or date.max) and start_b <= (end_a or date.max)


def find_overlapping(
    plans: Iterable[RecurringPlan],
    *,
    provider_id: int,
    weekday: int,
    time: str,
    start_date: date,
    end_date: Optional[date],
    exclude_id: Optional[str] = None,
) -> List[RecurringPlan]:
    """Plans claiming the same weekly slot over an intersecting range."""
    return [
        plan
        for plan in plans
        if plan.id != exclude_id
        and plan.provider_id == provider_id
        and plan.weekday == weekday
        and plan.time == time
        and ranges_overlap(plan.start_date, plan.end_date, start_date, end_date)
    ]


def expand_occurrences(
    plan: RecurringPlan, window_start: date, window_end: date
) -> List[date]:
    """Dates on which ``plan`` recurs inside ``[window_start, window_end]``."""
    lower = max(plan.start_date, window_start)
    upper = min(plan.end_or_max, window_end)
    if lower > upper:
        return []

    offset = (plan.weekday - weekday_of(lower)) % 7
    if lower > date.max - timedelta(days=offset):
        return []
    current = lower + timedelta(days=offset)

    occurrences = []
    while current <= upper:
        occurrences.append(current)
        if current > date.max - timedelta(days=7):
            break
        current += timedelta(days=7)
    return occurrences
