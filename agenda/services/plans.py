from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, timedelta
from typing import Callable, List, Optional

from agenda.scheduling.recurring import (
    DEFAULT_DAY_SEARCH_LIMIT,
    DEFAULT_WEEK_SKIP_LIMIT,
    NoRepresentativeDateError,
    RecurringPlan,
    expand_occurrences,
    find_overlapping,
    representative_date,
)
from agenda.scheduling.slots import generate_slots
from agenda.scheduling.timeutil import weekday_of
from agenda.schemas.plan import (
    OccurrenceListResponse,
    RecurringPlanListResponse,
    RecurringPlanRequest,
    RecurringPlanResponse,
    WeekdaySlotsResponse,
)
from agenda.services.exceptions import (
    NotFoundError,
    RejectionKind,
    SchedulingError,
    ServiceError,
)
from agenda.services.providers import require_provider
from agenda.services.store import DataStore, is_canceled
from agenda.services.validators import require_date, require_time, require_weekday

logger = logging.getLogger(__name__)

DEFAULT_HORIZON_DAYS = 365


def _to_response(plan: RecurringPlan) -> RecurringPlanResponse:
    return RecurringPlanResponse(
        plan_id=plan.id,
        provider_id=plan.provider_id,
        client_name=plan.client_name,
        contact=plan.contact,
        weekday=plan.weekday,
        time=plan.time,
        start_date=plan.start_date.isoformat(),
        end_date=plan.end_date.isoformat() if plan.end_date else None,
        created_at=plan.created_at,
    )


class PlanService:
    """Creates, updates and expands recurring weekly plans."""

    def __init__(
        self,
        store: DataStore,
        *,
        today: Callable[[], date] = date.today,
        day_search_limit: int = DEFAULT_DAY_SEARCH_LIMIT,
        week_skip_limit: int = DEFAULT_WEEK_SKIP_LIMIT,
        horizon_days: int = DEFAULT_HORIZON_DAYS,
    ) -> None:
        self._store = store
        self._today = today
        self._day_search_limit = day_search_limit
        self._week_skip_limit = week_skip_limit
        self._horizon_days = horizon_days

    async def slots_for_weekday(self, provider_id: int, weekday: int) -> WeekdaySlotsResponse:
        """Legal plan times for a weekday, sampled on a representative date."""
        require_weekday(weekday)
        await require_provider(self._store, provider_id, active_only=False)
        sample, slots = await self._weekday_slots(provider_id, weekday)
        return WeekdaySlotsResponse(
            provider_id=provider_id,
            weekday=weekday,
            representative_date=sample.isoformat(),
            slots=slots,
        )

    async def create_plan(self, request: RecurringPlanRequest) -> RecurringPlanResponse:
        logger.info(
            "Creating plan for %s on weekday %s at %s with provider %s",
            request.client_name,
            request.weekday,
            request.time,
            request.provider_id,
        )
        start_date, end_date, time = await self._validate(request)

        async with self._store.write_lock:
            await self._check_slot(request.provider_id, request.weekday, time, start_date, end_date)
            try:
                plan = await self._store.plans.insert(
                    provider_id=request.provider_id,
                    client_name=request.client_name,
                    weekday=request.weekday,
                    time=time,
                    start_date=start_date,
                    end_date=end_date,
                    contact=request.contact or None,
                )
            except ServiceError:
                raise
            except Exception as exc:
                logger.exception("Unexpected error while creating plan")
                raise ServiceError("Failed to create plan", cause=exc)

        logger.info("Plan %s created", plan.id)
        return _to_response(plan)

    async def update_plan(
        self, plan_id: str, request: RecurringPlanRequest
    ) -> RecurringPlanResponse:
        logger.info("Updating plan %s", plan_id)
        existing = await self._require(plan_id)
        start_date, end_date, time = await self._validate(request)

        async with self._store.write_lock:
            await self._check_slot(
                request.provider_id,
                request.weekday,
                time,
                start_date,
                end_date,
                exclude_id=existing.id,
            )
            updated = replace(
                existing,
                provider_id=request.provider_id,
                client_name=request.client_name,
                weekday=request.weekday,
                time=time,
                start_date=start_date,
                end_date=end_date,
                contact=request.contact or None,
            )
            try:
                plan = await self._store.plans.update(updated)
            except ServiceError:
                raise
            except Exception as exc:
                logger.exception("Unexpected error while updating plan %s", plan_id)
                raise ServiceError("Failed to update plan", cause=exc)

        return _to_response(plan)

    async def delete_plan(self, plan_id: str) -> None:
        async with self._store.write_lock:
            if not await self._store.plans.delete(plan_id):
                raise NotFoundError(f"Plan {plan_id} not found")
        logger.info("Plan %s deleted", plan_id)

    async def get_plan(self, plan_id: str) -> RecurringPlanResponse:
        return _to_response(await self._require(plan_id))

    async def list_plans(self, provider_id: Optional[int] = None) -> RecurringPlanListResponse:
        plans = await self._store.plans.list(provider_id)
        items = [_to_response(plan) for plan in plans]
        return RecurringPlanListResponse(total=len(items), items=items)

    async def occurrences(
        self,
        plan_id: str,
        window_start: Optional[str] = None,
        window_end: Optional[str] = None,
    ) -> OccurrenceListResponse:
        """Dated occurrences of a plan within today +/- the horizon.

        Explicit window bounds are clamped to the horizon.
        """
        plan = await self._require(plan_id)
        today = self._today()
        earliest = today - timedelta(days=self._horizon_days)
        latest = today + timedelta(days=self._horizon_days)
        start = earliest
        if window_start:
            start = max(require_date(window_start, "window_start"), earliest)
        end = latest
        if window_end:
            end = min(require_date(window_end, "window_end"), latest)
        dates = expand_occurrences(plan, start, end)
        return OccurrenceListResponse(
            plan_id=plan.id,
            window_start=start.isoformat(),
            window_end=end.isoformat(),
            dates=[day.isoformat() for day in dates],
        )

    async def _validate(self, request: RecurringPlanRequest):
        require_weekday(request.weekday)
        time = require_time(request.time)
        start_date = require_date(request.start_date, "start_date")
        end_date = require_date(request.end_date, "end_date") if request.end_date else None
        if end_date is not None and end_date < start_date:
            raise SchedulingError(
                RejectionKind.PLAN_RANGE_INVALID,
                f"end_date {end_date.isoformat()} precedes start_date {start_date.isoformat()}",
            )
        await require_provider(self._store, request.provider_id, active_only=False)
        return start_date, end_date, time

    async def _check_slot(
        self,
        provider_id: int,
        weekday: int,
        time: str,
        start_date: date,
        end_date: Optional[date],
        *,
        exclude_id: Optional[str] = None,
    ) -> None:
        _, legal = await self._weekday_slots(provider_id, weekday)
        if time not in legal:
            raise SchedulingError(
                RejectionKind.SLOT_NOT_OFFERED,
                f"{time} is not a slot of provider {provider_id} on weekday {weekday}",
                suggested_slots=legal or None,
            )

        overlapping = find_overlapping(
            await self._store.plans.list(provider_id),
            provider_id=provider_id,
            weekday=weekday,
            time=time,
            start_date=start_date,
            end_date=end_date,
            exclude_id=exclude_id,
        )
        if overlapping:
            raise SchedulingError(
                RejectionKind.PLAN_OVERLAP,
                f"Weekday {weekday} at {time} is already held by plan {overlapping[0].id}",
            )

        clashes = await self._booked_dates(provider_id, weekday, time, start_date, end_date)
        if clashes:
            raise SchedulingError(
                RejectionKind.SLOT_ALREADY_BOOKED,
                f"{time} is already booked on {', '.join(day.isoformat() for day in clashes)}",
            )

    async def _booked_dates(
        self,
        provider_id: int,
        weekday: int,
        time: str,
        start_date: date,
        end_date: Optional[date],
    ) -> List[date]:
        """Upcoming live bookings the plan would double-claim."""
        first = max(start_date, self._today())
        bookings = await self._store.bookings.list(
            provider_id=provider_id, date_from=first, date_to=end_date
        )
        return [
            booking.date
            for booking in bookings
            if booking.time == time
            and weekday_of(booking.date) == weekday
            and not is_canceled(booking.status)
        ]

    async def _weekday_slots(self, provider_id: int, weekday: int):
        config = await self._store.schedules.get(provider_id)
        try:
            sample = representative_date(
                weekday,
                config.days_off,
                today=self._today(),
                day_limit=self._day_search_limit,
                week_limit=self._week_skip_limit,
            )
        except NoRepresentativeDateError as exc:
            raise SchedulingError(RejectionKind.NO_REPRESENTATIVE_DATE, str(exc)) from exc
        return sample, generate_slots(sample, config)

    async def _require(self, plan_id: str) -> RecurringPlan:
        plan = await self._store.plans.get(plan_id)
        if plan is None:
            raise NotFoundError(f"Plan {plan_id} not found")
        return plan
