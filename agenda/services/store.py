from __future__ import annotations

import asyncio
import itertools
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from typing import Dict, Iterable, List, Optional, Set, Tuple

from agenda.config import Settings
from agenda.scheduling.recurring import RecurringPlan
from agenda.scheduling.slots import ScheduleConfig
from agenda.services.confirmation import ConfirmationTokenStore
from agenda.services.exceptions import DuplicateSlotError, NotFoundError

CANCELED_STATUSES = frozenset({"canceled", "cancelled"})


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def is_canceled(status: str) -> bool:
    return str(status or "").strip().lower() in CANCELED_STATUSES


class _BaseRepository:
    def __init__(self, prefix: str) -> None:
        self._prefix = prefix
        self._counter = itertools.count(1)

    def _next_id(self) -> str:
        return f"{self._prefix}-{next(self._counter):05d}"


@dataclass
class ProviderRecord:
    id: int
    name: str
    is_active: bool = True


@dataclass
class BookingRecord:
    id: str
    provider_id: int
    client_name: str
    date: date
    time: str
    status: str = "pending"
    contact: Optional[str] = None
    created_at: str = field(default_factory=_utc_now_iso)

    @property
    def slot_key(self) -> Tuple[int, date, str]:
        return (self.provider_id, self.date, self.time)


class ProviderRepository:
    def __init__(self, seed_names: Iterable[str] = ()) -> None:
        self._providers: Dict[int, ProviderRecord] = {}
        self._counter = itertools.count(1)
        for name in seed_names:
            self._add(name)

    def _add(self, name: str, is_active: bool = True) -> ProviderRecord:
        record = ProviderRecord(id=next(self._counter), name=name, is_active=is_active)
        self._providers[record.id] = record
        return record

    async def create(self, name: str, is_active: bool = True) -> ProviderRecord:
        return self._add(name, is_active)

    async def get(self, provider_id: int) -> Optional[ProviderRecord]:
        return self._providers.get(provider_id)

    async def list(self, active_only: bool = False) -> List[ProviderRecord]:
        providers = sorted(self._providers.values(), key=lambda record: record.id)
        if active_only:
            providers = [record for record in providers if record.is_active]
        return providers

    async def set_active(self, provider_id: int, is_active: bool) -> ProviderRecord:
        record = self._require(provider_id)
        record.is_active = is_active
        return record

    async def rename(self, provider_id: int, name: str) -> ProviderRecord:
        record = self._require(provider_id)
        record.name = name
        return record

    def _require(self, provider_id: int) -> ProviderRecord:
        record = self._providers.get(provider_id)
        if record is None:
            raise NotFoundError(f"Provider {provider_id} not found")
        return record


class ScheduleRepository:
    """One schedule per provider, created with defaults on first reference."""

    def __init__(self, defaults: ScheduleConfig) -> None:
        self._defaults = defaults
        self._configs: Dict[int, ScheduleConfig] = {}

    async def get(self, provider_id: int) -> ScheduleConfig:
        config = self._configs.get(provider_id)
        if config is None:
            config = replace(self._defaults)
            self._configs[provider_id] = config
        return config

    async def save(self, provider_id: int, config: ScheduleConfig) -> ScheduleConfig:
        self._configs[provider_id] = config
        return config

    def snapshot(self) -> Dict[int, ScheduleConfig]:
        return dict(self._configs)


class BookingRepository(_BaseRepository):
    """Ledger of one-off bookings.

    ``_active`` indexes non-canceled bookings by (provider, date, time) and
    behaves like a partial unique index: a second live booking for the same
    key is refused.
    """

    def __init__(self) -> None:
        super().__init__("BKG")
        self._bookings: Dict[str, BookingRecord] = {}
        self._active: Dict[Tuple[int, date, str], str] = {}

    async def list_occupied(self, provider_id: int, target_date: date) -> Set[str]:
        return {
            time
            for (pid, day, time) in self._active
            if pid == provider_id and day == target_date
        }

    async def exists(self, provider_id: int, target_date: date, time: str) -> bool:
        return (provider_id, target_date, time) in self._active

    async def insert(
        self,
        *,
        provider_id: int,
        client_name: str,
        target_date: date,
        time: str,
        status: str = "pending",
        contact: Optional[str] = None,
    ) -> BookingRecord:
        record = BookingRecord(
            id="",
            provider_id=provider_id,
            client_name=client_name,
            date=target_date,
            time=time,
            status=status,
            contact=contact,
        )
        live = not is_canceled(status)
        if live and record.slot_key in self._active:
            raise DuplicateSlotError(
                f"Slot {target_date.isoformat()} {time} already held by "
                f"{self._active[record.slot_key]}"
            )
        record.id = self._next_id()
        self._bookings[record.id] = record
        if live:
            self._active[record.slot_key] = record.id
        return record

    async def set_status(self, booking_id: str, status: str) -> BookingRecord:
        record = self._bookings.get(booking_id)
        if record is None:
            raise NotFoundError(f"Booking {booking_id} not found")

        if is_canceled(status):
            if self._active.get(record.slot_key) == record.id:
                del self._active[record.slot_key]
        elif is_canceled(record.status):
            holder = self._active.get(record.slot_key)
            if holder is not None and holder != record.id:
                raise DuplicateSlotError(
                    f"Slot {record.date.isoformat()} {record.time} already held by {holder}"
                )
            self._active[record.slot_key] = record.id

        record.status = status
        return record

    async def get(self, booking_id: str) -> Optional[BookingRecord]:
        return self._bookings.get(booking_id)

    async def list(
        self,
        *,
        provider_id: Optional[int] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        status: Optional[str] = None,
    ) -> List[BookingRecord]:
        items = []
        for record in self._bookings.values():
            if provider_id is not None and record.provider_id != provider_id:
                continue
            if date_from and record.date < date_from:
                continue
            if date_to and record.date > date_to:
                continue
            if status and record.status != status:
                continue
            items.append(record)
        items.sort(key=lambda record: (record.date, record.time, record.id))
        return items


class PlanRepository(_BaseRepository):
    def __init__(self) -> None:
        super().__init__("PLN")
        self._plans: Dict[str, RecurringPlan] = {}

    async def list(self, provider_id: Optional[int] = None) -> List[RecurringPlan]:
        plans = [
            plan
            for plan in self._plans.values()
            if provider_id is None or plan.provider_id == provider_id
        ]
        plans.sort(key=lambda plan: (plan.provider_id, plan.weekday, plan.time, plan.start_date))
        return plans

    async def get(self, plan_id: str) -> Optional[RecurringPlan]:
        return self._plans.get(plan_id)

    async def insert(
        self,
        *,
        provider_id: int,
        client_name: str,
        weekday: int,
        time: str,
        start_date: date,
        end_date: Optional[date] = None,
        contact: Optional[str] = None,
    ) -> RecurringPlan:
        plan = RecurringPlan(
            id=self._next_id(),
            provider_id=provider_id,
            client_name=client_name,
            weekday=weekday,
            time=time,
            start_date=start_date,
            end_date=end_date,
            contact=contact,
        )
        self._plans[plan.id] = plan
        return plan

    async def update(self, plan: RecurringPlan) -> RecurringPlan:
        if plan.id not in self._plans:
            raise NotFoundError(f"Plan {plan.id} not found")
        self._plans[plan.id] = plan
        return plan

    async def delete(self, plan_id: str) -> bool:
        return self._plans.pop(plan_id, None) is not None


@dataclass
class DataStore:
    providers: ProviderRepository
    schedules: ScheduleRepository
    bookings: BookingRepository
    plans: PlanRepository
    tokens: ConfirmationTokenStore
    write_lock: asyncio.Lock = field(default_factory=asyncio.Lock)


def default_schedule(settings: Settings) -> ScheduleConfig:
    return ScheduleConfig(
        start=settings.default_start,
        end=settings.default_end,
        lunch_start=settings.default_lunch_start,
        lunch_end=settings.default_lunch_end,
        slot_minutes=settings.default_slot_minutes,
        work_days=frozenset(settings.default_work_days),
    )


def build_store(settings: Settings) -> DataStore:
    """Create a fresh, seeded store."""
    return DataStore(
        providers=ProviderRepository(settings.seed_provider_names),
        schedules=ScheduleRepository(default_schedule(settings)),
        bookings=BookingRepository(),
        plans=PlanRepository(),
        tokens=ConfirmationTokenStore(ttl_minutes=settings.confirmation_token_ttl_minutes),
    )
