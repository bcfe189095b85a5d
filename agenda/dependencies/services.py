from __future__ import annotations

from functools import lru_cache

from fastapi import Depends

from agenda.config import Settings, get_settings
from agenda.services import (
    AvailabilityService,
    BookingService,
    PlanService,
    ProviderService,
)
from agenda.services.store import DataStore, build_store


@lru_cache(maxsize=1)
def get_store_cached() -> DataStore:
    return build_store(get_settings())


def get_store() -> DataStore:
    return get_store_cached()


def get_provider_service(store: DataStore = Depends(get_store)) -> ProviderService:
    return ProviderService(store)


def get_availability_service(
    store: DataStore = Depends(get_store),
) -> AvailabilityService:
    return AvailabilityService(store)


def get_booking_service(
    store: DataStore = Depends(get_store),
) -> BookingService:
    return BookingService(store)


def get_plan_service(
    store: DataStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> PlanService:
    return PlanService(
        store,
        day_search_limit=settings.representative_day_search_limit,
        week_skip_limit=settings.representative_week_skip_limit,
        horizon_days=settings.occurrence_horizon_days,
    )
