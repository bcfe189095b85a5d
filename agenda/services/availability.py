"""
Availability Service

Free slots of a provider on a date: the generated slots minus the times held
by live one-off bookings and by recurring plans active that day.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import List, Set

from agenda.scheduling.recurring import blocked_times
from agenda.scheduling.slots import generate_slots
from agenda.scheduling.timeutil import parse_date
from agenda.services.store import DataStore

logger = logging.getLogger(__name__)


class AvailabilityService:
    def __init__(self, store: DataStore) -> None:
        self._store = store

    async def free_slots(self, provider_id: int, target_date: str) -> List[str]:
        """Free ``HH:MM`` slots, or ``[]`` for a bad date or unusable provider."""
        day = parse_date(target_date)
        if day is None:
            logger.info("Free slots requested with invalid date %r", target_date)
            return []

        provider = await self._store.providers.get(provider_id)
        if provider is None or not provider.is_active:
            logger.info("Free slots requested for unknown/inactive provider %s", provider_id)
            return []

        return await self.free_slots_on(provider_id, day)

    async def free_slots_on(self, provider_id: int, day: date) -> List[str]:
        offered = await self.offered_slots(provider_id, day)
        if not offered:
            return []
        occupied = await self._store.bookings.list_occupied(provider_id, day)
        blocked = await self.blocked_times(provider_id, day)
        return [slot for slot in offered if slot not in occupied and slot not in blocked]

    async def offered_slots(self, provider_id: int, day: date) -> List[str]:
        config = await self._store.schedules.get(provider_id)
        return generate_slots(day, config)

    async def blocked_times(self, provider_id: int, day: date) -> Set[str]:
        plans = await self._store.plans.list(provider_id)
        return blocked_times(plans, day)
