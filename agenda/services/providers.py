from __future__ import annotations

import logging
from datetime import date

from agenda.scheduling.slots import ScheduleConfig
from agenda.scheduling.timeutil import to_minutes
from agenda.schemas.provider import (
    ProviderCreateRequest,
    ProviderListResponse,
    ProviderRenameRequest,
    ProviderSummary,
    ScheduleConfigPayload,
    ScheduleConfigResponse,
)
from agenda.services.exceptions import (
    NotFoundError,
    RejectionKind,
    SchedulingError,
    ServiceError,
)
from agenda.services.store import DataStore, ProviderRecord

logger = logging.getLogger(__name__)


async def require_provider(
    store: DataStore, provider_id: int, *, active_only: bool
) -> ProviderRecord:
    """Return the provider or raise ``UnknownOrInactiveProvider``."""
    provider = await store.providers.get(provider_id)
    if provider is None or (active_only and not provider.is_active):
        raise SchedulingError(
            RejectionKind.UNKNOWN_OR_INACTIVE_PROVIDER,
            f"Provider {provider_id} is unknown or inactive",
        )
    return provider


def _summary(record: ProviderRecord) -> ProviderSummary:
    return ProviderSummary(
        provider_id=record.id, name=record.name, is_active=record.is_active
    )


def _config_response(record: ProviderRecord, config: ScheduleConfig) -> ScheduleConfigResponse:
    return ScheduleConfigResponse(
        provider_id=record.id,
        provider_name=record.name,
        start=config.start,
        end=config.end,
        lunch_start=config.lunch_start,
        lunch_end=config.lunch_end,
        slot_minutes=config.slot_minutes,
        work_days=sorted(config.work_days),
        days_off=[day.isoformat() for day in sorted(config.days_off)],
    )


class ProviderService:
    def __init__(self, store: DataStore) -> None:
        self._store = store

    async def list_providers(self, active_only: bool = False) -> ProviderListResponse:
        providers = await self._store.providers.list(active_only=active_only)
        items = [_summary(record) for record in providers]
        return ProviderListResponse(total=len(items), items=items)

    async def create(self, request: ProviderCreateRequest) -> ProviderSummary:
        record = await self._store.providers.create(request.name, request.is_active)
        await self._store.schedules.get(record.id)
        logger.info("Provider %s created as %s", record.name, record.id)
        return _summary(record)

    async def toggle_active(self, provider_id: int) -> ProviderSummary:
        record = await self._get(provider_id)
        record = await self._store.providers.set_active(provider_id, not record.is_active)
        logger.info("Provider %s is_active=%s", provider_id, record.is_active)
        return _summary(record)

    async def rename(self, provider_id: int, request: ProviderRenameRequest) -> ProviderSummary:
        await self._get(provider_id)
        record = await self._store.providers.rename(provider_id, request.name)
        logger.info("Provider %s renamed to %s", provider_id, record.name)
        return _summary(record)

    async def get_config(self, provider_id: int) -> ScheduleConfigResponse:
        record = await self._get(provider_id)
        config = await self._store.schedules.get(provider_id)
        return _config_response(record, config)

    async def update_config(
        self, provider_id: int, payload: ScheduleConfigPayload
    ) -> ScheduleConfigResponse:
        record = await self._get(provider_id)
        if to_minutes(payload.lunch_end) < to_minutes(payload.lunch_start):
            raise SchedulingError(
                RejectionKind.INVALID_CONFIG,
                "lunch_end must not be earlier than lunch_start",
            )

        config = ScheduleConfig(
            start=payload.start,
            end=payload.end,
            lunch_start=payload.lunch_start,
            lunch_end=payload.lunch_end,
            slot_minutes=payload.slot_minutes,
            work_days=frozenset(payload.work_days),
            days_off=frozenset(date.fromisoformat(day) for day in payload.days_off),
        )
        try:
            await self._store.schedules.save(provider_id, config)
        except ServiceError:
            raise
        except Exception as exc:
            logger.exception("Unexpected error while saving schedule for provider %s", provider_id)
            raise ServiceError("Failed to save schedule", cause=exc)

        logger.info(
            "Schedule for provider %s saved: %s-%s every %s min, %d days off",
            provider_id,
            config.start,
            config.end,
            config.slot_minutes,
            len(config.days_off),
        )
        return _config_response(record, config)

    async def _get(self, provider_id: int) -> ProviderRecord:
        record = await self._store.providers.get(provider_id)
        if record is None:
            raise NotFoundError(f"Provider {provider_id} not found")
        return record
