from __future__ import annotations

import logging
from datetime import date
from typing import Dict, List, Optional

from agenda.schemas.booking import (
    AdminBookingRequest,
    BookingListRequest,
    BookingListResponse,
    BookingRequest,
    BookingResponse,
    BookingSummary,
)
from agenda.services.availability import AvailabilityService
from agenda.services.confirmation import ConfirmationToken
from agenda.services.exceptions import (
    DuplicateSlotError,
    NotFoundError,
    RejectionKind,
    SchedulingError,
    ServiceError,
)
from agenda.services.providers import require_provider
from agenda.services.store import BookingRecord, DataStore, is_canceled
from agenda.services.validators import require_date, require_time

logger = logging.getLogger(__name__)

CONFIRMED = "confirmed"


class BookingService:
    """Creates one-off bookings and moves them through their statuses.

    Every check-then-write runs under the store's write lock, so two callers
    racing for the same slot cannot both pass the checks.
    """

    def __init__(
        self,
        store: DataStore,
        *,
        availability: AvailabilityService | None = None,
    ) -> None:
        self._store = store
        self._availability = availability or AvailabilityService(store)

    async def create_booking(
        self, request: BookingRequest, *, admin: bool = False
    ) -> BookingResponse:
        logger.info(
            "Booking %s %s for %s with provider %s",
            request.date,
            request.time,
            request.client_name,
            request.provider_id,
        )
        day = require_date(request.date, allow_dmy=admin)
        time = require_time(request.time)
        provider = await require_provider(
            self._store, request.provider_id, active_only=not admin
        )
        status = request.status if isinstance(request, AdminBookingRequest) else "pending"

        async with self._store.write_lock:
            offered = await self._availability.offered_slots(provider.id, day)
            if time not in offered:
                raise SchedulingError(
                    RejectionKind.SLOT_NOT_OFFERED,
                    f"{time} is not offered by provider {provider.id} on {day.isoformat()}",
                )

            blocked = await self._availability.blocked_times(provider.id, day)
            if time in blocked:
                raise SchedulingError(
                    RejectionKind.SLOT_RESERVED_BY_PLAN,
                    f"{time} on {day.isoformat()} is reserved by a recurring plan",
                    suggested_slots=await self._suggestions(provider.id, day),
                )

            if await self._store.bookings.exists(provider.id, day, time):
                raise SchedulingError(
                    RejectionKind.SLOT_ALREADY_BOOKED,
                    f"{time} on {day.isoformat()} is already booked",
                    suggested_slots=await self._suggestions(provider.id, day),
                )

            try:
                record = await self._store.bookings.insert(
                    provider_id=provider.id,
                    client_name=request.client_name,
                    target_date=day,
                    time=time,
                    status=status,
                    contact=request.contact or None,
                )
            except DuplicateSlotError as exc:
                raise SchedulingError(
                    RejectionKind.SLOT_ALREADY_BOOKED,
                    f"{time} on {day.isoformat()} is already booked",
                ) from exc
            except ServiceError:
                raise
            except Exception as exc:
                logger.exception("Unexpected error while creating booking")
                raise ServiceError("Failed to create booking", cause=exc)

        token: Optional[ConfirmationToken] = None
        if not admin:
            token = self._store.tokens.issue(record.id)

        logger.info("Booking %s created with status %s", record.id, record.status)
        return BookingResponse(
            status=record.status,
            booking_id=record.id,
            provider_id=provider.id,
            provider_name=provider.name,
            client_name=record.client_name,
            date=record.date.isoformat(),
            time=record.time,
            confirmation_token=token.token if token else None,
            token_expires_at=token.expires_at.isoformat() if token else None,
        )

    async def set_status(self, booking_id: str, status: str) -> BookingSummary:
        """Write ``status`` without any slot check. Canceled bookings stay canceled."""
        async with self._store.write_lock:
            record = await self._require(booking_id)
            if is_canceled(record.status) and not is_canceled(status):
                raise SchedulingError(
                    RejectionKind.STATUS_TRANSITION_REJECTED,
                    f"Booking {booking_id} is canceled and cannot become {status!r}",
                )
            try:
                record = await self._store.bookings.set_status(booking_id, status)
            except ServiceError:
                raise
            except Exception as exc:
                logger.exception("Unexpected error while updating booking %s", booking_id)
                raise ServiceError("Failed to update booking status", cause=exc)

        logger.info("Booking %s status set to %s", booking_id, status)
        return await self._summary(record)

    async def confirm(self, token: str) -> BookingSummary:
        """Redeem a confirmation token, moving its booking to ``confirmed``.

        A token pointing at a canceled booking is left unused.
        """
        pending = self._store.tokens.peek(token)
        if pending is not None and pending.used_at is None:
            record = await self._require(pending.booking_id)
            if is_canceled(record.status):
                raise SchedulingError(
                    RejectionKind.STATUS_TRANSITION_REJECTED,
                    f"Booking {record.id} is canceled and cannot be confirmed",
                )
        entry = self._store.tokens.redeem(token)
        logger.info("Confirmation token redeemed for booking %s", entry.booking_id)
        return await self.set_status(entry.booking_id, CONFIRMED)

    async def get(self, booking_id: str) -> BookingSummary:
        return await self._summary(await self._require(booking_id))

    async def list_bookings(self, request: BookingListRequest) -> BookingListResponse:
        date_from = require_date(request.date_from, "date_from") if request.date_from else None
        date_to = require_date(request.date_to, "date_to") if request.date_to else None
        records = await self._store.bookings.list(
            provider_id=request.provider_id,
            date_from=date_from,
            date_to=date_to,
            status=request.status,
        )
        start = (request.page - 1) * request.page_size
        page_records = records[start : start + request.page_size]
        names = await self._provider_names()
        items = [_to_summary(record, names) for record in page_records]
        return BookingListResponse(
            total=len(records),
            page=request.page,
            page_size=request.page_size,
            items=items,
        )

    async def _suggestions(self, provider_id: int, day: date) -> List[str]:
        return await self._availability.free_slots_on(provider_id, day)

    async def _require(self, booking_id: str) -> BookingRecord:
        record = await self._store.bookings.get(booking_id)
        if record is None:
            raise NotFoundError(f"Booking {booking_id} not found")
        return record

    async def _provider_names(self) -> Dict[int, str]:
        return {provider.id: provider.name for provider in await self._store.providers.list()}

    async def _summary(self, record: BookingRecord) -> BookingSummary:
        return _to_summary(record, await self._provider_names())


def _to_summary(record: BookingRecord, names: Dict[int, str]) -> BookingSummary:
    return BookingSummary(
        booking_id=record.id,
        provider_id=record.provider_id,
        provider_name=names.get(record.provider_id),
        client_name=record.client_name,
        contact=record.contact,
        date=record.date.isoformat(),
        time=record.time,
        status=record.status,
        created_at=record.created_at,
    )
