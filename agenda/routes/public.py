from fastapi import APIRouter, Depends, HTTPException

from agenda.dependencies.services import (
    get_availability_service,
    get_booking_service,
    get_provider_service,
    get_store,
)
from agenda.routes.errors import to_http_exception
from agenda.scheduling.timeutil import parse_date
from agenda.schemas.availability import FreeSlotsResponse
from agenda.schemas.booking import BookingRequest, BookingResponse, BookingSummary
from agenda.schemas.provider import ProviderListResponse
from agenda.services import AvailabilityService, BookingService, ProviderService
from agenda.services.exceptions import ServiceError
from agenda.services.store import DataStore

router = APIRouter()


@router.get("/providers", response_model=ProviderListResponse)
async def list_active_providers(
    service: ProviderService = Depends(get_provider_service),
):
    return await service.list_providers(active_only=True)


@router.get("/availability", response_model=FreeSlotsResponse)
async def free_slots(
    date: str,
    provider_id: int,
    service: AvailabilityService = Depends(get_availability_service),
    store: DataStore = Depends(get_store),
):
    if parse_date(date) is None:
        raise HTTPException(status_code=400, detail="Invalid date. Use YYYY-MM-DD")
    provider = await store.providers.get(provider_id)
    if provider is None or not provider.is_active:
        raise HTTPException(status_code=400, detail="Unknown or inactive provider")

    slots = await service.free_slots(provider_id, date)
    return FreeSlotsResponse(provider_id=provider_id, date=date, slots=slots)


@router.post("/bookings", response_model=BookingResponse)
async def create_booking(
    req: BookingRequest,
    service: BookingService = Depends(get_booking_service),
):
    try:
        return await service.create_booking(req)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


@router.post("/bookings/confirm/{token}", response_model=BookingSummary)
async def confirm_booking(
    token: str,
    service: BookingService = Depends(get_booking_service),
):
    try:
        return await service.confirm(token)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc
