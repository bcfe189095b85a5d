from typing import Optional

from fastapi import APIRouter, Depends, Response

from agenda.dependencies.services import (
    get_booking_service,
    get_plan_service,
    get_provider_service,
)
from agenda.routes.errors import to_http_exception
from agenda.schemas.booking import (
    AdminBookingRequest,
    BookingListRequest,
    BookingListResponse,
    BookingResponse,
    BookingStatusRequest,
    BookingSummary,
)
from agenda.schemas.plan import (
    OccurrenceListResponse,
    RecurringPlanListResponse,
    RecurringPlanRequest,
    RecurringPlanResponse,
    WeekdaySlotsResponse,
)
from agenda.schemas.provider import (
    ProviderCreateRequest,
    ProviderListResponse,
    ProviderRenameRequest,
    ProviderSummary,
    ScheduleConfigPayload,
    ScheduleConfigResponse,
)
from agenda.services import BookingService, PlanService, ProviderService
from agenda.services.exceptions import ServiceError

router = APIRouter()


# --- Providers ---


@router.get("/providers", response_model=ProviderListResponse)
async def list_providers(
    service: ProviderService = Depends(get_provider_service),
):
    return await service.list_providers()


@router.post("/providers", response_model=ProviderSummary)
async def create_provider(
    req: ProviderCreateRequest,
    service: ProviderService = Depends(get_provider_service),
):
    return await service.create(req)


@router.post("/providers/{provider_id}/toggle", response_model=ProviderSummary)
async def toggle_provider(
    provider_id: int,
    service: ProviderService = Depends(get_provider_service),
):
    try:
        return await service.toggle_active(provider_id)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


@router.post("/providers/{provider_id}/name", response_model=ProviderSummary)
async def rename_provider(
    provider_id: int,
    req: ProviderRenameRequest,
    service: ProviderService = Depends(get_provider_service),
):
    try:
        return await service.rename(provider_id, req)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


@router.get("/providers/{provider_id}/config", response_model=ScheduleConfigResponse)
async def get_provider_config(
    provider_id: int,
    service: ProviderService = Depends(get_provider_service),
):
    try:
        return await service.get_config(provider_id)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


@router.put("/providers/{provider_id}/config", response_model=ScheduleConfigResponse)
async def update_provider_config(
    provider_id: int,
    req: ScheduleConfigPayload,
    service: ProviderService = Depends(get_provider_service),
):
    try:
        return await service.update_config(provider_id, req)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


@router.get(
    "/providers/{provider_id}/weekday-slots/{weekday}",
    response_model=WeekdaySlotsResponse,
)
async def weekday_slots(
    provider_id: int,
    weekday: int,
    service: PlanService = Depends(get_plan_service),
):
    try:
        return await service.slots_for_weekday(provider_id, weekday)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


# --- Bookings ---


@router.get("/bookings", response_model=BookingListResponse)
async def list_bookings(
    req: BookingListRequest = Depends(),
    service: BookingService = Depends(get_booking_service),
):
    try:
        return await service.list_bookings(req)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


@router.post("/bookings", response_model=BookingResponse)
async def admin_create_booking(
    req: AdminBookingRequest,
    service: BookingService = Depends(get_booking_service),
):
    try:
        return await service.create_booking(req, admin=True)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


@router.post("/bookings/{booking_id}/status", response_model=BookingSummary)
async def set_booking_status(
    booking_id: str,
    req: BookingStatusRequest,
    service: BookingService = Depends(get_booking_service),
):
    try:
        return await service.set_status(booking_id, req.status)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


# --- Recurring plans ---


@router.get("/plans", response_model=RecurringPlanListResponse)
async def list_plans(
    provider_id: Optional[int] = None,
    service: PlanService = Depends(get_plan_service),
):
    return await service.list_plans(provider_id)


@router.post("/plans", response_model=RecurringPlanResponse)
async def create_plan(
    req: RecurringPlanRequest,
    service: PlanService = Depends(get_plan_service),
):
    try:
        return await service.create_plan(req)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


@router.get("/plans/{plan_id}", response_model=RecurringPlanResponse)
async def get_plan(
    plan_id: str,
    service: PlanService = Depends(get_plan_service),
):
    try:
        return await service.get_plan(plan_id)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


@router.put("/plans/{plan_id}", response_model=RecurringPlanResponse)
async def update_plan(
    plan_id: str,
    req: RecurringPlanRequest,
    service: PlanService = Depends(get_plan_service),
):
    try:
        return await service.update_plan(plan_id, req)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


@router.delete("/plans/{plan_id}", status_code=204)
async def delete_plan(
    plan_id: str,
    service: PlanService = Depends(get_plan_service),
):
    try:
        await service.delete_plan(plan_id)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc
    return Response(status_code=204)


@router.get("/plans/{plan_id}/occurrences", response_model=OccurrenceListResponse)
async def plan_occurrences(
    plan_id: str,
    window_start: Optional[str] = None,
    window_end: Optional[str] = None,
    service: PlanService = Depends(get_plan_service),
):
    try:
        return await service.occurrences(plan_id, window_start, window_end)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc
