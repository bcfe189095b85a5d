from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class BookingRequest(BaseModel):
    provider_id: int
    client_name: str
    date: str
    time: str
    contact: Optional[str] = None

    @field_validator("client_name")
    def _strip_client_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("client_name must not be blank")
        return value

    @field_validator("date", "time", "contact")
    def _strip(cls, value: Optional[str]) -> Optional[str]:
        return value.strip() if isinstance(value, str) else value


class AdminBookingRequest(BookingRequest):
    status: str = "pending"  # pending | confirmed | canceled | any admin label

    @field_validator("status")
    def _default_status(cls, value: str) -> str:
        return value.strip() or "pending"


class BookingResponse(BaseModel):
    status: str
    booking_id: str
    provider_id: int
    provider_name: Optional[str] = None
    client_name: str
    date: str
    time: str
    confirmation_token: Optional[str] = None
    token_expires_at: Optional[str] = None


class BookingStatusRequest(BaseModel):
    status: str

    @field_validator("status")
    def _check_status(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("status must not be blank")
        return value


class BookingSummary(BaseModel):
    booking_id: str
    provider_id: int
    provider_name: Optional[str] = None
    client_name: str
    contact: Optional[str] = None
    date: str
    time: str
    status: str
    created_at: str


class BookingListRequest(BaseModel):
    provider_id: Optional[int] = None
    date_from: Optional[str] = None  # ISO date
    date_to: Optional[str] = None    # ISO date
    status: Optional[str] = None     # pending | confirmed | canceled
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=50, ge=1, le=500)


class BookingListResponse(BaseModel):
    total: int
    page: int
    page_size: int
    items: List[BookingSummary]
