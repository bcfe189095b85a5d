from typing import List, Optional

from pydantic import BaseModel, field_validator


class RecurringPlanRequest(BaseModel):
    provider_id: int
    client_name: str
    weekday: int  # 0 = Sunday .. 6 = Saturday
    time: str
    start_date: str
    end_date: Optional[str] = None
    contact: Optional[str] = None

    @field_validator("client_name")
    def _strip_client_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("client_name must not be blank")
        return value

    @field_validator("time", "start_date", "contact")
    def _strip(cls, value: Optional[str]) -> Optional[str]:
        return value.strip() if isinstance(value, str) else value

    @field_validator("end_date")
    def _blank_end_is_open(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None


class RecurringPlanResponse(BaseModel):
    plan_id: str
    provider_id: int
    client_name: str
    contact: Optional[str] = None
    weekday: int
    time: str
    start_date: str
    end_date: Optional[str] = None
    created_at: str


class RecurringPlanListResponse(BaseModel):
    total: int
    items: List[RecurringPlanResponse]


class OccurrenceListResponse(BaseModel):
    plan_id: str
    window_start: str
    window_end: str
    dates: List[str]


class WeekdaySlotsResponse(BaseModel):
    provider_id: int
    weekday: int
    representative_date: str
    slots: List[str]
