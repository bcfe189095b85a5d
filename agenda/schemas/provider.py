from typing import List, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from agenda.scheduling.timeutil import is_valid_time, parse_days_off, to_minutes


class ProviderSummary(BaseModel):
    provider_id: int
    name: str
    is_active: bool


class ProviderListResponse(BaseModel):
    total: int
    items: List[ProviderSummary]


class ProviderCreateRequest(BaseModel):
    name: str = Field(min_length=1)
    is_active: bool = True

    @field_validator("name")
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value


class ProviderRenameRequest(BaseModel):
    name: str

    @field_validator("name")
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value


class ScheduleConfigPayload(BaseModel):
    """Schedule of a provider as exchanged over the API."""

    start: str = "09:00"
    end: str = "18:00"
    lunch_start: str = "12:00"
    lunch_end: str = "13:00"
    slot_minutes: int = Field(default=60, ge=1, le=240)
    work_days: List[int] = Field(default_factory=lambda: [1, 2, 3, 4, 5, 6])
    days_off: List[str] = Field(default_factory=list)

    @field_validator("start", "end", "lunch_start", "lunch_end")
    def _check_time(cls, value: str) -> str:
        value = value.strip()
        if not is_valid_time(value):
            raise ValueError(f"invalid time {value!r}, expected HH:MM")
        return value

    @field_validator("work_days")
    def _check_work_days(cls, value: List[int]) -> List[int]:
        if any(day < 0 or day > 6 for day in value):
            raise ValueError("work_days entries must be between 0 (Sunday) and 6 (Saturday)")
        return sorted(set(value))

    @field_validator("days_off", mode="before")
    def _split_days_off(cls, value: Union[str, List[str], None]):
        if value is None:
            return []
        if isinstance(value, str):
            return [day.isoformat() for day in parse_days_off(value)]
        return [day.isoformat() for day in parse_days_off(" ".join(str(item) for item in value))]

    @model_validator(mode="after")
    def _check_hours(self) -> "ScheduleConfigPayload":
        if to_minutes(self.end) <= to_minutes(self.start):
            raise ValueError("end must be later than start")
        return self


class ScheduleConfigResponse(ScheduleConfigPayload):
    provider_id: int
    provider_name: Optional[str] = None
