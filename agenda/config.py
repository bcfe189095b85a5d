from functools import lru_cache
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from agenda.scheduling.timeutil import is_valid_time


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    app_name: str = Field(default="Barbershop Agenda")
    cors_origins: List[str] = Field(
        default_factory=lambda: [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ]
    )
    log_level: str = Field(default="INFO")

    # Defaults applied the first time a provider's schedule is referenced.
    default_start: str = Field(default="09:00")
    default_end: str = Field(default="18:00")
    default_lunch_start: str = Field(default="12:00")
    default_lunch_end: str = Field(default="13:00")
    default_slot_minutes: int = Field(default=60)
    default_work_days: List[int] = Field(default_factory=lambda: [1, 2, 3, 4, 5, 6])

    seed_provider_names: List[str] = Field(
        default_factory=lambda: ["Barber 1", "Barber 2"]
    )

    confirmation_token_ttl_minutes: int = Field(default=30)
    representative_day_search_limit: int = Field(default=400)
    representative_week_skip_limit: int = Field(default=60)
    occurrence_horizon_days: int = Field(default=365)

    model_config = SettingsConfigDict(env_prefix="AGENDA_", case_sensitive=False)

    @field_validator("cors_origins", "seed_provider_names", mode="before")
    def _split_csv(cls, value):
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @field_validator("default_work_days", mode="before")
    def _split_work_days(cls, value):
        if isinstance(value, str):
            return [int(item) for item in value.split(",") if item.strip()]
        return value

    @field_validator(
        "default_start", "default_end", "default_lunch_start", "default_lunch_end"
    )
    def _check_time(cls, value: str) -> str:
        value = value.strip()
        if not is_valid_time(value):
            raise ValueError(f"invalid time {value!r}, expected HH:MM")
        return value

    @field_validator("default_slot_minutes")
    def _check_slot_minutes(cls, value: int) -> int:
        if not 0 < value <= 240:
            raise ValueError("default_slot_minutes must be between 1 and 240")
        return value

    @field_validator(
        "confirmation_token_ttl_minutes",
        "representative_day_search_limit",
        "representative_week_skip_limit",
        "occurrence_horizon_days",
    )
    def _check_positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("must be >= 1")
        return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings()
