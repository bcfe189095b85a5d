import asyncio

import pytest
from pydantic import ValidationError

from agenda.config import Settings
from agenda.services.store import build_store, default_schedule


def test_defaults() -> None:
    settings = Settings()

    assert settings.default_start == "09:00"
    assert settings.default_end == "18:00"
    assert settings.default_slot_minutes == 60
    assert settings.default_work_days == [1, 2, 3, 4, 5, 6]
    assert settings.seed_provider_names == ["Barber 1", "Barber 2"]
    assert settings.confirmation_token_ttl_minutes == 30


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("AGENDA_DEFAULT_SLOT_MINUTES", "30")
    monkeypatch.setenv("AGENDA_DEFAULT_WORK_DAYS", "[1, 2, 3]")
    monkeypatch.setenv("AGENDA_CORS_ORIGINS", '["https://shop.example.com"]')

    settings = Settings()

    assert settings.default_slot_minutes == 30
    assert settings.default_work_days == [1, 2, 3]
    assert settings.cors_origins == ["https://shop.example.com"]


def test_comma_separated_values() -> None:
    settings = Settings(seed_provider_names="Ana, Bruno ,", default_work_days="1,3,5")

    assert settings.seed_provider_names == ["Ana", "Bruno"]
    assert settings.default_work_days == [1, 3, 5]


@pytest.mark.parametrize("minutes", [0, 241])
def test_slot_minutes_out_of_range(minutes: int) -> None:
    with pytest.raises(ValidationError):
        Settings(default_slot_minutes=minutes)


def test_limits_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        Settings(representative_week_skip_limit=0)


def test_store_is_seeded_from_settings() -> None:
    settings = Settings(seed_provider_names=["Ana"], default_slot_minutes=45)
    store = build_store(settings)

    assert default_schedule(settings).slot_minutes == 45
    providers = asyncio.run(store.providers.list())
    assert [provider.name for provider in providers] == ["Ana"]


@pytest.mark.parametrize(
    "field", ["default_start", "default_end", "default_lunch_start", "default_lunch_end"]
)
def test_default_times_must_be_hh_mm(field: str) -> None:
    with pytest.raises(ValidationError):
        Settings(**{field: "9:00"})


def test_unpadded_default_start_from_environment_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("AGENDA_DEFAULT_START", "9:00")

    with pytest.raises(ValidationError):
        Settings()
