from __future__ import annotations

from datetime import date

import pytest

from agenda.config import Settings
from agenda.services.store import DataStore, build_store

# 2025-01-06 is a Monday.
TODAY = date(2025, 1, 6)


def fixed_today() -> date:
    return TODAY


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def store(settings: Settings) -> DataStore:
    return build_store(settings)
