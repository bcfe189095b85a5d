from __future__ import annotations

import asyncio
from datetime import date

import pytest
from fastapi.testclient import TestClient

from agenda.dependencies.services import get_store
from agenda.main import app


@pytest.fixture
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def test_overview_renders_seed_data(client) -> None:
    response = client.get("/admin/overview")
    assert response.status_code == 200
    body = response.text

    assert "Agenda Overview" in body
    assert "Barber 1" in body
    assert "Barber 2" in body
    assert "09:00-18:00" in body  # default schedule materialised for each provider
    assert "No records found." in body  # no bookings or plans yet


def test_overview_includes_created_records(client, store) -> None:
    asyncio.run(
        store.bookings.insert(
            provider_id=1,
            client_name="Jamie Client",
            target_date=date(2025, 1, 6),
            time="10:00",
            status="pending",
            contact="jamie@example.com",
        )
    )
    asyncio.run(
        store.plans.insert(
            provider_id=2,
            client_name="Carlos Weekly",
            weekday=1,
            time="17:00",
            start_date=date(2025, 1, 6),
            end_date=None,
            contact=None,
        )
    )

    body = client.get("/admin/overview").text

    assert "Jamie Client" in body
    assert "jamie@example.com" in body
    assert "2025-01-06" in body
    assert "Carlos Weekly" in body
    assert "open" in body
    assert "No records found." not in body


def test_overview_escapes_names(client, store) -> None:
    asyncio.run(store.providers.create("<b>Bold</b>"))

    body = client.get("/admin/overview").text

    assert "&lt;b&gt;Bold&lt;/b&gt;" in body
    assert "<b>Bold</b>" not in body
