from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from agenda.dependencies.services import get_plan_service, get_store
from agenda.main import app
from agenda.services.plans import PlanService

from tests.conftest import fixed_today

MONDAY = "2025-01-06"


@pytest.fixture
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_plan_service] = lambda: PlanService(store, today=fixed_today)
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _book(client: TestClient, time: str = "10:00", day: str = MONDAY, provider_id: int = 1):
    return client.post(
        "/bookings",
        json={"provider_id": provider_id, "client_name": "Jamie", "date": day, "time": time},
    )


def test_health(client) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"ok": True, "active_providers": 2}


def test_public_provider_list_hides_inactive(client) -> None:
    assert client.post("/admin/providers/2/toggle").json()["is_active"] is False

    response = client.get("/providers")

    assert response.status_code == 200
    assert [item["provider_id"] for item in response.json()["items"]] == [1]


def test_availability_endpoint(client) -> None:
    response = client.get("/availability", params={"date": MONDAY, "provider_id": 1})

    assert response.status_code == 200
    assert response.json()["slots"][:3] == ["09:00", "10:00", "11:00"]


def test_availability_rejects_bad_input(client) -> None:
    assert client.get("/availability", params={"date": "06/01/2025", "provider_id": 1}).status_code == 400
    assert client.get("/availability", params={"date": MONDAY, "provider_id": 9}).status_code == 400


def test_booking_flow_and_conflict(client) -> None:
    first = _book(client)
    assert first.status_code == 200
    body = first.json()
    assert body["status"] == "pending"
    assert body["confirmation_token"]

    second = _book(client)
    assert second.status_code == 409
    detail = second.json()["detail"]
    assert detail["kind"] == "SlotAlreadyBooked"
    assert "10:00" not in detail["suggested_slots"]

    slots = client.get("/availability", params={"date": MONDAY, "provider_id": 1}).json()["slots"]
    assert "10:00" not in slots


def test_booking_validation_errors(client) -> None:
    not_offered = _book(client, time="12:00")
    assert not_offered.status_code == 400
    assert not_offered.json()["detail"]["kind"] == "SlotNotOffered"

    bad_time = _book(client, time="noon")
    assert bad_time.status_code == 400
    assert bad_time.json()["detail"]["kind"] == "InvalidTime"

    missing_name = client.post(
        "/bookings", json={"provider_id": 1, "client_name": "  ", "date": MONDAY, "time": "10:00"}
    )
    assert missing_name.status_code == 422


def test_confirmation_endpoint(client) -> None:
    token = _book(client, time="09:00").json()["confirmation_token"]

    confirmed = client.post(f"/bookings/confirm/{token}")
    assert confirmed.status_code == 200
    assert confirmed.json()["status"] == "confirmed"

    assert client.post(f"/bookings/confirm/{token}").status_code == 410
    assert client.post("/bookings/confirm/unknown").status_code == 404


def test_admin_status_cancel_frees_slot(client) -> None:
    booking_id = _book(client, time="11:00").json()["booking_id"]

    response = client.post(f"/admin/bookings/{booking_id}/status", json={"status": "canceled"})
    assert response.status_code == 200

    slots = client.get("/availability", params={"date": MONDAY, "provider_id": 1}).json()["slots"]
    assert "11:00" in slots

    revive = client.post(f"/admin/bookings/{booking_id}/status", json={"status": "pending"})
    assert revive.status_code == 400
    assert revive.json()["detail"]["kind"] == "StatusTransitionRejected"

    assert client.post("/admin/bookings/BKG-99999/status", json={"status": "x"}).status_code == 404


def test_admin_booking_accepts_day_first_dates(client) -> None:
    response = client.post(
        "/admin/bookings",
        json={
            "provider_id": 2,
            "client_name": "Walk-in",
            "date": "06-01-2025",
            "time": "15:00",
            "status": "confirmed",
        },
    )

    assert response.status_code == 200
    assert response.json()["date"] == MONDAY

    listing = client.get("/admin/bookings", params={"provider_id": 2})
    assert listing.status_code == 200
    assert listing.json()["total"] == 1
    assert listing.json()["items"][0]["status"] == "confirmed"


def test_provider_config_roundtrip(client) -> None:
    payload = {
        "start": "08:00",
        "end": "12:00",
        "lunch_start": "12:00",
        "lunch_end": "12:00",
        "slot_minutes": 120,
        "work_days": [1],
        "days_off": "13-01-2025",
    }
    response = client.put("/admin/providers/1/config", json=payload)
    assert response.status_code == 200
    assert response.json()["days_off"] == ["2025-01-13"]

    assert client.get("/availability", params={"date": MONDAY, "provider_id": 1}).json()["slots"] == [
        "08:00",
        "10:00",
    ]
    assert client.get("/availability", params={"date": "2025-01-13", "provider_id": 1}).json()["slots"] == []


def test_provider_config_rejects_bad_hours(client) -> None:
    response = client.put(
        "/admin/providers/1/config", json={"start": "18:00", "end": "09:00"}
    )
    assert response.status_code == 422

    response = client.put("/admin/providers/1/config", json={"slot_minutes": 300})
    assert response.status_code == 422

    assert client.get("/admin/providers/99/config").status_code == 404


def test_plan_endpoints(client) -> None:
    plan = {
        "provider_id": 1,
        "client_name": "Carlos",
        "weekday": 1,
        "time": "17:00",
        "start_date": MONDAY,
        "end_date": "2025-01-31",
    }
    created = client.post("/admin/plans", json=plan)
    assert created.status_code == 200
    plan_id = created.json()["plan_id"]

    overlap = client.post("/admin/plans", json={**plan, "start_date": "2025-01-20", "end_date": None})
    assert overlap.status_code == 409
    assert overlap.json()["detail"]["kind"] == "PlanOverlap"

    later = client.post("/admin/plans", json={**plan, "start_date": "2025-02-01", "end_date": ""})
    assert later.status_code == 200
    assert later.json()["end_date"] is None

    blocked = _book(client, time="17:00", day="2025-01-13")
    assert blocked.status_code == 409
    assert blocked.json()["detail"]["kind"] == "SlotReservedByPlan"

    occurrences = client.get(
        f"/admin/plans/{plan_id}/occurrences",
        params={"window_start": "2025-01-01", "window_end": "2025-02-01"},
    )
    assert occurrences.json()["dates"] == ["2025-01-06", "2025-01-13", "2025-01-20", "2025-01-27"]

    unbounded = client.get(
        f"/admin/plans/{plan_id}/occurrences",
        params={"window_start": "0001-01-01", "window_end": "9999-12-31"},
    ).json()
    assert unbounded["window_start"] == "2024-01-07"
    assert unbounded["window_end"] == "2026-01-06"
    assert unbounded["dates"][-1] == "2025-01-27"

    updated = client.put(f"/admin/plans/{plan_id}", json={**plan, "time": "16:00"})
    assert updated.status_code == 200
    assert updated.json()["time"] == "16:00"

    assert client.get("/admin/plans", params={"provider_id": 1}).json()["total"] == 2

    assert client.delete(f"/admin/plans/{plan_id}").status_code == 204
    assert client.get(f"/admin/plans/{plan_id}").status_code == 404
    assert client.delete(f"/admin/plans/{plan_id}").status_code == 404


def test_plan_time_must_be_offered(client) -> None:
    response = client.post(
        "/admin/plans",
        json={
            "provider_id": 1,
            "client_name": "Carlos",
            "weekday": 0,
            "time": "10:00",
            "start_date": MONDAY,
        },
    )

    assert response.status_code == 400
    assert response.json()["detail"]["kind"] == "SlotNotOffered"


def test_weekday_slots_endpoint(client) -> None:
    response = client.get("/admin/providers/1/weekday-slots/3")

    assert response.status_code == 200
    assert response.json()["representative_date"] == "2025-01-08"
    assert response.json()["slots"][0] == "09:00"

    assert client.get("/admin/providers/1/weekday-slots/9").status_code == 400
