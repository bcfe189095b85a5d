"""Read-only HTML overview of the providers, schedules, bookings and plans."""
from __future__ import annotations

import html
import json
from datetime import date
from typing import Any, Dict, Iterable, List, Mapping

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from agenda.dependencies.services import get_store
from agenda.scheduling.recurring import RecurringPlan
from agenda.scheduling.slots import ScheduleConfig
from agenda.services.store import BookingRecord, DataStore, ProviderRecord

router = APIRouter()

WEEKDAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


def _stringify(value: Any) -> str:
    """Return a display string for a table cell."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, (str, int, float)):
        return str(value)
    if isinstance(value, date):
        return value.isoformat()
    return json.dumps(value, default=str)


def _build_table(title: str, rows: Iterable[Mapping[str, Any]]) -> str:
    row_list: List[Dict[str, Any]] = [dict(row) for row in rows]
    section_parts = [f"<section><h2>{html.escape(title)}</h2>"]
    if not row_list:
        section_parts.append("<p>No records found.</p></section>")
        return "".join(section_parts)

    columns: List[str] = []
    for row in row_list:
        for key in row.keys():
            if key not in columns:
                columns.append(key)

    header = "".join(f"<th>{html.escape(column)}</th>" for column in columns)
    body_rows: List[str] = []
    for row in row_list:
        cells = []
        for column in columns:
            value = _stringify(row.get(column))
            cells.append(f"<td>{html.escape(value)}</td>")
        body_rows.append("<tr>" + "".join(cells) + "</tr>")
    table_html = (
        "<table><thead><tr>"
        + header
        + "</tr></thead><tbody>"
        + "".join(body_rows)
        + "</tbody></table>"
    )
    section_parts.append(table_html)
    section_parts.append("</section>")
    return "".join(section_parts)


def _provider_rows(providers: Iterable[ProviderRecord]) -> List[Dict[str, Any]]:
    return [
        {"provider_id": provider.id, "name": provider.name, "active": provider.is_active}
        for provider in providers
    ]


def _schedule_rows(configs: Mapping[int, ScheduleConfig]) -> List[Dict[str, Any]]:
    rows: List[Dict[str, Any]] = []
    for provider_id, config in sorted(configs.items()):
        rows.append(
            {
                "provider_id": provider_id,
                "hours": f"{config.start}-{config.end}",
                "lunch": f"{config.lunch_start}-{config.lunch_end}",
                "slot_minutes": config.slot_minutes,
                "work_days": ", ".join(WEEKDAY_NAMES[day] for day in sorted(config.work_days)),
                "days_off": ", ".join(day.isoformat() for day in sorted(config.days_off)),
            }
        )
    return rows


def _booking_rows(
    bookings: Iterable[BookingRecord], names: Mapping[int, str]
) -> List[Dict[str, Any]]:
    return [
        {
            "booking_id": booking.id,
            "provider": names.get(booking.provider_id, booking.provider_id),
            "client": booking.client_name,
            "contact": booking.contact,
            "date": booking.date,
            "time": booking.time,
            "status": booking.status,
        }
        for booking in bookings
    ]


def _plan_rows(plans: Iterable[RecurringPlan], names: Mapping[int, str]) -> List[Dict[str, Any]]:
    return [
        {
            "plan_id": plan.id,
            "provider": names.get(plan.provider_id, plan.provider_id),
            "client": plan.client_name,
            "weekday": WEEKDAY_NAMES[plan.weekday],
            "time": plan.time,
            "start_date": plan.start_date,
            "end_date": plan.end_date or "open",
        }
        for plan in plans
    ]


@router.get("/admin/overview", response_class=HTMLResponse)
async def view_store(store: DataStore = Depends(get_store)) -> HTMLResponse:
    """Render the in-memory store as HTML tables."""
    providers = await store.providers.list()
    names = {provider.id: provider.name for provider in providers}
    for provider in providers:
        await store.schedules.get(provider.id)

    sections = [
        _build_table("Providers", _provider_rows(providers)),
        _build_table("Schedules", _schedule_rows(store.schedules.snapshot())),
        _build_table("Bookings", _booking_rows(await store.bookings.list(), names)),
        _build_table("Recurring Plans", _plan_rows(await store.plans.list(), names)),
    ]

    sections_html = "".join(sections)
    html_content = f"""
    <html>
        <head>
            <title>Agenda Overview</title>
            <style>
                body {{ font-family: Arial, sans-serif; margin: 2rem; }}
                h1 {{ text-align: center; }}
                section {{ margin-bottom: 2rem; }}
                table {{ border-collapse: collapse; width: 100%; }}
                th, td {{ border: 1px solid #ccc; padding: 0.5rem; text-align: left; }}
                th {{ background-color: #f0f0f0; }}
                tbody tr:nth-child(even) {{ background-color: #fafafa; }}
            </style>
        </head>
        <body>
            <h1>Agenda Overview</h1>
            {sections_html}
        </body>
    </html>
    """

    return HTMLResponse(content=html_content)
