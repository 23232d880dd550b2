"""GET /api/data - unified read endpoint, plus calendar feeds and CSV export."""

import csv
import io
from datetime import timedelta

from fastapi import APIRouter, Query, Request
from starlette.responses import Response

from api.base import success_response


VALID_TYPES = {"tickets", "schedule", "blackouts"}

BLACKOUT_COLOR = "#ffd6d6"

EXPORT_COLUMNS = [
    "id", "created_at", "status", "donor_name", "donor_email", "donor_phone",
    "pickup_address", "city", "state", "zip", "categories", "condition",
    "item_notes", "preferred_date", "preferred_time", "bags_count",
    "furniture_count", "small_donation", "crew_size", "estimated_miles",
    "drive_minutes", "onsite_minutes", "fuel_cost_per_mile", "estimated_cost",
]


def create_data_router(services: dict) -> APIRouter:
    router = APIRouter()

    ticket_svc = services["ticket"]
    scheduling_svc = services["scheduling"]
    blackout_svc = services["blackout"]

    # -------------------------------------------------------------------------
    # Calendar feeds (must be registered before the generic /data route)
    # -------------------------------------------------------------------------

    @router.get("/data/calendar/schedule")
    async def calendar_schedule(request: Request):
        events = [
            {
                "id": e.id,
                "title": f"#{e.ticket_id} - {e.donor_name}",
                "start": e.start_at.isoformat(),
                "end": e.end_at.isoformat(),
            }
            for e in scheduling_svc.list_schedule()
        ]
        return success_response(events).model_dump(mode="json")

    @router.get("/data/calendar/blackouts")
    async def calendar_blackouts(request: Request):
        events = [
            {
                "id": b.id,
                "start": b.date.isoformat(),
                "end": (b.date + timedelta(days=1)).isoformat(),
                "display": "background",
                "backgroundColor": BLACKOUT_COLOR,
            }
            for b in blackout_svc.list_all()
        ]
        return success_response(events).model_dump(mode="json")

    @router.get("/data/blackouts/check")
    async def blackout_check(request: Request, date: str = Query(...)):
        return success_response({
            "date": date,
            "is_blackout": blackout_svc.is_blackout(date),
        }).model_dump(mode="json")

    # -------------------------------------------------------------------------
    # Generic data endpoint
    # -------------------------------------------------------------------------

    @router.get("/data")
    async def get_data(
        request: Request,
        type: str | None = Query(None),
        id: int | None = Query(None),
    ):
        if type is None:
            raise ValueError("'type' query parameter is required")

        if type not in VALID_TYPES:
            raise ValueError(f"Unknown type '{type}'. Valid types: {', '.join(sorted(VALID_TYPES))}")

        if type == "tickets":
            return _handle_tickets(ticket_svc, scheduling_svc, id)

        if type == "schedule":
            return _handle_schedule(scheduling_svc, id)

        if type == "blackouts":
            return success_response(
                [b.model_dump(mode="json") for b in blackout_svc.list_all()]
            ).model_dump(mode="json")

    # -------------------------------------------------------------------------
    # Export
    # -------------------------------------------------------------------------

    @router.get("/export/tickets.csv")
    async def export_tickets(request: Request):
        return Response(
            content=tickets_to_csv(ticket_svc.list_all()),
            media_type="text/csv",
            headers={"Content-Disposition": 'attachment; filename="tickets.csv"'},
        )

    return router


def _handle_tickets(ticket_svc, scheduling_svc, id):
    if id is not None:
        ticket = ticket_svc.get_by_id(id)
        if ticket is None:
            raise ValueError(f"Ticket {id} not found")

        data = ticket.model_dump(mode="json")
        data["suggested_crew_size"] = ticket_svc.suggest_crew(id)
        data["schedule"] = [
            e.model_dump(mode="json") for e in scheduling_svc.schedule.list_for_ticket(id)
        ]
        return success_response(data).model_dump(mode="json")

    tickets = ticket_svc.list_all()
    return success_response(
        [t.model_dump(mode="json") for t in tickets]
    ).model_dump(mode="json")


def _handle_schedule(scheduling_svc, id):
    if id is not None:
        entry = scheduling_svc.get_entry(id)
        if entry is None:
            raise ValueError(f"Schedule entry {id} not found")
        return success_response(entry.model_dump(mode="json")).model_dump(mode="json")

    return success_response(
        [e.model_dump(mode="json") for e in scheduling_svc.list_schedule()]
    ).model_dump(mode="json")


def tickets_to_csv(tickets) -> str:
    """Render tickets as CSV. Categories are joined with '|'."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(EXPORT_COLUMNS)

    for ticket in tickets:
        row = ticket.model_dump(mode="json")
        row["categories"] = "|".join(ticket.categories)
        writer.writerow(["" if row.get(col) is None else row[col] for col in EXPORT_COLUMNS])

    return buffer.getvalue()
