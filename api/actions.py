"""POST /api/actions - unified staff mutation endpoint."""

from datetime import datetime

from fastapi import APIRouter, Request
from pydantic import BaseModel

from api.base import success_response
from api.errors import booking_rejected_response
from core.models import BookingResult, TicketCreate, TicketTimesUpdate
from utils.timezone import localize, parse_iso_in_zone


class ActionRequest(BaseModel):
    domain: str
    action: str
    data: dict


def create_actions_router(services: dict) -> APIRouter:
    router = APIRouter()

    handlers = {
        "ticket": TicketHandler(services["ticket"]),
        "schedule": ScheduleHandler(services["scheduling"]),
        "blackout": BlackoutHandler(services["blackout"]),
    }

    @router.post("/actions")
    async def perform_action(request: Request, body: ActionRequest):
        handler = handlers.get(body.domain)
        if handler is None:
            raise ValueError(
                f"Unknown domain '{body.domain}'. "
                f"Valid domains: {', '.join(sorted(handlers.keys()))}"
            )

        if body.action not in handler.ALLOWED_ACTIONS:
            raise ValueError(
                f"Action '{body.action}' not allowed on '{body.domain}'. "
                f"Allowed: {', '.join(sorted(handler.ALLOWED_ACTIONS))}"
            )

        method = getattr(handler, f"_handle_{body.action}")
        result = method(dict(body.data))

        if isinstance(result, BookingResult):
            if not result.success:
                return booking_rejected_response(result)
            result = result.entry.model_dump(mode="json")

        return success_response(result).model_dump(mode="json")

    return router


def _required(data: dict, key: str):
    if data.get(key) in (None, ""):
        raise ValueError(f"'{key}' is required")
    return data[key]


def _int_id(data: dict, key: str = "id") -> int:
    value = _required(data, key)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"'{key}' must be an integer")


def _instant(value, tz_name: str) -> datetime:
    """ISO string or datetime; naive values are wall-clock time in the operating zone."""
    if isinstance(value, datetime):
        return localize(value, tz_name)
    try:
        return parse_iso_in_zone(str(value), tz_name)
    except ValueError:
        raise ValueError(f"Invalid datetime '{value}'. Use ISO 8601.")


# =============================================================================
# HANDLER CLASSES
# =============================================================================


class TicketHandler:
    ALLOWED_ACTIONS = {
        "create", "update_status", "update_times", "recalculate_cost",
        "suggest_crew", "refresh_estimate", "delete",
    }

    def __init__(self, service):
        self.service = service

    def _handle_create(self, data: dict):
        ticket = self.service.create(TicketCreate(**data))
        return ticket.model_dump(mode="json")

    def _handle_update_status(self, data: dict):
        ticket = self.service.update_status(_int_id(data), _required(data, "status"))
        return ticket.model_dump(mode="json")

    def _handle_update_times(self, data: dict):
        ticket_id = _int_id(data)
        data.pop("id")
        ticket = self.service.update_times_and_cost(ticket_id, TicketTimesUpdate(**data))
        return ticket.model_dump(mode="json")

    def _handle_recalculate_cost(self, data: dict):
        estimate = self.service.recalculate_cost(_int_id(data))
        return estimate.model_dump(mode="json")

    def _handle_suggest_crew(self, data: dict):
        return {"crew_size": self.service.suggest_crew(_int_id(data))}

    def _handle_refresh_estimate(self, data: dict):
        ticket = self.service.refresh_estimate(_int_id(data))
        return ticket.model_dump(mode="json")

    def _handle_delete(self, data: dict):
        ticket_id = _int_id(data)
        deleted = self.service.delete(ticket_id)
        if not deleted:
            raise ValueError(f"Ticket {ticket_id} not found")
        return {"deleted": True}


class ScheduleHandler:
    ALLOWED_ACTIONS = {"book", "move"}

    def __init__(self, service):
        self.service = service

    def _window(self, data: dict) -> tuple[datetime, datetime]:
        tz = self.service.config.timezone
        start = _instant(_required(data, "start_at"), tz)
        end = _instant(_required(data, "end_at"), tz)
        if end <= start:
            raise ValueError("End must be after start")
        return start, end

    def _handle_book(self, data: dict) -> BookingResult:
        ticket_id = _int_id(data, "ticket_id")

        if data.get("end_at") in (None, ""):
            # Start plus a duration, defaulting to the configured pickup length
            start = _instant(_required(data, "start_at"), self.service.config.timezone)
            hours = data.get("duration_hours")
            if hours is not None and float(hours) <= 0:
                raise ValueError("'duration_hours' must be positive")
            return self.service.book_for_duration(
                ticket_id, start, float(hours) if hours is not None else None
            )

        start, end = self._window(data)
        return self.service.book(ticket_id, start, end)

    def _handle_move(self, data: dict) -> BookingResult:
        start, end = self._window(data)
        return self.service.move(_int_id(data), start, end)


class BlackoutHandler:
    ALLOWED_ACTIONS = {"add", "remove"}

    def __init__(self, service):
        self.service = service

    def _handle_add(self, data: dict):
        blackout = self.service.add(str(_required(data, "date")))
        return blackout.model_dump(mode="json")

    def _handle_remove(self, data: dict):
        blackout_id = _int_id(data)
        removed = self.service.remove(blackout_id)
        if not removed:
            raise ValueError(f"Blackout {blackout_id} not found")
        return {"deleted": True}
