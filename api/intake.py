"""POST /api/intake - public donor pickup request endpoint."""

from fastapi import APIRouter, Request

from api.base import success_response
from core.models import TicketCreate


def create_intake_router(services: dict) -> APIRouter:
    router = APIRouter()

    ticket_svc = services["ticket"]

    @router.post("/intake")
    async def submit_pickup_request(request: Request, body: TicketCreate):
        ticket = ticket_svc.create(body)
        return success_response({
            "id": ticket.id,
            "status": ticket.status.value,
            "created_at": ticket.created_at.isoformat(),
        }).model_dump(mode="json")

    return router
