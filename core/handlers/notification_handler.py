"""
Handlers that email donors and staff about pickup requests.

On TicketCreated: staff get a new-request alert, the donor gets a receipt.
On PickupScheduled: the donor gets the booked window in local time.
On PickupMoved: the donor gets the new window alongside the old one.
Gateway failures raise and are logged by the event bus; the ticket write
has already committed.
"""

import logging
from datetime import datetime
from typing import Callable

from clients.email_client import EmailGatewayClient, PickupNotice
from core.config import OperatingConfig
from core.events import PickupMoved, PickupScheduled, TicketCreated
from utils.timezone import to_local

logger = logging.getLogger(__name__)


def _format_window(start: datetime, end: datetime, zone: str) -> str:
    start = to_local(start, zone)
    end = to_local(end, zone)
    return (
        f"{start.strftime('%A, %B %d, %Y')} between "
        f"{start.strftime('%I:%M %p')} and {end.strftime('%I:%M %p')} ({zone})"
    )


def handle_ticket_created(email: EmailGatewayClient, config: OperatingConfig) -> Callable:
    """
    Factory that returns a TicketCreated handler.

    Dependencies are captured at wiring time via closure.
    """

    def handler(event: TicketCreated):
        ticket = event.ticket

        if config.staff_email:
            email.send_pickup_notice(
                PickupNotice.STAFF_ALERT,
                to=config.staff_email,
                ticket_id=ticket.id,
                subject=f"New pickup request #{ticket.id}",
                body=(
                    f"New pickup request #{ticket.id} from {ticket.donor_name}.\n"
                    f"Address: {ticket.destination}\n"
                    f"Items: {', '.join(ticket.categories)}\n"
                    f"Preferred: {ticket.preferred_date} {ticket.preferred_time}"
                ),
            )
        else:
            logger.debug(f"No staff email configured; skipping alert for ticket {ticket.id}")

        email.send_pickup_notice(
            PickupNotice.REQUEST_RECEIVED,
            to=ticket.donor_email,
            ticket_id=ticket.id,
            subject=f"{config.app_name}: pickup request #{ticket.id} received",
            body=f"Thanks {ticket.donor_name}! Your pickup request #{ticket.id} was received.",
        )

    return handler


def handle_pickup_scheduled(email: EmailGatewayClient, config: OperatingConfig) -> Callable:
    """Factory that returns a PickupScheduled handler."""

    def handler(event: PickupScheduled):
        ticket = event.ticket
        window = _format_window(event.entry.start_at, event.entry.end_at, config.timezone)

        email.send_pickup_notice(
            PickupNotice.SCHEDULED,
            to=ticket.donor_email,
            ticket_id=ticket.id,
            subject=f"{config.app_name}: pickup #{ticket.id} scheduled",
            body=f"Hi {ticket.donor_name}, your pickup is scheduled for {window}.",
        )

    return handler


def handle_pickup_moved(email: EmailGatewayClient, config: OperatingConfig) -> Callable:
    """Factory that returns a PickupMoved handler."""

    def handler(event: PickupMoved):
        ticket = event.ticket
        if ticket is None:
            logger.warning(f"Schedule entry {event.entry.id} moved but its ticket is gone; no notice sent")
            return

        window = _format_window(event.entry.start_at, event.entry.end_at, config.timezone)
        previous = _format_window(event.previous_start, event.previous_end, config.timezone)

        email.send_pickup_notice(
            PickupNotice.RESCHEDULED,
            to=ticket.donor_email,
            ticket_id=ticket.id,
            subject=f"{config.app_name}: pickup #{ticket.id} rescheduled",
            body=(
                f"Hi {ticket.donor_name}, your pickup has moved to {window}.\n"
                f"It was previously {previous}."
            ),
        )

    return handler


def register_notification_handlers(event_bus, email: EmailGatewayClient, config: OperatingConfig) -> None:
    """Subscribe the notification handlers to the bus."""
    event_bus.subscribe("TicketCreated", handle_ticket_created(email, config))
    event_bus.subscribe("PickupScheduled", handle_pickup_scheduled(email, config))
    event_bus.subscribe("PickupMoved", handle_pickup_moved(email, config))
