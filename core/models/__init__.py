"""Core domain models."""

from core.models.ticket import Ticket, TicketCreate, TicketTimesUpdate, TicketStatus
from core.models.schedule import ScheduleEntry, BookingResult, BookingRejection
from core.models.blackout import BlackoutDate

__all__ = [
    # Ticket
    "Ticket", "TicketCreate", "TicketTimesUpdate", "TicketStatus",
    # Schedule
    "ScheduleEntry", "BookingResult", "BookingRejection",
    # Blackout
    "BlackoutDate",
]
