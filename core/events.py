"""
Domain events for pickup tickets and the schedule.

Immutable event objects that represent state changes. A service publishes
what happened; handlers (notifications) react without the publisher
knowing who's listening.

Event Categories:
- TicketEvent: Ticket lifecycle (create, status override)
- ScheduleEvent: Calendar changes (booked, moved)

Events carry the full domain object so handlers don't need to re-fetch state.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import uuid4

from utils.timezone import now_utc


@dataclass(frozen=True, kw_only=True)
class PickupEvent:
    """Base class for all pickup domain events."""
    event_id: str = field(default_factory=lambda: str(uuid4()))
    occurred_at: datetime = field(default_factory=now_utc)


# =============================================================================
# TICKET EVENTS
# =============================================================================


@dataclass(frozen=True)
class TicketEvent(PickupEvent):
    """Events related to ticket lifecycle."""
    pass


@dataclass(frozen=True)
class TicketCreated(TicketEvent):
    """A donor submitted a pickup request; ticket is NEW."""
    ticket: Any = None  # Ticket, typed Any to keep events free of model imports

    @classmethod
    def create(cls, ticket: Any) -> "TicketCreated":
        return cls(ticket=ticket)


@dataclass(frozen=True)
class TicketStatusChanged(TicketEvent):
    """
    Staff set a ticket's status by hand.

    No notification is sent for overrides; subscribe here to react to
    completions or cancellations.
    """
    ticket: Any = None
    previous_status: Any = None

    @classmethod
    def create(cls, ticket: Any, previous_status: Any) -> "TicketStatusChanged":
        return cls(ticket=ticket, previous_status=previous_status)


# =============================================================================
# SCHEDULE EVENTS
# =============================================================================


@dataclass(frozen=True)
class ScheduleEvent(PickupEvent):
    """Events related to calendar bookings."""
    pass


@dataclass(frozen=True)
class PickupScheduled(ScheduleEvent):
    """A new pickup window was booked and the ticket is SCHEDULED."""
    ticket: Any = None
    entry: Any = None

    @classmethod
    def create(cls, ticket: Any, entry: Any) -> "PickupScheduled":
        return cls(ticket=ticket, entry=entry)


@dataclass(frozen=True)
class PickupMoved(ScheduleEvent):
    """An existing pickup window was moved or resized."""
    ticket: Any = None
    entry: Any = None
    previous_start: datetime | None = None
    previous_end: datetime | None = None

    @classmethod
    def create(
        cls, ticket: Any, entry: Any, previous_start: datetime, previous_end: datetime
    ) -> "PickupMoved":
        return cls(ticket=ticket, entry=entry, previous_start=previous_start, previous_end=previous_end)
