"""
Storage interfaces for tickets, schedule entries and blackout dates.

Services receive these stores explicitly; nothing reaches for a global
database handle. Two backends implement them: `core.stores.postgres`
(production) and `core.stores.memory` (single process, tests).
"""

from contextlib import AbstractContextManager
from datetime import date, datetime
from typing import Any, Protocol

from core.models import BlackoutDate, ScheduleEntry, Ticket, TicketCreate, TicketStatus


class TicketStore(Protocol):
    """Persistence for tickets. Deleting a ticket deletes its schedule entries."""

    def insert(self, data: TicketCreate, fuel_cost_per_mile: float, created_at: datetime) -> Ticket:
        """Persist a new ticket in NEW status with zeroed cost fields."""
        ...

    def get(self, ticket_id: int) -> Ticket | None:
        ...

    def list_all(self) -> list[Ticket]:
        """All tickets, newest first."""
        ...

    def update_status(self, ticket_id: int, status: TicketStatus) -> Ticket | None:
        ...

    def update_fields(self, ticket_id: int, **fields: Any) -> Ticket | None:
        """Overwrite cost/crew/distance fields. Returns None if ticket missing."""
        ...

    def delete(self, ticket_id: int) -> bool:
        ...


class ScheduleStore(Protocol):
    """Booked intervals, each tied to one ticket."""

    def atomic(self) -> AbstractContextManager["ScheduleStore"]:
        """
        Serialize a conflict check and the write that follows it.

        Yields a store to use inside the block. Two overlapping bookings
        cannot both pass their conflict checks.
        """
        ...

    def insert(self, ticket_id: int, start: datetime, end: datetime) -> ScheduleEntry:
        """Create an entry and move the ticket to SCHEDULED."""
        ...

    def get(self, entry_id: int) -> ScheduleEntry | None:
        ...

    def list_all(self) -> list[ScheduleEntry]:
        """All entries ordered by start ascending."""
        ...

    def list_for_ticket(self, ticket_id: int) -> list[ScheduleEntry]:
        ...

    def find_conflicts(
        self,
        start: datetime,
        end: datetime,
        exclude_id: int | None = None,
    ) -> list[ScheduleEntry]:
        """Entries overlapping the half-open interval [start, end)."""
        ...

    def update(self, entry_id: int, start: datetime, end: datetime) -> ScheduleEntry | None:
        """Replace an entry's interval. Ticket status is untouched."""
        ...


class BlackoutStore(Protocol):
    """Closed calendar days. Dates are unique."""

    def add(self, day: date) -> BlackoutDate:
        """Insert a date, or return the existing row for it."""
        ...

    def remove(self, blackout_id: int) -> bool:
        ...

    def list_all(self) -> list[BlackoutDate]:
        """All dates ascending."""
        ...

    def contains(self, day: date) -> bool:
        ...
