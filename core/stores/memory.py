"""
In-process stores backed by plain dicts.

All three stores share one `InMemoryDatabase`, so ticket deletion can
cascade to schedule entries and `ScheduleStore.atomic()` can serialize
bookings with a single re-entrant lock. Rows are kept as dicts and
validated into models on the way out, the same way the PostgreSQL stores
treat result rows.
"""

import itertools
import threading
from contextlib import contextmanager
from datetime import date, datetime
from typing import Any, Iterator

from core.models import BlackoutDate, ScheduleEntry, Ticket, TicketCreate, TicketStatus

_TICKET_FIELDS = {
    "crew_size", "estimated_miles", "drive_minutes", "onsite_minutes",
    "fuel_cost_per_mile", "estimated_cost",
}


class InMemoryDatabase:
    """Tables and id sequences for the in-memory stores."""

    def __init__(self):
        self.lock = threading.RLock()
        self.tickets: dict[int, dict[str, Any]] = {}
        self.schedule_entries: dict[int, dict[str, Any]] = {}
        self.blackout_dates: dict[int, dict[str, Any]] = {}
        self._sequences = {
            "tickets": itertools.count(1),
            "schedule_entries": itertools.count(1),
            "blackout_dates": itertools.count(1),
        }

    def next_id(self, table: str) -> int:
        return next(self._sequences[table])


class MemoryTicketStore:
    """TicketStore over an InMemoryDatabase."""

    def __init__(self, db: InMemoryDatabase):
        self.db = db

    def insert(self, data: TicketCreate, fuel_cost_per_mile: float, created_at: datetime) -> Ticket:
        with self.db.lock:
            ticket_id = self.db.next_id("tickets")
            row = {
                **data.model_dump(),
                "id": ticket_id,
                "crew_size": 1,
                "estimated_miles": 0.0,
                "drive_minutes": 0.0,
                "onsite_minutes": 0.0,
                "fuel_cost_per_mile": fuel_cost_per_mile,
                "estimated_cost": 0.0,
                "status": TicketStatus.NEW.value,
                "created_at": created_at,
            }
            self.db.tickets[ticket_id] = row
            return Ticket.model_validate(row)

    def get(self, ticket_id: int) -> Ticket | None:
        row = self.db.tickets.get(ticket_id)
        if row is None:
            return None
        return Ticket.model_validate(row)

    def list_all(self) -> list[Ticket]:
        with self.db.lock:
            rows = sorted(
                self.db.tickets.values(),
                key=lambda r: (r["created_at"], r["id"]),
                reverse=True,
            )
        return [Ticket.model_validate(row) for row in rows]

    def update_status(self, ticket_id: int, status: TicketStatus) -> Ticket | None:
        with self.db.lock:
            row = self.db.tickets.get(ticket_id)
            if row is None:
                return None
            row["status"] = TicketStatus(status).value
            return Ticket.model_validate(row)

    def update_fields(self, ticket_id: int, **fields: Any) -> Ticket | None:
        unknown = set(fields) - _TICKET_FIELDS
        if unknown:
            raise ValueError(f"Cannot update ticket fields: {', '.join(sorted(unknown))}")

        with self.db.lock:
            row = self.db.tickets.get(ticket_id)
            if row is None:
                return None
            row.update(fields)
            return Ticket.model_validate(row)

    def delete(self, ticket_id: int) -> bool:
        with self.db.lock:
            if self.db.tickets.pop(ticket_id, None) is None:
                return False
            orphaned = [
                entry_id for entry_id, entry in self.db.schedule_entries.items()
                if entry["ticket_id"] == ticket_id
            ]
            for entry_id in orphaned:
                del self.db.schedule_entries[entry_id]
            return True


class MemoryScheduleStore:
    """ScheduleStore over an InMemoryDatabase."""

    def __init__(self, db: InMemoryDatabase):
        self.db = db

    @contextmanager
    def atomic(self) -> Iterator["MemoryScheduleStore"]:
        with self.db.lock:
            yield self

    def _to_entry(self, row: dict[str, Any]) -> ScheduleEntry:
        ticket = self.db.tickets.get(row["ticket_id"], {})
        return ScheduleEntry.model_validate({
            **row,
            "donor_name": ticket.get("donor_name"),
            "pickup_address": ticket.get("pickup_address"),
        })

    def insert(self, ticket_id: int, start: datetime, end: datetime) -> ScheduleEntry:
        with self.db.lock:
            ticket = self.db.tickets.get(ticket_id)
            if ticket is None:
                raise ValueError(f"Ticket {ticket_id} not found")

            entry_id = self.db.next_id("schedule_entries")
            row = {"id": entry_id, "ticket_id": ticket_id, "start_at": start, "end_at": end}
            self.db.schedule_entries[entry_id] = row
            ticket["status"] = TicketStatus.SCHEDULED.value
            return self._to_entry(row)

    def get(self, entry_id: int) -> ScheduleEntry | None:
        with self.db.lock:
            row = self.db.schedule_entries.get(entry_id)
            return self._to_entry(row) if row is not None else None

    def list_all(self) -> list[ScheduleEntry]:
        with self.db.lock:
            rows = sorted(self.db.schedule_entries.values(), key=lambda r: (r["start_at"], r["id"]))
            return [self._to_entry(row) for row in rows]

    def list_for_ticket(self, ticket_id: int) -> list[ScheduleEntry]:
        return [e for e in self.list_all() if e.ticket_id == ticket_id]

    def find_conflicts(
        self,
        start: datetime,
        end: datetime,
        exclude_id: int | None = None,
    ) -> list[ScheduleEntry]:
        return [
            entry for entry in self.list_all()
            if entry.id != exclude_id and entry.overlaps(start, end)
        ]

    def update(self, entry_id: int, start: datetime, end: datetime) -> ScheduleEntry | None:
        with self.db.lock:
            row = self.db.schedule_entries.get(entry_id)
            if row is None:
                return None
            row["start_at"] = start
            row["end_at"] = end
            return self._to_entry(row)


class MemoryBlackoutStore:
    """BlackoutStore over an InMemoryDatabase."""

    def __init__(self, db: InMemoryDatabase):
        self.db = db

    def add(self, day: date) -> BlackoutDate:
        with self.db.lock:
            for row in self.db.blackout_dates.values():
                if row["date"] == day:
                    return BlackoutDate.model_validate(row)

            blackout_id = self.db.next_id("blackout_dates")
            row = {"id": blackout_id, "date": day}
            self.db.blackout_dates[blackout_id] = row
            return BlackoutDate.model_validate(row)

    def remove(self, blackout_id: int) -> bool:
        with self.db.lock:
            return self.db.blackout_dates.pop(blackout_id, None) is not None

    def list_all(self) -> list[BlackoutDate]:
        with self.db.lock:
            rows = sorted(self.db.blackout_dates.values(), key=lambda r: r["date"])
        return [BlackoutDate.model_validate(row) for row in rows]

    def contains(self, day: date) -> bool:
        with self.db.lock:
            return any(row["date"] == day for row in self.db.blackout_dates.values())


def create_memory_stores() -> tuple[MemoryTicketStore, MemoryScheduleStore, MemoryBlackoutStore]:
    """Three stores sharing one fresh in-memory database."""
    db = InMemoryDatabase()
    return MemoryTicketStore(db), MemoryScheduleStore(db), MemoryBlackoutStore(db)
