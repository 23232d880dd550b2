"""
PostgreSQL-backed stores.

`ensure_schema()` creates the three tables. Schedule entries cascade on
ticket deletion, blackout dates are unique, and an exclusion constraint
keeps booked intervals from overlapping even if a writer skips `atomic()`.
"""

import logging
from contextlib import contextmanager
from datetime import date, datetime
from typing import Any, Iterator

from psycopg2.extras import Json

from clients.postgres_client import PostgresClient, PostgresTransaction
from core.models import BlackoutDate, ScheduleEntry, Ticket, TicketCreate, TicketStatus

logger = logging.getLogger(__name__)

# Advisory lock key serializing conflict-check-then-write on schedule_entries
SCHEDULE_LOCK_KEY = 7_340_021

SCHEMA = """
CREATE TABLE IF NOT EXISTS tickets (
    id BIGSERIAL PRIMARY KEY,
    donor_name TEXT NOT NULL,
    donor_email TEXT NOT NULL,
    donor_phone TEXT NOT NULL,
    pickup_address TEXT NOT NULL,
    city TEXT NOT NULL,
    state TEXT NOT NULL,
    zip TEXT NOT NULL,
    categories JSONB NOT NULL DEFAULT '[]',
    condition TEXT,
    item_notes TEXT,
    preferred_date TEXT,
    preferred_time TEXT,
    bags_count INTEGER NOT NULL DEFAULT 0 CHECK (bags_count >= 0),
    furniture_count INTEGER NOT NULL DEFAULT 0 CHECK (furniture_count >= 0),
    small_donation BOOLEAN NOT NULL DEFAULT FALSE,
    crew_size INTEGER NOT NULL DEFAULT 1 CHECK (crew_size >= 1),
    estimated_miles DOUBLE PRECISION NOT NULL DEFAULT 0,
    drive_minutes DOUBLE PRECISION NOT NULL DEFAULT 0,
    onsite_minutes DOUBLE PRECISION NOT NULL DEFAULT 0,
    fuel_cost_per_mile DOUBLE PRECISION NOT NULL DEFAULT 0.2,
    estimated_cost DOUBLE PRECISION NOT NULL DEFAULT 0,
    images JSONB NOT NULL DEFAULT '[]',
    status TEXT NOT NULL DEFAULT 'new'
        CHECK (status IN ('new', 'scheduled', 'completed', 'canceled')),
    created_at TIMESTAMPTZ NOT NULL DEFAULT now()
);

CREATE TABLE IF NOT EXISTS schedule_entries (
    id BIGSERIAL PRIMARY KEY,
    ticket_id BIGINT NOT NULL REFERENCES tickets(id) ON DELETE CASCADE,
    start_at TIMESTAMPTZ NOT NULL,
    end_at TIMESTAMPTZ NOT NULL,
    CHECK (end_at > start_at),
    EXCLUDE USING gist (tstzrange(start_at, end_at, '[)') WITH &&)
);

CREATE INDEX IF NOT EXISTS schedule_entries_ticket_idx ON schedule_entries (ticket_id);

CREATE TABLE IF NOT EXISTS blackout_dates (
    id BIGSERIAL PRIMARY KEY,
    date DATE NOT NULL UNIQUE
);
"""

_UPDATABLE_COLUMNS = {
    "crew_size", "estimated_miles", "drive_minutes", "onsite_minutes",
    "fuel_cost_per_mile", "estimated_cost",
}

_ENTRY_SELECT = """
    SELECT s.id, s.ticket_id, s.start_at, s.end_at, t.donor_name, t.pickup_address
    FROM schedule_entries s
    JOIN tickets t ON t.id = s.ticket_id
"""


def ensure_schema(postgres: PostgresClient) -> None:
    """Create tables if they don't exist."""
    postgres.execute(SCHEMA)
    logger.info("Schema ensured")


class PostgresTicketStore:
    """TicketStore on PostgreSQL."""

    def __init__(self, postgres: PostgresClient):
        self.postgres = postgres

    def insert(self, data: TicketCreate, fuel_cost_per_mile: float, created_at: datetime) -> Ticket:
        row = self.postgres.execute_returning(
            """
            INSERT INTO tickets (
                donor_name, donor_email, donor_phone,
                pickup_address, city, state, zip,
                categories, condition, item_notes,
                preferred_date, preferred_time,
                bags_count, furniture_count, small_donation,
                crew_size, estimated_miles, drive_minutes, onsite_minutes,
                fuel_cost_per_mile, estimated_cost,
                images, status, created_at
            ) VALUES (
                %s, %s, %s,
                %s, %s, %s, %s,
                %s, %s, %s,
                %s, %s,
                %s, %s, %s,
                1, 0, 0, 0,
                %s, 0,
                %s, %s, %s
            )
            RETURNING *
            """,
            (
                data.donor_name, data.donor_email, data.donor_phone,
                data.pickup_address, data.city, data.state, data.zip,
                Json(data.categories), data.condition, data.item_notes,
                data.preferred_date, data.preferred_time,
                data.bags_count, data.furniture_count, data.small_donation,
                fuel_cost_per_mile,
                Json(data.images), TicketStatus.NEW, created_at,
            )
        )[0]

        return Ticket.model_validate(row)

    def get(self, ticket_id: int) -> Ticket | None:
        row = self.postgres.execute_single(
            "SELECT * FROM tickets WHERE id = %s",
            (ticket_id,)
        )

        if row is None:
            return None

        return Ticket.model_validate(row)

    def list_all(self) -> list[Ticket]:
        rows = self.postgres.execute(
            "SELECT * FROM tickets ORDER BY created_at DESC, id DESC"
        )
        return [Ticket.model_validate(row) for row in rows]

    def update_status(self, ticket_id: int, status: TicketStatus) -> Ticket | None:
        rows = self.postgres.execute_returning(
            "UPDATE tickets SET status = %s WHERE id = %s RETURNING *",
            (status, ticket_id)
        )
        return Ticket.model_validate(rows[0]) if rows else None

    def update_fields(self, ticket_id: int, **fields: Any) -> Ticket | None:
        unknown = set(fields) - _UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Cannot update ticket fields: {', '.join(sorted(unknown))}")

        if not fields:
            return self.get(ticket_id)

        set_parts = []
        params = []
        for field, value in fields.items():
            set_parts.append(f"{field} = %s")
            params.append(value)
        params.append(ticket_id)

        rows = self.postgres.execute_returning(
            f"""
            UPDATE tickets
            SET {', '.join(set_parts)}
            WHERE id = %s
            RETURNING *
            """,
            tuple(params)
        )
        return Ticket.model_validate(rows[0]) if rows else None

    def delete(self, ticket_id: int) -> bool:
        rows = self.postgres.execute_returning(
            "DELETE FROM tickets WHERE id = %s RETURNING id",
            (ticket_id,)
        )
        return bool(rows)


class PostgresScheduleStore:
    """
    ScheduleStore on PostgreSQL.

    Accepts either a PostgresClient or, inside `atomic()`, the transaction
    it opened; both expose the same query methods.
    """

    def __init__(self, postgres: PostgresClient | PostgresTransaction):
        self.postgres = postgres

    @contextmanager
    def atomic(self) -> Iterator["PostgresScheduleStore"]:
        if isinstance(self.postgres, PostgresTransaction):
            yield self
            return

        with self.postgres.transaction() as tx:
            tx.execute("SELECT pg_advisory_xact_lock(%s)", (SCHEDULE_LOCK_KEY,))
            yield PostgresScheduleStore(tx)

    def insert(self, ticket_id: int, start: datetime, end: datetime) -> ScheduleEntry:
        rows = self.postgres.execute_returning(
            """
            WITH ticket AS (
                UPDATE tickets SET status = %s WHERE id = %s
                RETURNING id
            )
            INSERT INTO schedule_entries (ticket_id, start_at, end_at)
            SELECT ticket.id, %s, %s FROM ticket
            RETURNING id
            """,
            (TicketStatus.SCHEDULED, ticket_id, start, end)
        )
        if not rows:
            raise ValueError(f"Ticket {ticket_id} not found")
        return self.get(rows[0]["id"])

    def get(self, entry_id: int) -> ScheduleEntry | None:
        row = self.postgres.execute_single(
            _ENTRY_SELECT + " WHERE s.id = %s",
            (entry_id,)
        )
        return ScheduleEntry.model_validate(row) if row else None

    def list_all(self) -> list[ScheduleEntry]:
        rows = self.postgres.execute(_ENTRY_SELECT + " ORDER BY s.start_at ASC, s.id ASC")
        return [ScheduleEntry.model_validate(row) for row in rows]

    def list_for_ticket(self, ticket_id: int) -> list[ScheduleEntry]:
        rows = self.postgres.execute(
            _ENTRY_SELECT + " WHERE s.ticket_id = %s ORDER BY s.start_at ASC",
            (ticket_id,)
        )
        return [ScheduleEntry.model_validate(row) for row in rows]

    def find_conflicts(
        self,
        start: datetime,
        end: datetime,
        exclude_id: int | None = None,
    ) -> list[ScheduleEntry]:
        query = _ENTRY_SELECT + " WHERE NOT (s.end_at <= %s OR s.start_at >= %s)"
        params: list[Any] = [start, end]
        if exclude_id is not None:
            query += " AND s.id <> %s"
            params.append(exclude_id)

        rows = self.postgres.execute(query + " ORDER BY s.start_at ASC", tuple(params))
        return [ScheduleEntry.model_validate(row) for row in rows]

    def update(self, entry_id: int, start: datetime, end: datetime) -> ScheduleEntry | None:
        rows = self.postgres.execute_returning(
            """
            UPDATE schedule_entries
            SET start_at = %s, end_at = %s
            WHERE id = %s
            RETURNING id
            """,
            (start, end, entry_id)
        )
        if not rows:
            return None
        return self.get(entry_id)


class PostgresBlackoutStore:
    """BlackoutStore on PostgreSQL."""

    def __init__(self, postgres: PostgresClient):
        self.postgres = postgres

    def add(self, day: date) -> BlackoutDate:
        row = self.postgres.execute_single(
            """
            INSERT INTO blackout_dates (date) VALUES (%s)
            ON CONFLICT (date) DO UPDATE SET date = EXCLUDED.date
            RETURNING id, date
            """,
            (day,)
        )
        return BlackoutDate.model_validate(row)

    def remove(self, blackout_id: int) -> bool:
        rows = self.postgres.execute_returning(
            "DELETE FROM blackout_dates WHERE id = %s RETURNING id",
            (blackout_id,)
        )
        return bool(rows)

    def list_all(self) -> list[BlackoutDate]:
        rows = self.postgres.execute("SELECT id, date FROM blackout_dates ORDER BY date ASC")
        return [BlackoutDate.model_validate(row) for row in rows]

    def contains(self, day: date) -> bool:
        found = self.postgres.execute_single(
            "SELECT id FROM blackout_dates WHERE date = %s",
            (day,)
        )
        return found is not None
