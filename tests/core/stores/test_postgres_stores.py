"""Tests for the PostgreSQL store backend. Require TEST_DATABASE_URL."""

import threading
from datetime import date

import psycopg2
import pytest

from core.models import TicketStatus
from core.stores.postgres import PostgresBlackoutStore, PostgresScheduleStore, PostgresTicketStore
from utils.timezone import now_utc

from tests.helpers import chicago, make_ticket_create


@pytest.fixture
def tickets(clean_db):
    return PostgresTicketStore(clean_db)


@pytest.fixture
def schedule(clean_db):
    return PostgresScheduleStore(clean_db)


@pytest.fixture
def blackouts(clean_db):
    return PostgresBlackoutStore(clean_db)


@pytest.fixture
def ticket(tickets):
    return tickets.insert(make_ticket_create(images=["uploads/a.jpg"]), fuel_cost_per_mile=0.2, created_at=now_utc())


class TestPostgresTicketStore:

    def test_insert_round_trips_sequences(self, tickets, ticket):
        fetched = tickets.get(ticket.id)

        assert fetched.categories == ["Clothing", "Housewares"]
        assert fetched.images == ["uploads/a.jpg"]
        assert fetched.status == TicketStatus.NEW
        assert fetched.crew_size == 1

    def test_update_fields(self, tickets, ticket):
        updated = tickets.update_fields(ticket.id, crew_size=2, estimated_cost=24.0)

        assert updated.crew_size == 2
        assert updated.estimated_cost == 24.0

    def test_update_fields_rejects_unknown_columns(self, tickets, ticket):
        with pytest.raises(ValueError):
            tickets.update_fields(ticket.id, status="completed")

    def test_delete_cascades_to_schedule(self, tickets, schedule, ticket):
        schedule.insert(ticket.id, chicago(2024, 6, 3, 10), chicago(2024, 6, 3, 11))

        assert tickets.delete(ticket.id) is True
        assert schedule.list_all() == []


class TestPostgresScheduleStore:

    def test_insert_inside_atomic(self, tickets, schedule, ticket):
        with schedule.atomic() as tx_schedule:
            assert tx_schedule.find_conflicts(chicago(2024, 6, 3, 10), chicago(2024, 6, 3, 11)) == []
            entry = tx_schedule.insert(ticket.id, chicago(2024, 6, 3, 10), chicago(2024, 6, 3, 11))

        assert schedule.get(entry.id).donor_name == ticket.donor_name
        assert tickets.get(ticket.id).status == TicketStatus.SCHEDULED

    def test_insert_unknown_ticket(self, schedule):
        with pytest.raises(ValueError, match="not found"):
            schedule.insert(404, chicago(2024, 6, 3, 10), chicago(2024, 6, 3, 11))

    def test_exception_inside_atomic_rolls_back(self, schedule, ticket):
        with pytest.raises(RuntimeError):
            with schedule.atomic() as tx_schedule:
                tx_schedule.insert(ticket.id, chicago(2024, 6, 3, 10), chicago(2024, 6, 3, 11))
                raise RuntimeError("abort")

        assert schedule.list_all() == []

    def test_exclusion_constraint_blocks_overlap(self, tickets, schedule, ticket):
        other = tickets.insert(make_ticket_create(), 0.2, now_utc())
        schedule.insert(ticket.id, chicago(2024, 6, 3, 10), chicago(2024, 6, 3, 11))

        with pytest.raises(psycopg2.Error):
            schedule.insert(other.id, chicago(2024, 6, 3, 10, 30), chicago(2024, 6, 3, 11, 30))

    def test_find_conflicts_excludes_self(self, schedule, ticket):
        entry = schedule.insert(ticket.id, chicago(2024, 6, 3, 10), chicago(2024, 6, 3, 11))

        assert schedule.find_conflicts(chicago(2024, 6, 3, 11), chicago(2024, 6, 3, 12)) == []
        assert schedule.find_conflicts(
            chicago(2024, 6, 3, 10), chicago(2024, 6, 3, 11), exclude_id=entry.id
        ) == []

    def test_update(self, schedule, ticket):
        entry = schedule.insert(ticket.id, chicago(2024, 6, 3, 10), chicago(2024, 6, 3, 11))

        moved = schedule.update(entry.id, chicago(2024, 6, 3, 13), chicago(2024, 6, 3, 14))

        assert moved.start_at == chicago(2024, 6, 3, 13)


class TestPostgresBlackoutStore:

    def test_add_is_idempotent(self, blackouts):
        first = blackouts.add(date(2024, 12, 25))
        second = blackouts.add(date(2024, 12, 25))

        assert first.id == second.id
        assert len(blackouts.list_all()) == 1

    def test_concurrent_adds_of_same_date_return_one_row(self, blackouts):
        results = []
        errors = []
        barrier = threading.Barrier(6)

        def attempt():
            barrier.wait()
            try:
                results.append(blackouts.add(date(2024, 12, 25)))
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=attempt) for _ in range(6)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert len(results) == 6
        assert len({b.id for b in results}) == 1
        assert len(blackouts.list_all()) == 1

    def test_remove_and_contains(self, blackouts):
        blackout = blackouts.add(date(2024, 12, 25))

        assert blackouts.contains(date(2024, 12, 25)) is True
        assert blackouts.remove(blackout.id) is True
        assert blackouts.contains(date(2024, 12, 25)) is False
