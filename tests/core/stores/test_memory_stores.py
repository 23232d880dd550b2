"""Tests for the in-memory store backend."""

from datetime import date

import pytest

from core.models import TicketStatus
from core.stores.memory import create_memory_stores
from utils.timezone import now_utc

from tests.helpers import chicago, make_ticket_create


@pytest.fixture
def stores():
    return create_memory_stores()


@pytest.fixture
def ticket(stores):
    tickets, _, _ = stores
    return tickets.insert(make_ticket_create(), fuel_cost_per_mile=0.2, created_at=now_utc())


class TestMemoryTicketStore:

    def test_insert_and_get(self, stores, ticket):
        tickets, _, _ = stores

        fetched = tickets.get(ticket.id)

        assert fetched == ticket
        assert fetched.categories == ["Clothing", "Housewares"]

    def test_get_missing(self, stores):
        tickets, _, _ = stores

        assert tickets.get(1) is None

    def test_update_fields_rejects_unknown_columns(self, stores, ticket):
        tickets, _, _ = stores

        with pytest.raises(ValueError, match="donor_name"):
            tickets.update_fields(ticket.id, donor_name="Someone Else")

    def test_update_status_missing(self, stores):
        tickets, _, _ = stores

        assert tickets.update_status(5, TicketStatus.COMPLETED) is None

    def test_returned_models_are_snapshots(self, stores, ticket):
        tickets, _, _ = stores

        tickets.update_fields(ticket.id, crew_size=3)

        assert ticket.crew_size == 1
        assert tickets.get(ticket.id).crew_size == 3


class TestMemoryScheduleStore:

    def test_insert_marks_ticket_scheduled(self, stores, ticket):
        tickets, schedule, _ = stores

        entry = schedule.insert(ticket.id, chicago(2024, 6, 3, 10), chicago(2024, 6, 3, 11))

        assert entry.donor_name == ticket.donor_name
        assert entry.pickup_address == ticket.pickup_address
        assert tickets.get(ticket.id).status == TicketStatus.SCHEDULED

    def test_insert_unknown_ticket(self, stores):
        _, schedule, _ = stores

        with pytest.raises(ValueError, match="not found"):
            schedule.insert(9, chicago(2024, 6, 3, 10), chicago(2024, 6, 3, 11))

    def test_find_conflicts_half_open(self, stores, ticket):
        _, schedule, _ = stores
        entry = schedule.insert(ticket.id, chicago(2024, 6, 3, 10), chicago(2024, 6, 3, 11))

        assert schedule.find_conflicts(chicago(2024, 6, 3, 11), chicago(2024, 6, 3, 12)) == []
        assert schedule.find_conflicts(chicago(2024, 6, 3, 9), chicago(2024, 6, 3, 10)) == []
        assert [e.id for e in schedule.find_conflicts(chicago(2024, 6, 3, 10, 59), chicago(2024, 6, 3, 12))] == [entry.id]
        assert schedule.find_conflicts(
            chicago(2024, 6, 3, 10), chicago(2024, 6, 3, 11), exclude_id=entry.id
        ) == []

    def test_list_ordered_by_start(self, stores):
        tickets, schedule, _ = stores
        late = tickets.insert(make_ticket_create(), 0.2, now_utc())
        early = tickets.insert(make_ticket_create(), 0.2, now_utc())
        schedule.insert(late.id, chicago(2024, 6, 3, 14), chicago(2024, 6, 3, 15))
        schedule.insert(early.id, chicago(2024, 6, 3, 10), chicago(2024, 6, 3, 11))

        assert [e.ticket_id for e in schedule.list_all()] == [early.id, late.id]

    def test_update_missing(self, stores):
        _, schedule, _ = stores

        assert schedule.update(3, chicago(2024, 6, 3, 10), chicago(2024, 6, 3, 11)) is None

    def test_ticket_delete_cascades(self, stores, ticket):
        tickets, schedule, _ = stores
        schedule.insert(ticket.id, chicago(2024, 6, 3, 10), chicago(2024, 6, 3, 11))

        tickets.delete(ticket.id)

        assert schedule.list_for_ticket(ticket.id) == []


class TestMemoryBlackoutStore:

    def test_add_twice_keeps_one(self, stores):
        _, _, blackouts = stores
        first = blackouts.add(date(2024, 7, 4))
        second = blackouts.add(date(2024, 7, 4))

        assert first == second
        assert len(blackouts.list_all()) == 1
        assert blackouts.contains(date(2024, 7, 4)) is True
