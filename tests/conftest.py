"""Shared test fixtures for the pickup scheduling test suite."""

import os
from pathlib import Path

import pytest
from dotenv import load_dotenv

# Load .env file BEFORE any other imports that might use env vars
load_dotenv(Path(__file__).parent.parent / ".env")

from core.config import OperatingConfig
from core.event_bus import EventBus
from core.services.blackout_service import BlackoutService
from core.services.scheduling_service import SchedulingService
from core.services.ticket_service import TicketService
from core.stores.memory import InMemoryDatabase, MemoryBlackoutStore, MemoryScheduleStore, MemoryTicketStore

from tests.helpers import make_ticket_create


# =============================================================================
# CONFIG & STORE FIXTURES
# =============================================================================


@pytest.fixture
def config() -> OperatingConfig:
    """Defaults: America/Chicago, 09:30-17:00, $10/h, $0.20/mile."""
    return OperatingConfig(staff_email="staff@example.com")


@pytest.fixture
def memory_db():
    return InMemoryDatabase()


@pytest.fixture
def ticket_store(memory_db):
    return MemoryTicketStore(memory_db)


@pytest.fixture
def schedule_store(memory_db):
    return MemoryScheduleStore(memory_db)


@pytest.fixture
def blackout_store(memory_db):
    return MemoryBlackoutStore(memory_db)


@pytest.fixture
def event_bus():
    return EventBus()


# =============================================================================
# SERVICE FIXTURES
# =============================================================================


@pytest.fixture
def ticket_service(ticket_store, config, event_bus):
    return TicketService(ticket_store, config, event_bus=event_bus)


@pytest.fixture
def blackout_service(blackout_store, config):
    return BlackoutService(blackout_store, config)


@pytest.fixture
def scheduling_service(schedule_store, ticket_store, blackout_service, config, event_bus):
    return SchedulingService(schedule_store, ticket_store, blackout_service, config, event_bus=event_bus)


@pytest.fixture
def sample_ticket(ticket_service):
    return ticket_service.create(make_ticket_create())


# =============================================================================
# DATABASE FIXTURES
# =============================================================================


@pytest.fixture(scope="session")
def db():
    """Session-scoped PostgresClient. Skips when TEST_DATABASE_URL is unset."""
    url = os.getenv("TEST_DATABASE_URL")
    if not url:
        pytest.skip("TEST_DATABASE_URL not set")

    from clients.postgres_client import PostgresClient
    from core.stores.postgres import ensure_schema

    client = PostgresClient(url)
    ensure_schema(client)
    yield client
    client.close()


@pytest.fixture
def clean_db(db):
    """Empty all tables before a test."""
    db.execute("TRUNCATE tickets, schedule_entries, blackout_dates RESTART IDENTITY CASCADE")
    yield db
