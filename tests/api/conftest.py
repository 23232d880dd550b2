"""API test fixtures - TestClient over in-memory services."""

import pytest
from starlette.testclient import TestClient

from api.app import create_app


ADMIN_SECRET = "test-admin-secret"


# =============================================================================
# SERVICES DICT
# =============================================================================


@pytest.fixture
def services(ticket_service, scheduling_service, blackout_service):
    return {
        "ticket": ticket_service,
        "scheduling": scheduling_service,
        "blackout": blackout_service,
    }


# =============================================================================
# APP & CLIENT FIXTURES
# =============================================================================


@pytest.fixture
def app(services, config):
    """FastAPI app with admin guard, error handlers, and intake/data/actions routes."""
    return create_app(services, ADMIN_SECRET, config)


@pytest.fixture
def client(app):
    """Staff test client (admin bearer secret)."""
    c = TestClient(app, raise_server_exceptions=False)
    c.headers["Authorization"] = f"Bearer {ADMIN_SECRET}"
    return c


@pytest.fixture
def unauthed_client(app):
    """Test client without credentials."""
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def intake_payload():
    return {
        "donor_name": "Ada Lovelace",
        "donor_email": "ada@example.com",
        "donor_phone": "318-555-0100",
        "pickup_address": "100 Main St",
        "city": "Monroe",
        "state": "LA",
        "zip": "71201",
        "categories": ["Clothing", "Furniture"],
        "condition": "Good",
        "item_notes": "Couch and two bags",
        "preferred_date": "2024-06-03",
        "preferred_time": "Morning",
        "bags_count": 2,
        "furniture_count": 1,
        "small_donation": False,
    }
