"""Builders shared across test modules."""

from datetime import datetime
from zoneinfo import ZoneInfo

from core.models import TicketCreate

CHICAGO = ZoneInfo("America/Chicago")


def chicago(year, month, day, hour, minute=0) -> datetime:
    """Aware datetime at wall-clock time in the operating zone."""
    return datetime(year, month, day, hour, minute, tzinfo=CHICAGO)


def make_ticket_create(**overrides) -> TicketCreate:
    """Complete intake payload with sensible defaults."""
    fields = {
        "donor_name": "Ada Lovelace",
        "donor_email": "ada@example.com",
        "donor_phone": "318-555-0100",
        "pickup_address": "100 Main St",
        "city": "Monroe",
        "state": "LA",
        "zip": "71201",
        "categories": ["Clothing", "Housewares"],
        "condition": "Good",
        "item_notes": "Boxes in the garage",
        "preferred_date": "2024-06-03",
        "preferred_time": "Morning",
        "bags_count": 3,
        "furniture_count": 0,
        "small_donation": False,
    }
    fields.update(overrides)
    return TicketCreate(**fields)
