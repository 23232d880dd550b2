"""
Blackout registry: calendar days closed to pickups.

Dates are civil dates in the operating zone. Instants are converted to
that zone before their date is taken, so 2024-06-04T02:00Z counts as
June 3 in America/Chicago.
"""

import logging
from datetime import date, datetime

from core.config import OperatingConfig
from core.models import BlackoutDate
from core.stores.base import BlackoutStore
from utils.timezone import local_date, localize

logger = logging.getLogger(__name__)


class BlackoutService:
    """Service for blackout date operations."""

    def __init__(self, blackouts: BlackoutStore, config: OperatingConfig):
        self.blackouts = blackouts
        self.config = config

    def _civil_date(self, value: date | datetime | str) -> date:
        if isinstance(value, str):
            try:
                return date.fromisoformat(value.strip())
            except ValueError:
                raise ValueError(f"Invalid date '{value}'. Use YYYY-MM-DD.")
        if isinstance(value, datetime):
            return local_date(localize(value, self.config.timezone), self.config.timezone)
        return value

    def add(self, day: date | datetime | str) -> BlackoutDate:
        """
        Close a day. Adding a date that is already closed is a no-op.

        Returns:
            The registry entry for that date (new or existing)
        """
        blackout = self.blackouts.add(self._civil_date(day))
        logger.info(f"Blackout date {blackout.date.isoformat()} registered (id={blackout.id})")
        return blackout

    def remove(self, blackout_id: int) -> bool:
        """
        Reopen a day.

        Returns:
            True if removed, False if not found
        """
        removed = self.blackouts.remove(blackout_id)
        if removed:
            logger.info(f"Blackout {blackout_id} removed")
        return removed

    def list_all(self) -> list[BlackoutDate]:
        """All blackout dates, ascending."""
        return self.blackouts.list_all()

    def is_blackout(self, value: date | datetime | str) -> bool:
        """Whether the civil date of value is closed. Time of day is ignored."""
        return self.blackouts.contains(self._civil_date(value))
