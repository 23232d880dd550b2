"""Schedule entry (booked pickup window) domain models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel


class ScheduleEntry(BaseModel):
    """A booked time interval for one ticket. Half-open: [start_at, end_at)."""

    id: int
    ticket_id: int
    start_at: datetime
    end_at: datetime
    # Display-only, read through a join on tickets
    donor_name: str | None = None
    pickup_address: str | None = None

    model_config = {"from_attributes": True}

    def overlaps(self, start: datetime, end: datetime) -> bool:
        """Whether [start, end) intersects this entry. Touching boundaries do not."""
        return not (self.end_at <= start or self.start_at >= end)


class BookingRejection(str, Enum):
    """Why a booking or move was not performed."""

    BUSINESS_HOURS_VIOLATION = "BUSINESS_HOURS_VIOLATION"
    SCHEDULING_CONFLICT = "SCHEDULING_CONFLICT"


class BookingResult(BaseModel):
    """
    Outcome of a booking or move.

    Rejections are normal results, not exceptions: `success` is False and
    `error` and `message` say why.
    """

    success: bool
    entry: ScheduleEntry | None = None
    error: BookingRejection | None = None
    message: str | None = None
    conflicts: list[ScheduleEntry] = []

    @classmethod
    def booked(cls, entry: ScheduleEntry) -> "BookingResult":
        return cls(success=True, entry=entry)

    @classmethod
    def rejected(
        cls,
        error: BookingRejection,
        message: str,
        conflicts: list[ScheduleEntry] | None = None,
    ) -> "BookingResult":
        return cls(success=False, error=error, message=message, conflicts=conflicts or [])
