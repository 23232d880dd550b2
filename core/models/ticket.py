"""Donation pickup ticket domain models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class TicketStatus(str, Enum):
    """Ticket lifecycle status."""

    NEW = "new"
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELED = "canceled"

    @classmethod
    def parse(cls, value: "TicketStatus | str") -> "TicketStatus":
        """
        Parse a status value, case-insensitive.

        Raises:
            ValueError: If value is not one of the known statuses
        """
        if isinstance(value, cls):
            return value
        normalized = str(value or "").strip().lower()
        for status in cls:
            if status.value == normalized:
                return status
        valid = ", ".join(s.value for s in cls)
        raise ValueError(f"Invalid status '{value}'. Valid statuses: {valid}")


class TicketCreate(BaseModel):
    """Donor-submitted pickup request. All contact and location fields are required."""

    model_config = {"str_strip_whitespace": True}

    donor_name: str = Field(..., min_length=1)
    donor_email: str = Field(..., min_length=1)
    donor_phone: str = Field(..., min_length=1)
    pickup_address: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    zip: str = Field(..., min_length=1)
    categories: list[str] = Field(..., min_length=1)
    condition: str | None = None
    item_notes: str = Field(..., min_length=1)
    preferred_date: str = Field(..., min_length=1)
    preferred_time: str = Field(..., min_length=1)
    bags_count: int = Field(0, ge=0)
    furniture_count: int = Field(0, ge=0)
    small_donation: bool = False
    images: list[str] = Field(default_factory=list)


class TicketTimesUpdate(BaseModel):
    """Staff triage inputs. Omitted fields keep the ticket's current values."""

    drive_minutes: float | None = None
    onsite_minutes: float | None = None
    crew_size: int | None = Field(None, ge=1)
    fuel_cost_per_mile: float | None = None


class Ticket(BaseModel):
    """Full ticket entity as stored."""

    id: int
    donor_name: str
    donor_email: str
    donor_phone: str
    pickup_address: str
    city: str
    state: str
    zip: str
    categories: list[str]
    condition: str | None
    item_notes: str | None
    preferred_date: str | None
    preferred_time: str | None
    bags_count: int
    furniture_count: int
    small_donation: bool
    crew_size: int
    estimated_miles: float
    drive_minutes: float
    onsite_minutes: float
    fuel_cost_per_mile: float
    estimated_cost: float
    images: list[str]
    status: TicketStatus
    created_at: datetime

    model_config = {"from_attributes": True}

    @property
    def destination(self) -> str:
        """Pickup location as a single line for distance lookups."""
        parts = [self.pickup_address, self.city, self.state, self.zip]
        return ", ".join(p for p in parts if p)
