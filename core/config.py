"""Operating configuration for pickup scheduling and cost estimation."""

import os
from datetime import time

from pydantic import BaseModel, Field, field_validator

from utils.timezone import get_zone


class OperatingConfig(BaseModel):
    """
    Operating parameters for the pickup crew.

    Business hours are wall-clock times in `timezone`. Rates are in
    dollars; distances in miles.
    """

    # Business hours
    timezone: str = Field(
        default="America/Chicago",
        description="Operating zone for business hours and blackout dates",
    )
    open_time: time = Field(
        default=time(9, 30),
        description="Earliest allowed pickup start (local time)",
    )
    close_time: time = Field(
        default=time(17, 0),
        description="Latest allowed pickup end (local time)",
    )
    default_duration_hours: float = Field(
        default=1.0,
        description="Pickup length used when only a start time is given",
        gt=0,
        le=8,
    )

    # Cost estimation
    hourly_rate: float = Field(
        default=10.0,
        description="Hourly labor rate per crew member",
        ge=0,
    )
    fuel_cost_per_mile: float = Field(
        default=0.2,
        description="Default fuel cost per mile for new tickets",
        ge=0,
    )
    depot_address: str = Field(
        default="10010 US-165, Sterlington, LA 71280",
        description="Trip origin for distance lookups",
    )
    distance_timeout_seconds: int = Field(
        default=10,
        description="Timeout for the distance lookup HTTP call",
        ge=1,
        le=60,
    )

    # Notifications
    staff_email: str | None = Field(
        default=None,
        description="Where new-request alerts go; alerts are skipped when unset",
    )
    app_name: str = Field(
        default="Thrift Pickups",
        description="Application name for emails",
    )

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        get_zone(value)
        return value


def load_operating_config() -> OperatingConfig:
    """
    Build config from environment variables, falling back to defaults.

    Recognized: OPERATING_TZ, EMPLOYEE_HOURLY, FUEL_COST_PER_MILE,
    DEPOT_ADDRESS, STAFF_EMAIL.
    """
    overrides = {
        "timezone": os.getenv("OPERATING_TZ"),
        "hourly_rate": os.getenv("EMPLOYEE_HOURLY"),
        "fuel_cost_per_mile": os.getenv("FUEL_COST_PER_MILE"),
        "depot_address": os.getenv("DEPOT_ADDRESS"),
        "staff_email": os.getenv("STAFF_EMAIL"),
    }
    return OperatingConfig(**{k: v for k, v in overrides.items() if v})
