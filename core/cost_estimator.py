"""
Trip cost estimation.

labor = ((drive_minutes + onsite_minutes) / 60) * hourly_rate * crew_size
fuel  = miles * fuel_cost_per_mile
total = labor + fuel, rounded to cents on its exact binary value

Inputs are never rejected: negative or missing values count as zero.
"""

import math
from decimal import Decimal, ROUND_HALF_UP

from pydantic import BaseModel

_CENTS = Decimal("0.01")


class CostEstimate(BaseModel):
    """Result of a cost estimate. Only `total` is rounded."""

    labor_cost: float
    fuel_cost: float
    total: float


def _non_negative(value: float | int | None) -> float:
    if value is None:
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


def round_currency(amount: float) -> float:
    """Round to 2 decimals on the exact float value (2.675 -> 2.67, 0.125 -> 0.13)."""
    return float(Decimal(amount).quantize(_CENTS, rounding=ROUND_HALF_UP))


def estimate_cost(
    drive_minutes: float | None,
    onsite_minutes: float | None,
    hourly_rate: float | None,
    crew_size: int | None,
    fuel_cost_per_mile: float | None,
    miles: float | None,
) -> CostEstimate:
    """
    Estimate the operational cost of a pickup trip.

    Args:
        drive_minutes: Round-trip drive time
        onsite_minutes: Time spent loading at the pickup location
        hourly_rate: Labor rate per crew member per hour
        crew_size: Number of crew members
        fuel_cost_per_mile: Fuel cost rate
        miles: Round-trip distance

    Returns:
        CostEstimate with labor, fuel and rounded total
    """
    drive = _non_negative(drive_minutes)
    onsite = _non_negative(onsite_minutes)
    hourly = _non_negative(hourly_rate)
    crew = _non_negative(crew_size)
    fuel_rate = _non_negative(fuel_cost_per_mile)
    distance = _non_negative(miles)

    labor = ((drive + onsite) / 60.0) * hourly * crew
    fuel = distance * fuel_rate

    return CostEstimate(
        labor_cost=labor,
        fuel_cost=fuel,
        total=round_currency(labor + fuel),
    )
