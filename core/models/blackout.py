"""Blackout date domain model."""

import datetime

from pydantic import BaseModel


class BlackoutDate(BaseModel):
    """A calendar day fully closed to pickups."""

    id: int
    date: datetime.date

    model_config = {"from_attributes": True}
