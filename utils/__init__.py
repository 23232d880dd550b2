"""Utility modules for cross-cutting concerns."""

from utils.timezone import (
    now_utc,
    get_zone,
    to_utc,
    to_local,
    local_date,
    local_time_of_day,
    localize,
    parse_iso,
    parse_iso_in_zone,
)
