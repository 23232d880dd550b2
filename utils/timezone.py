"""UTC-everywhere time handling, with one fixed operating zone for business rules."""

from datetime import date, datetime, time, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def now_utc() -> datetime:
    """
    Current time in UTC.

    Use this instead of datetime.now() everywhere.
    """
    return datetime.now(timezone.utc)


def get_zone(tz_name: str) -> ZoneInfo:
    """
    Resolve an IANA timezone name.

    Raises:
        ValueError: If the timezone name is unknown
    """
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"Unknown timezone: {tz_name}")


def to_utc(dt: datetime) -> datetime:
    """
    Convert a datetime to UTC.

    Raises ValueError if datetime is naive (no timezone).
    """
    if dt.tzinfo is None:
        raise ValueError(
            "Cannot convert naive datetime to UTC. Datetime must be timezone-aware."
        )
    return dt.astimezone(timezone.utc)


def to_local(dt: datetime, tz_name: str) -> datetime:
    """
    Convert an aware datetime to a local civil zone.

    Used for display and for business-hours evaluation in the operating
    zone. Stored values stay in UTC.

    Args:
        dt: Aware datetime
        tz_name: IANA timezone name (e.g., "America/Chicago")

    Raises:
        ValueError: If datetime is naive or timezone name is invalid
    """
    if dt.tzinfo is None:
        raise ValueError(
            "Cannot convert naive datetime. Datetime must be timezone-aware."
        )

    return dt.astimezone(get_zone(tz_name))


def local_date(dt: datetime, tz_name: str) -> date:
    """Civil date of an aware instant in the given zone."""
    return to_local(dt, tz_name).date()


def local_time_of_day(dt: datetime, tz_name: str) -> time:
    """Wall-clock time of an aware instant in the given zone (seconds dropped)."""
    local = to_local(dt, tz_name)
    return time(local.hour, local.minute)


def parse_iso(iso_string: str) -> datetime:
    """
    Parse ISO 8601 datetime string to UTC datetime.

    Raises ValueError if string has no timezone info.
    """
    dt = datetime.fromisoformat(iso_string)
    if dt.tzinfo is None:
        raise ValueError(
            "Cannot parse naive datetime string. "
            "Include timezone offset (e.g., 'Z' or '+00:00')."
        )
    return to_utc(dt)


def localize(dt: datetime, tz_name: str) -> datetime:
    """
    Attach the given zone to a naive datetime.

    Aware datetimes are returned unchanged. Used at input boundaries where
    staff enter wall-clock times in the operating zone.
    """
    if dt.tzinfo is not None:
        return dt
    return dt.replace(tzinfo=get_zone(tz_name))


def parse_iso_in_zone(iso_string: str, tz_name: str) -> datetime:
    """
    Parse an ISO 8601 string, reading naive values as wall-clock time in tz_name.

    Returns a UTC datetime.
    """
    return to_utc(localize(datetime.fromisoformat(iso_string), tz_name))
