"""
Timezone utilities for the LocalCooks platform.

Locations carry an IANA timezone; "today" for checkout bookkeeping is
evaluated in the location's zone.
"""

from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, Optional

import pytz

from .constants import DEFAULT_LOCATION_TIMEZONE

if TYPE_CHECKING:
    from ..models.location import Location


def is_valid_timezone(name: Optional[str]) -> bool:
    return bool(name) and name in pytz.all_timezones_set


def get_location_timezone(location: Optional["Location"]) -> pytz.BaseTzInfo:
    """
    Get a location's timezone, falling back to the platform default.

    Args:
        location: Location row (may be None for orphaned bookings)

    Returns:
        pytz timezone object
    """
    name = getattr(location, "timezone", None) or DEFAULT_LOCATION_TIMEZONE
    if not is_valid_timezone(name):
        name = DEFAULT_LOCATION_TIMEZONE
    return pytz.timezone(name)


def get_location_today(location: Optional["Location"], now: Optional[datetime] = None) -> date:
    current = ensure_utc(now) if now else datetime.now(timezone.utc)
    return current.astimezone(get_location_timezone(location)).date()


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes (SQLite drops tzinfo on round-trip)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
