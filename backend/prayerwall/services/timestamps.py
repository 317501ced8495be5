"""
Prayer Wall Backend — Display Timestamp Formatter
===================================================

What:  Turns a stored creation instant into the string shown under a prayer.
When:  At read time, for every listed row. The same prayer therefore shows
       "Just now", then "5 minutes ago", then "3 hours ago" on later visits.

Policy (elapsed = now - stored, both projected into the display timezone):
    < 60 seconds   → "Just now"
    < 1 hour       → "N minute(s) ago"
    < 24 hours     → "N hour(s) ago"
    otherwise      → absolute: local date/time, e.g. "Oct 17, 2026 03:04 PM"
                     relative: "N day(s) ago"

The formatter never raises. Anything unexpected (unparseable value, unknown
timezone) is logged and rendered as "Unknown".
"""

import logging
import math
from datetime import datetime, timezone
from typing import Optional, Union
from zoneinfo import ZoneInfo

from prayerwall.config import settings

logger = logging.getLogger(__name__)

JUST_NOW = "Just now"
UNKNOWN = "Unknown"

ABSOLUTE_FORMAT = "%b %d, %Y %I:%M %p"

POLICY_ABSOLUTE = "absolute"
POLICY_RELATIVE = "relative"


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit if count == 1 else unit + 's'} ago"


def _as_aware(value: Union[datetime, str]) -> datetime:
    """Parses ISO strings; naive datetimes are taken as UTC."""
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if not isinstance(value, datetime):
        raise TypeError(f"Cannot format timestamp of type {type(value).__name__}")
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def format_timestamp(
    stored: Union[datetime, str, None],
    now: Optional[datetime] = None,
    policy: Optional[str] = None,
    tz: Optional[str] = None,
) -> str:
    """
    Format a stored instant for display.

    Args:
        stored: The row's timestamp (aware or naive-UTC datetime, or ISO string)
        now:    Reference instant; defaults to the current time
        policy: "absolute" or "relative"; defaults to settings.timestamp_policy
        tz:     IANA timezone name; defaults to settings.display_timezone

    Returns:
        The display string, or "Unknown" if the value cannot be formatted.
    """
    try:
        zone = ZoneInfo(tz or settings.display_timezone)
        policy = (policy or settings.timestamp_policy).lower()

        local_stored = _as_aware(stored).astimezone(zone)
        local_now = _as_aware(now or datetime.now(timezone.utc)).astimezone(zone)

        seconds = math.floor((local_now - local_stored).total_seconds())

        if seconds < 60:
            return JUST_NOW
        if seconds < 3600:
            return _plural(seconds // 60, "minute")
        if seconds < 86400:
            return _plural(seconds // 3600, "hour")

        if policy == POLICY_RELATIVE:
            return _plural(seconds // 86400, "day")
        return local_stored.strftime(ABSOLUTE_FORMAT)

    except Exception as e:
        logger.warning("Could not format timestamp %r: %s", stored, e)
        return UNKNOWN
