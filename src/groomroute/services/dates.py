"""Date/time helpers for the boundary formats (YYYY-MM-DD, HH:MM) and account timezones.

Every day boundary is computed in an explicit account timezone; nothing here
reads the process-local timezone.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..config import settings
from ..errors import InvalidRequestError

logger = logging.getLogger(__name__)

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
DAY_NAMES_SHORT = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


def get_timezone(name: Optional[str]) -> ZoneInfo:
    """Resolve an IANA name, falling back to the configured default."""
    if name:
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning(f"Unknown timezone '{name}', using {settings.default_timezone}")
    return ZoneInfo(settings.default_timezone)


def parse_date(value: Optional[str], *, field: str = "date") -> date:
    if not value or not _DATE_RE.match(value):
        raise InvalidRequestError(f"Invalid {field} format. Use YYYY-MM-DD")
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise InvalidRequestError(f"Invalid {field}: {value}") from exc


def parse_time(value: Optional[str], *, field: str = "time") -> int:
    """Parse ``HH:MM`` (24-hour) into minutes since midnight."""
    match = _TIME_RE.match(value or "")
    if not match:
        raise InvalidRequestError(f"Invalid {field} format. Use HH:MM")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise InvalidRequestError(f"Invalid {field}: {value}")
    return hours * 60 + minutes


def minutes_to_hhmm(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def format_minutes_12h(minutes: int) -> str:
    hours, mins = divmod(minutes, 60)
    period = "PM" if hours % 24 >= 12 else "AM"
    hour12 = hours % 12 or 12
    return f"{hour12}:{mins:02d} {period}"


def format_time_12h(moment: datetime, tz: ZoneInfo) -> str:
    local = moment.astimezone(tz)
    return format_minutes_12h(local.hour * 60 + local.minute)


def local_datetime(day: date, minutes: int, tz: ZoneInfo) -> datetime:
    """Wall-clock ``minutes`` after midnight of ``day`` in ``tz``, as an aware datetime."""
    if minutes >= 24 * 60:
        return datetime(day.year, day.month, day.day, tzinfo=tz) + timedelta(minutes=minutes)
    hours, mins = divmod(minutes, 60)
    return datetime(day.year, day.month, day.day, hours, mins, tzinfo=tz)


def day_bounds(day: date, tz: ZoneInfo) -> tuple[datetime, datetime]:
    """Half-open [start, end) of ``day`` in ``tz``, expressed in UTC."""
    start = datetime(day.year, day.month, day.day, tzinfo=tz)
    following = day + timedelta(days=1)
    end = datetime(following.year, following.month, following.day, tzinfo=tz)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def today_in(tz: ZoneInfo, now: Optional[datetime] = None) -> date:
    return (now or utc_now()).astimezone(tz).date()


def minutes_since_midnight(moment: datetime, tz: ZoneInfo) -> int:
    local = moment.astimezone(tz)
    return local.hour * 60 + local.minute


def day_of_week(day: date) -> int:
    """Weekday index with Sunday = 0."""
    return (day.weekday() + 1) % 7


def weekday_name(day: date) -> str:
    """Upper-case weekday name as stored in waitlist preferences, e.g. ``MONDAY``."""
    return DAY_NAMES[day_of_week(day)].upper()


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO timestamp from storage; naive values are taken as UTC."""
    if not value:
        return None
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
