"""Fixed-offset local time helpers for auto-order scheduling"""

import re
from datetime import datetime, timedelta, timezone
from typing import Optional

from canteen_gateway.config import settings
from canteen_gateway.domain.models import LocalTime
from canteen_gateway.domain.recurrence import VALID_DAYS

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def local_timezone(offset_minutes: Optional[int] = None) -> timezone:
    """Fixed UTC offset used for all schedule matching (no DST, no tz database)"""
    if offset_minutes is None:
        offset_minutes = settings.local_utc_offset_minutes
    return timezone(timedelta(minutes=offset_minutes))


def resolve_local_time(instant: datetime, offset_minutes: Optional[int] = None) -> LocalTime:
    """
    Convert an absolute instant to local wall-clock fields.

    Naive datetimes are treated as UTC. Seconds are dropped; matching is
    done at minute granularity.

    Example:
        2024-01-01T02:30:45Z -> LocalTime(time="08:00", weekday="Mon", calendar_date="2024-01-01")
    """
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)

    local = instant.astimezone(local_timezone(offset_minutes))
    return LocalTime(
        time=local.strftime("%H:%M"),
        weekday=VALID_DAYS[local.weekday()],  # Mon=0
        calendar_date=local.date().isoformat(),
    )


def seconds_until_next_minute(instant: datetime, offset_minutes: Optional[int] = None) -> float:
    """Seconds from instant to the next whole minute on the local clock"""
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)

    local = instant.astimezone(local_timezone(offset_minutes))
    next_minute = local.replace(second=0, microsecond=0) + timedelta(minutes=1)
    return (next_minute - local).total_seconds()


def is_valid_time(value: str) -> bool:
    """True for 24-hour HH:MM strings"""
    return bool(TIME_PATTERN.match(value or ""))
