"""Recurrence rules and the once-per-day execution guard"""

from typing import Iterable, Optional

from canteen_gateway.domain.exceptions import InvalidScheduleError

VALID_DAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri")
VALID_FREQUENCIES = ("daily", "weekdays", "custom")


def fires_today(frequency: str, custom_days: Optional[Iterable[str]], weekday: str) -> bool:
    """
    Decide whether a recurrence rule fires on the given weekday.

    - daily: every day
    - weekdays: Mon..Fri
    - custom: only the listed days
    Unknown rules never fire.
    """
    if frequency == "daily":
        return True
    if frequency == "weekdays":
        return weekday in WEEKDAYS
    if frequency == "custom" and isinstance(custom_days, (list, tuple, set, frozenset)):
        return weekday in custom_days
    return False


def already_ran_today(last_executed_date: Optional[str], today: str) -> bool:
    """True when the stored YYYY-MM-DD stamp equals today's local date"""
    return last_executed_date is not None and last_executed_date == today


def validate_schedule(frequency: str, custom_days: Optional[Iterable[str]]) -> None:
    """
    Reject recurrence rules that could never be evaluated correctly.

    Raises:
        InvalidScheduleError: unknown frequency, or custom without a valid day set
    """
    if frequency not in VALID_FREQUENCIES:
        raise InvalidScheduleError(f"Invalid frequency: {frequency}")

    if frequency == "custom":
        days = list(custom_days or [])
        if not days:
            raise InvalidScheduleError("Custom days required for custom frequency")
        invalid = [d for d in days if d not in VALID_DAYS]
        if invalid:
            raise InvalidScheduleError(f"Invalid day in custom_days: {', '.join(invalid)}")
