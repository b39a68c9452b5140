"""Calendar-day helpers shared by attendance and activity write/read paths."""

from datetime import date, datetime
from functools import lru_cache
from typing import Any, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.core.config import settings
from app.core.exceptions import InvalidDateError


@lru_cache(maxsize=None)
def service_zone(name: Optional[str] = None) -> ZoneInfo:
    tz_name = name or settings.service_timezone
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown SERVICE_TIMEZONE: {tz_name}") from e


def today(tz: Optional[ZoneInfo] = None) -> date:
    """Current calendar day in the service timezone."""
    return datetime.now(tz or service_zone()).date()


def parse_calendar_day(value: Any, tz: Optional[ZoneInfo] = None) -> date:
    """
    Normalize a date-like value to its calendar day.

    Naive datetimes are read as service-local time; aware datetimes are
    converted into the service timezone first. Time-of-day is discarded.
    """
    tz = tz or service_zone()
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        return value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise InvalidDateError("Date is required")
        if len(text) == 10:
            try:
                return date.fromisoformat(text)
            except ValueError:
                raise InvalidDateError(f"Invalid date: {value}")
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            raise InvalidDateError(f"Invalid date: {value}")
    else:
        raise InvalidDateError(f"Invalid date: {value!r}")

    if dt.tzinfo is not None:
        dt = dt.astimezone(tz)
    return dt.date()
