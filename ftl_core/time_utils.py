"""
Date & Instant Coercion
=======================

Storage hands the engine calendar days as 'YYYY-MM-DD' strings and instants
as datetimes, ISO strings or epoch milliseconds. Everything is normalised to
`date` and timezone-aware UTC `datetime` here.
"""

from datetime import date, datetime, timedelta
from typing import Any, Optional
import logging

import pytz

from ftl_core.errors import FTLInputError

logger = logging.getLogger(__name__)


def parse_instant(value: Any) -> Optional[datetime]:
    """
    Return an aware UTC datetime, or None when the value is missing or
    unreadable. Naive datetimes are taken as UTC.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return pytz.utc.localize(value)
        return value.astimezone(pytz.utc)
    if isinstance(value, (int, float)):
        # Epoch milliseconds
        try:
            return datetime.fromtimestamp(value / 1000, tz=pytz.utc)
        except (OverflowError, OSError, ValueError):
            logger.debug(f"Out-of-range timestamp {value!r}")
            return None
    if isinstance(value, str):
        text = value.strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            return parse_instant(datetime.fromisoformat(text))
        except ValueError:
            logger.debug(f"Unreadable instant {value!r}")
            return None
    return None


def parse_date(value: Any) -> Optional[date]:
    """Return the calendar day of a log or qualification field, or None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            logger.debug(f"Unreadable date {value!r}")
            return None
    return None


def to_reference_date(value: Any, tz=pytz.utc) -> date:
    """
    Calendar day of a reference date or instant, in `tz`.

    Unlike log fields, a reference that cannot be read is a caller error.
    """
    day = None
    if isinstance(value, str) and len(value.strip()) == 10:
        day = parse_date(value)
    elif isinstance(value, date) and not isinstance(value, datetime):
        day = value
    else:
        instant = parse_instant(value)
        if instant is not None:
            day = instant.astimezone(tz).date()
    if day is None:
        raise FTLInputError(f"Invalid reference date: {value!r}")
    return day


def require_instant(value: Any, name: str) -> Optional[datetime]:
    """Coerce an optional instant argument; a present but unreadable value is an error."""
    if value is None:
        return None
    instant = parse_instant(value)
    if instant is None:
        raise FTLInputError(f"Invalid {name}: {value!r}")
    return instant


def hours_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 3600


def days_between(start: date, end: date) -> int:
    """Whole days from `start` to `end` (negative when `end` is earlier)."""
    return (end - start).days


def window_start(reference: date, window_days: int) -> date:
    """First day of a rolling window of `window_days` ending on `reference`."""
    return reference - timedelta(days=window_days - 1)
