from __future__ import annotations

import logging
import re
from datetime import date, datetime, time
from typing import Optional

logger = logging.getLogger(__name__)

_TIME_12H = re.compile(r"^(\d{1,2}):(\d{2})\s*(AM|PM)$", re.IGNORECASE)


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def parse_12h_time(value: object) -> Optional[time]:
    """Parse "9:30 AM" / "09:30 pm" into a time; None when malformed."""
    if not isinstance(value, str):
        return None
    match = _TIME_12H.match(value.strip())
    if not match:
        return None

    hours = int(match.group(1))
    minutes = int(match.group(2))
    if hours < 1 or hours > 12 or minutes > 59:
        return None

    period = match.group(3).upper()
    if period == "PM" and hours != 12:
        hours += 12
    elif period == "AM" and hours == 12:
        hours = 0
    return time(hour=hours, minute=minutes)


def time_on(value: str, base: datetime) -> datetime:
    """Place a 12-hour time-of-day on base's calendar date.

    A malformed string leaves base unmodified.
    """
    parsed = parse_12h_time(value)
    if parsed is None:
        logger.warning("[timing] invalid 12-hour time %r, keeping %s", value, base.isoformat())
        return base
    return base.replace(hour=parsed.hour, minute=parsed.minute, second=0, microsecond=0)


def format_12h(value: datetime | time) -> str:
    """Format as "9:05 AM" (no leading zero on the hour)."""
    hour = value.hour % 12 or 12
    period = "AM" if value.hour < 12 else "PM"
    return f"{hour}:{value.minute:02d} {period}"


def normalize_12h(value: object, fallback: str) -> str:
    parsed = parse_12h_time(value)
    if parsed is None:
        return fallback
    return format_12h(parsed)


def floor_minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes from start to end, floor-rounded, never negative."""
    seconds = (end - start).total_seconds()
    if seconds <= 0:
        return 0
    return int(seconds // 60)
