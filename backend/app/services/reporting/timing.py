"""
Timestamp and rounding helpers for report metrics.
"""
import math
from datetime import datetime, timezone
from typing import Optional

from app.services.reporting.types import Timestamp


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves away from zero for positive values (2.5 -> 3, not 2)."""
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def round_int(value: float) -> int:
    return int(round_half_up(value))


def parse_timestamp(value: Timestamp) -> Optional[datetime]:
    """
    Coerce a datetime or ISO-8601 string to an aware UTC datetime.

    Returns None for missing or unparseable values. Naive datetimes are
    taken to be UTC.
    """
    if value is None:
        return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            value = datetime.fromisoformat(text)
        except ValueError:
            return None
    if not isinstance(value, datetime):
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def minutes_between(start: Timestamp, end: Timestamp) -> Optional[float]:
    """Unrounded minutes from start to end, None if either is unusable."""
    start_dt = parse_timestamp(start)
    end_dt = parse_timestamp(end)
    if start_dt is None or end_dt is None:
        return None
    return (end_dt - start_dt).total_seconds() / 60


def time_spent_minutes(arrived_at: Timestamp, departed_at: Timestamp) -> int:
    """
    Whole minutes on site.

    0 when either timestamp is missing or malformed, or when departure
    precedes arrival.
    """
    minutes = minutes_between(arrived_at, departed_at)
    if minutes is None or minutes < 0:
        return 0
    return round_int(minutes)


def format_duration(minutes: float) -> str:
    """Human-readable duration, e.g. '45 min' or '2h 5m'."""
    if minutes < 1:
        return "< 1 min"
    if minutes < 60:
        return f"{round_int(minutes)} min"

    hours = int(minutes // 60)
    mins = round_int(minutes % 60)
    if mins == 60:
        hours, mins = hours + 1, 0
    if mins == 0:
        return f"{hours}h"
    return f"{hours}h {mins}m"


def format_clock(value: Timestamp) -> str:
    """HH:MM of a timestamp, empty string if unusable."""
    parsed = parse_timestamp(value)
    return parsed.strftime("%H:%M") if parsed else ""
