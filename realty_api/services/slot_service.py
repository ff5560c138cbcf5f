"""Slot calculator - pure time-of-day arithmetic for appointment slots.

Appointments occupy a fixed one-hour slot on a calendar day. Times of day
travel as zero-padded "HH:MM" strings so that lexical and chronological
order agree.
"""

import re
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import NamedTuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from realty_api.core.config import settings
from realty_api.core.constants import (
    APPOINTMENT_DURATION_MINUTES,
    BOOKING_LEAD_TIME_HOURS,
    MINUTES_PER_DAY,
    TIME_PATTERN,
)
from realty_api.services.booking_errors import (
    InsufficientLeadTimeError,
    InvalidTimeFormatError,
)

_TIME_RE = re.compile(TIME_PATTERN)


class TimeSlot(NamedTuple):
    """A [start, end) slot on one calendar day."""
    date: date
    start_time: str
    end_time: str


def _get_timezone(name: str | None) -> tzinfo:
    """Get a timezone with UTC fallback."""
    if not name or name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return timezone.utc


def normalize_time(value: str) -> str:
    """Validate an "H:MM"/"HH:MM" string and return it zero-padded."""
    if not isinstance(value, str) or not _TIME_RE.match(value):
        raise InvalidTimeFormatError("Invalid time format. Use HH:MM")
    hours, minutes = value.split(":")
    return f"{int(hours):02d}:{int(minutes):02d}"


def to_minutes(value: str) -> int:
    """Minutes since midnight for an "HH:MM" string."""
    hours, minutes = normalize_time(value).split(":")
    return int(hours) * 60 + int(minutes)


def from_minutes(total: int) -> str:
    """Format minutes since midnight as "HH:MM", wrapping at 24h."""
    total %= MINUTES_PER_DAY
    return f"{total // 60:02d}:{total % 60:02d}"


def derive_end_time(start_time: str) -> str:
    """End of the slot that starts at start_time (wraps past midnight)."""
    return from_minutes(to_minutes(start_time) + APPOINTMENT_DURATION_MINUTES)


def build_slot(slot_date: date, start_time: str) -> TimeSlot:
    """
    Build the slot for a start time.

    Slots must finish on the day they start; a start whose end would wrap
    past midnight is rejected.
    """
    start = normalize_time(start_time)
    end = derive_end_time(start)
    if to_minutes(end) <= to_minutes(start):
        raise InvalidTimeFormatError(
            f"Appointments must end on the same day; {start} runs past midnight"
        )
    return TimeSlot(date=slot_date, start_time=start, end_time=end)


def slot_start_instant(slot_date: date, start_time: str, tz_name: str | None = None) -> datetime:
    """Absolute instant at which a slot starts, in UTC."""
    tz = _get_timezone(tz_name or settings.BOOKING_TIMEZONE)
    start = time.fromisoformat(normalize_time(start_time))
    return datetime.combine(slot_date, start, tzinfo=tz).astimezone(timezone.utc)


def validate_lead_time(
    slot_date: date,
    start_time: str,
    now: datetime | None = None,
) -> None:
    """
    Require the slot to start strictly after now + lead time.

    Raises:
        InsufficientLeadTimeError: start is at or before the boundary
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    earliest = now + timedelta(hours=BOOKING_LEAD_TIME_HOURS)
    if slot_start_instant(slot_date, start_time) <= earliest:
        raise InsufficientLeadTimeError(
            f"Appointments must be scheduled at least {BOOKING_LEAD_TIME_HOURS} hours in advance"
        )


def slots_overlap(start_a: str, end_a: str, start_b: str, end_b: str) -> bool:
    """Half-open interval test: touching endpoints do not overlap."""
    return start_a < end_b and end_a > start_b
