"""
Calendar helpers
Day-of-week bucketing, week-start normalization and local <-> UTC conversion
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Union

import pytz

from practice_availability.models.availability import DayOfWeek, TimeRange, TimeSlot
from practice_availability.utils.exceptions import InvalidDateError, InvalidTimezoneError


def get_timezone(name: str) -> pytz.tzinfo.BaseTzInfo:
    """Resolve an IANA timezone name"""
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        raise InvalidTimezoneError(name)


def day_of_week(value: date) -> DayOfWeek:
    return DayOfWeek.from_date(value)


def week_start_for(value: date, week_start_day: DayOfWeek) -> date:
    """
    First date of the organisation week containing value.

    Pure in (value, week_start_day): every date of a week maps to the same result.
    """
    offset = (value.weekday() - DayOfWeek(week_start_day).index) % 7
    return value - timedelta(days=offset)


def ensure_utc(instant: datetime) -> datetime:
    """Naive timestamps are taken as UTC"""
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def local_instant(day: date, minute: int, tz: pytz.tzinfo.BaseTzInfo) -> datetime:
    """UTC instant of `minute` minutes past local midnight on `day`"""
    wall = datetime.combine(day, time.min) + timedelta(minutes=minute)
    return tz.localize(wall).astimezone(timezone.utc)


def day_bounds(day: date, tz: pytz.tzinfo.BaseTzInfo) -> TimeRange:
    """[local midnight, next local midnight) as UTC instants"""
    return TimeRange(local_instant(day, 0, tz), local_instant(day + timedelta(days=1), 0, tz))


def slot_to_range(day: date, slot: TimeSlot, tz: pytz.tzinfo.BaseTzInfo) -> TimeRange:
    """Anchor a local minute-of-day slot to an absolute range on `day`"""
    return TimeRange(
        local_instant(day, slot.start_minute, tz),
        local_instant(day, slot.end_minute, tz)
    )


def local_date_of(instant: datetime, tz: pytz.tzinfo.BaseTzInfo) -> date:
    """Calendar date of an instant as seen in tz"""
    return ensure_utc(instant).astimezone(tz).date()


def to_local_date(value: Union[date, datetime], tz: pytz.tzinfo.BaseTzInfo) -> date:
    """
    Calendar date a reference value denotes for an organisation.

    Aware datetimes are converted to tz first; naive datetimes are already
    local wall time; plain dates are returned unchanged.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.date()
        return value.astimezone(tz).date()
    return value


def parse_iso_date_or_datetime(value: str, field: str) -> Union[date, datetime]:
    """Parse YYYY-MM-DD or a full ISO-8601 timestamp"""
    if not value:
        raise InvalidDateError(field)

    text = value.strip()
    try:
        if len(text) == 10:
            return date.fromisoformat(text)
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        return datetime.fromisoformat(text)
    except ValueError:
        raise InvalidDateError(field, value)


def parse_timestamp(value: str, field: str) -> datetime:
    """Parse an absolute timestamp; a bare date means UTC midnight"""
    parsed = parse_iso_date_or_datetime(value, field)
    if not isinstance(parsed, datetime):
        parsed = datetime.combine(parsed, time.min)
    return ensure_utc(parsed)
