"""Availability engine.

Pure functions that turn availability settings into the bookable time slots of
a working day and validate the date range slots may be generated for. Nothing
here touches the database; callers pass in consistent snapshots of settings and
bookings and re-invoke the engine whenever either changes.
"""

import re
from datetime import date, timedelta
from typing import Iterable

from pydantic import BaseModel, Field

from booking.core import config

MINUTES_PER_HOUR = 60
TIME_PATTERN = re.compile(r'^(\d{1,2}):(\d{2})$')


class AvailabilityError(ValueError):
    """Base class for rejected availability input."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidTimeWindow(AvailabilityError):
    pass


class InvalidDuration(AvailabilityError):
    pass


class RangeError(AvailabilityError):
    pass


class RangeInPast(RangeError):
    pass


class RangeTooLong(RangeError):
    pass


class RangeInverted(RangeError):
    pass


class TimeSlot(BaseModel):
    value: str
    label: str
    enabled: bool


class BreakTime(BaseModel):
    start: str
    end: str


class AvailabilitySettings(BaseModel):
    start_time: str = Field(alias='startTime')
    end_time: str = Field(alias='endTime')
    slot_duration: int = Field(alias='slotDuration')
    breaks: list[BreakTime] = Field(default_factory=list)
    working_days: list[int] = Field(default_factory=list, alias='workingDays')

    class Config:
        populate_by_name = True


class DateRange(BaseModel):
    start_date: date = Field(alias='startDate')
    end_date: date = Field(alias='endDate')

    class Config:
        populate_by_name = True


def parse_time(value: str) -> int:
    """Return minutes since midnight for an ``HH:MM`` string."""
    match = TIME_PATTERN.match((value or '').strip())
    if not match:
        raise InvalidTimeWindow(f'Invalid time "{value}". Expected HH:MM.')

    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise InvalidTimeWindow(f'Invalid time "{value}". Expected HH:MM.')

    return hours * MINUTES_PER_HOUR + minutes


def format_time_value(minutes: int) -> str:
    hours, mins = divmod(minutes, MINUTES_PER_HOUR)
    return f'{hours:02d}:{mins:02d}'


def format_time_label(value: str) -> str:
    """Render ``HH:MM`` as a 12-hour label, e.g. ``13:30`` -> ``1:30 PM``."""
    hours, minutes = divmod(parse_time(value), MINUTES_PER_HOUR)
    period = 'AM' if hours < 12 else 'PM'
    display_hours = hours % 12 or 12
    return f'{display_hours}:{minutes:02d} {period}'


def _break_windows(breaks: Iterable[BreakTime]) -> list[tuple[int, int]]:
    return [(parse_time(break_time.start), parse_time(break_time.end)) for break_time in breaks]


def _in_any_window(minutes: int, windows: list[tuple[int, int]]) -> bool:
    return any(start <= minutes < end for start, end in windows)


def is_during_break(minutes: int, breaks: Iterable[BreakTime]) -> bool:
    return _in_any_window(minutes, _break_windows(breaks))


def generate_slots(settings: AvailabilitySettings) -> list[TimeSlot]:
    """Generate the ordered slots of one working day.

    Slots start at ``start_time`` and step by ``slot_duration`` while they
    begin before ``end_time``. Slots starting inside a break are kept but
    disabled. A window with ``start_time >= end_time`` yields no slots.
    """
    if settings.slot_duration <= 0:
        raise InvalidDuration('Slot duration must be a positive number of minutes.')

    start_minutes = parse_time(settings.start_time)
    end_minutes = parse_time(settings.end_time)
    windows = _break_windows(settings.breaks)

    slots: list[TimeSlot] = []
    seen: set[str] = set()

    for minutes in range(start_minutes, end_minutes, settings.slot_duration):
        value = format_time_value(minutes)
        if value in seen:
            continue
        seen.add(value)

        slots.append(
            TimeSlot(
                value=value,
                label=format_time_label(value),
                enabled=not _in_any_window(minutes, windows),
            )
        )

    return slots


def validate_settings(settings: AvailabilitySettings) -> AvailabilitySettings:
    if settings.slot_duration <= 0:
        raise InvalidDuration('Slot duration must be a positive number of minutes.')

    if parse_time(settings.start_time) >= parse_time(settings.end_time):
        raise InvalidTimeWindow('Start time must be before end time.')

    for break_time in settings.breaks:
        if parse_time(break_time.start) >= parse_time(break_time.end):
            raise InvalidTimeWindow(
                f'Break {break_time.start}-{break_time.end} must start before it ends.'
            )

    invalid_days = [day for day in settings.working_days if day < 0 or day > 6]
    if invalid_days:
        raise AvailabilityError('Working days must be between 0 (Sunday) and 6 (Saturday).')

    return settings


def is_slot_booked(slot_value: str, booked_slots: Iterable[str]) -> bool:
    return slot_value in set(booked_slots)


def validate_date_range(
    start_date: date,
    end_date: date,
    today: date,
    horizon_days: int = config.BOOKING_HORIZON_DAYS,
) -> DateRange:
    """Check a timeslot generation range; the first violated rule wins."""
    if start_date < today:
        raise RangeInPast('Start date cannot be in the past.')

    if end_date > today + timedelta(days=horizon_days):
        raise RangeTooLong(f'Date range cannot exceed {horizon_days} days from today.')

    if start_date > end_date:
        raise RangeInverted('Start date cannot be after end date.')

    return DateRange(start_date=start_date, end_date=end_date)


def to_js_weekday(day: date) -> int:
    # date.weekday() counts from Monday; working days count from Sunday.
    return (day.weekday() + 1) % 7


def working_dates(date_range: DateRange, working_days: Iterable[int]) -> list[date]:
    allowed = set(working_days)
    dates: list[date] = []
    current = date_range.start_date

    while current <= date_range.end_date:
        if to_js_weekday(current) in allowed:
            dates.append(current)
        current += timedelta(days=1)

    return dates
