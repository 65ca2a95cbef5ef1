"""Materialized timeslot persistence.

Rows are written per (date, time) for every enabled slot of a working day.
Booked rows (``is_available`` false) are never deleted or duplicated by
regeneration; only free rows are replaced.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from sqlalchemy.orm import Session

from booking.core import config
from booking.core.availability import (
    AvailabilitySettings,
    DateRange,
    TimeSlot,
    format_time_label,
    generate_slots,
    to_js_weekday,
    working_dates,
)
from booking.models.timeslot import Timeslot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimeslotResult:
    count: int
    message: str


def horizon_range(today: date, horizon_days: int = config.BOOKING_HORIZON_DAYS) -> DateRange:
    return DateRange(start_date=today, end_date=today + timedelta(days=horizon_days))


def _delete_available(db: Session, date_range: DateRange) -> int:
    return db.query(Timeslot).filter(
        Timeslot.date >= date_range.start_date.isoformat(),
        Timeslot.date <= date_range.end_date.isoformat(),
        Timeslot.is_available.is_(True),
    ).delete(synchronize_session=False)


def initialize(db: Session, date_range: DateRange, settings: AvailabilitySettings) -> TimeslotResult:
    _delete_available(db, date_range)

    enabled_times = [slot.value for slot in generate_slots(settings) if slot.enabled]
    existing = {
        (row.date, row.time)
        for row in db.query(Timeslot.date, Timeslot.time).filter(
            Timeslot.date >= date_range.start_date.isoformat(),
            Timeslot.date <= date_range.end_date.isoformat(),
        ).all()
    }

    now = datetime.now()
    created = 0
    for day in working_dates(date_range, settings.working_days):
        day_key = day.isoformat()
        for time_value in enabled_times:
            if (day_key, time_value) in existing:
                continue
            db.add(
                Timeslot(
                    date=day_key,
                    time=time_value,
                    is_available=True,
                    created_at=now,
                    updated_at=now,
                )
            )
            created += 1

    db.commit()

    working_day_count = len(set(settings.working_days))
    logger.info(
        'Initialized %s timeslots between %s and %s',
        created,
        date_range.start_date,
        date_range.end_date,
    )
    return TimeslotResult(
        count=created,
        message=(
            f'Initialized {created} timeslots for {working_day_count} working days '
            f'with {settings.slot_duration}-minute slots'
        ),
    )


def get_for_date(db: Session, day: date) -> list[TimeSlot]:
    rows = db.query(Timeslot.time).filter(
        Timeslot.date == day.isoformat(),
        Timeslot.is_available.is_(True),
    ).order_by(Timeslot.time.asc()).all()

    slots: list[TimeSlot] = []
    seen: set[str] = set()
    for (time_value,) in rows:
        if time_value in seen:
            continue
        seen.add(time_value)
        slots.append(TimeSlot(value=time_value, label=format_time_label(time_value), enabled=True))

    return slots


def booked_slots(db: Session, day: date) -> set[str]:
    rows = db.query(Timeslot.time).filter(
        Timeslot.date == day.isoformat(),
        Timeslot.is_available.is_(False),
    ).all()
    return {time_value for (time_value,) in rows}


def cleanup(db: Session, working_days: list[int], today: date) -> TimeslotResult:
    window = horizon_range(today)
    allowed = set(working_days)

    candidates = db.query(Timeslot).filter(
        Timeslot.date >= window.start_date.isoformat(),
        Timeslot.date <= window.end_date.isoformat(),
        Timeslot.is_available.is_(True),
    ).all()

    deleted = 0
    for timeslot in candidates:
        if to_js_weekday(date.fromisoformat(timeslot.date)) not in allowed:
            db.delete(timeslot)
            deleted += 1

    db.commit()

    logger.info('Removed %s timeslots from non-working days', deleted)
    return TimeslotResult(count=deleted, message=f'Cleaned up {deleted} timeslots from non-working days')


def update_for_new_duration(db: Session, settings: AvailabilitySettings, today: date) -> TimeslotResult:
    return initialize(db, horizon_range(today), settings)
