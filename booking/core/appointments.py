"""Appointment status rules and aggregations."""

from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable

PENDING = 'pending'
CONFIRMED = 'confirmed'
RESCHEDULED = 'rescheduled'
COMPLETED = 'completed'
CANCELLED = 'cancelled'

STATUSES = (PENDING, CONFIRMED, RESCHEDULED, COMPLETED, CANCELLED)
SLOT_HOLDING_STATUSES = frozenset({CONFIRMED, RESCHEDULED})

UPCOMING_FILTER = 'upcoming'
ALL_FILTER = 'all'

ALLOWED_TRANSITIONS = {
    PENDING: frozenset({CONFIRMED, CANCELLED}),
    CONFIRMED: frozenset({COMPLETED, RESCHEDULED, CANCELLED}),
    RESCHEDULED: frozenset({COMPLETED, RESCHEDULED, CANCELLED}),
    COMPLETED: frozenset(),
    CANCELLED: frozenset(),
}


class AppointmentError(ValueError):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidTransition(AppointmentError):
    pass


@dataclass(frozen=True)
class StatusCounts:
    pending: int = 0
    upcoming: int = 0
    confirmed: int = 0
    cancelled: int = 0
    rescheduled: int = 0
    completed: int = 0
    all: int = 0


def _date_key(value: Any) -> str:
    if isinstance(value, date):
        return value.isoformat()
    return value or ''


def check_transition(current: str, target: str) -> None:
    if target not in ALLOWED_TRANSITIONS.get(current, frozenset()):
        raise InvalidTransition(f'Cannot change an appointment from {current} to {target}.')


def holds_slot(status: str) -> bool:
    return status in SLOT_HOLDING_STATUSES


def is_upcoming(appointment: Any, today: date) -> bool:
    return holds_slot(appointment.status) and _date_key(appointment.preferred_date) >= today.isoformat()


def booked_slots_for_date(appointments: Iterable[Any], day: date | str) -> set[str]:
    """Times held on ``day``; completed and cancelled appointments release theirs."""
    day_key = _date_key(day)
    return {
        appointment.preferred_time
        for appointment in appointments
        if _date_key(appointment.preferred_date) == day_key and holds_slot(appointment.status)
    }


def compute_status_counts(appointments: Iterable[Any], today: date) -> StatusCounts:
    counts = {status: 0 for status in STATUSES}
    upcoming = 0
    total = 0

    for appointment in appointments:
        total += 1
        if appointment.status in counts:
            counts[appointment.status] += 1
        if is_upcoming(appointment, today):
            upcoming += 1

    return StatusCounts(upcoming=upcoming, all=total, **counts)


def _matches_search(appointment: Any, term: str) -> bool:
    lowered = term.lower()
    return (
        lowered in (appointment.name or '').lower()
        or lowered in (appointment.email or '').lower()
        or term in (appointment.phone or '')
        or lowered in (appointment.design_name or '').lower()
    )


def filter_appointments(
    appointments: Iterable[Any],
    status_filter: str = ALL_FILTER,
    search: str | None = None,
    today: date | None = None,
) -> list[Any]:
    today = today or date.today()
    filtered = list(appointments)

    if search and search.strip():
        term = search.strip()
        filtered = [appointment for appointment in filtered if _matches_search(appointment, term)]

    if status_filter == UPCOMING_FILTER:
        filtered = [appointment for appointment in filtered if is_upcoming(appointment, today)]
    elif status_filter != ALL_FILTER:
        filtered = [appointment for appointment in filtered if appointment.status == status_filter]

    return filtered
