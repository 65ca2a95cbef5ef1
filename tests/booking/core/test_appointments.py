from datetime import date
from types import SimpleNamespace

import pytest

from booking.core.appointments import (
    STATUSES,
    InvalidTransition,
    StatusCounts,
    booked_slots_for_date,
    check_transition,
    compute_status_counts,
    filter_appointments,
    holds_slot,
)

TODAY = date(2026, 3, 10)
PAST = '2026-03-01'
FUTURE = '2026-03-12'


def appointment(status: str, preferred_date: str = FUTURE, preferred_time: str = '09:00', **fields):
    defaults = {
        'name': 'Juan Dela Cruz',
        'email': 'juan@example.com',
        'phone': '09170000000',
        'design_name': 'Modern Bungalow',
    }
    defaults.update(fields)
    return SimpleNamespace(status=status, preferred_date=preferred_date, preferred_time=preferred_time, **defaults)


def sample_appointments():
    return [
        appointment('pending'),
        appointment('pending'),
        appointment('confirmed', PAST),
        appointment('confirmed', FUTURE),
        appointment('confirmed', TODAY.isoformat()),
        appointment('rescheduled', FUTURE),
        appointment('cancelled'),
        appointment('completed'),
    ]


def test_compute_status_counts() -> None:
    counts = compute_status_counts(sample_appointments(), TODAY)

    assert counts == StatusCounts(
        pending=2,
        upcoming=3,
        confirmed=3,
        cancelled=1,
        rescheduled=1,
        completed=1,
        all=8,
    )


def test_compute_status_counts_is_order_independent() -> None:
    appointments = sample_appointments()

    assert compute_status_counts(reversed(appointments), TODAY) == compute_status_counts(appointments, TODAY)


def test_compute_status_counts_for_no_appointments() -> None:
    assert compute_status_counts([], TODAY) == StatusCounts()


@pytest.mark.parametrize(
    ('current', 'target'),
    [
        ('pending', 'confirmed'),
        ('pending', 'cancelled'),
        ('confirmed', 'completed'),
        ('confirmed', 'rescheduled'),
        ('confirmed', 'cancelled'),
        ('rescheduled', 'completed'),
        ('rescheduled', 'rescheduled'),
        ('rescheduled', 'cancelled'),
    ],
)
def test_check_transition_allows_workflow_steps(current: str, target: str) -> None:
    check_transition(current, target)


@pytest.mark.parametrize(
    ('current', 'target'),
    [
        ('pending', 'completed'),
        ('pending', 'rescheduled'),
        ('completed', 'cancelled'),
        ('cancelled', 'confirmed'),
        ('confirmed', 'confirmed'),
    ],
)
def test_check_transition_rejects_other_steps(current: str, target: str) -> None:
    with pytest.raises(InvalidTransition):
        check_transition(current, target)


def test_holds_slot_only_for_confirmed_and_rescheduled() -> None:
    assert holds_slot('confirmed')
    assert holds_slot('rescheduled')
    assert not holds_slot('pending')
    assert not holds_slot('completed')
    assert not holds_slot('cancelled')


def test_booked_slots_for_date_releases_finished_appointments() -> None:
    held = appointment('confirmed', FUTURE, '09:00')
    appointments = [
        held,
        appointment('rescheduled', FUTURE, '10:00'),
        appointment('pending', FUTURE, '11:00'),
        appointment('confirmed', PAST, '13:00'),
    ]

    assert booked_slots_for_date(appointments, date(2026, 3, 12)) == {'09:00', '10:00'}

    held.status = 'completed'
    assert booked_slots_for_date(appointments, FUTURE) == {'10:00'}


def test_booked_slots_move_with_reschedule() -> None:
    moved = appointment('confirmed', FUTURE, '09:00')

    moved.status = 'rescheduled'
    moved.preferred_time = '14:00'

    assert booked_slots_for_date([moved], FUTURE) == {'14:00'}


def test_filter_appointments_upcoming() -> None:
    filtered = filter_appointments(sample_appointments(), 'upcoming', today=TODAY)

    assert [item.status for item in filtered] == ['confirmed', 'confirmed', 'rescheduled']


def test_filter_appointments_by_status_and_search() -> None:
    appointments = [
        appointment('pending', name='Ana Reyes', email='ana@example.com'),
        appointment('pending', phone='09998887777'),
        appointment('confirmed', design_name='Loft House'),
    ]

    assert len(filter_appointments(appointments, 'pending', today=TODAY)) == 2
    assert len(filter_appointments(appointments, 'all', search='ANA', today=TODAY)) == 1
    assert len(filter_appointments(appointments, 'all', search='99988', today=TODAY)) == 1
    assert len(filter_appointments(appointments, 'all', search='loft', today=TODAY)) == 1


@pytest.mark.parametrize('current', ['completed', 'cancelled'])
@pytest.mark.parametrize('target', STATUSES)
def test_completed_and_cancelled_have_no_exits(current: str, target: str) -> None:
    with pytest.raises(InvalidTransition):
        check_transition(current, target)
