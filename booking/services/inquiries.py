"""Appointment (inquiry) store and status transitions.

Confirmed and rescheduled inquiries hold their (date, time) timeslot row;
completing or cancelling an inquiry releases it.
"""

import logging
from datetime import date, datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from booking.core.appointments import (
    CANCELLED,
    COMPLETED,
    CONFIRMED,
    PENDING,
    RESCHEDULED,
    AppointmentError,
    StatusCounts,
    booked_slots_for_date,
    check_transition,
    compute_status_counts,
)
from booking.models.inquiry import Inquiry
from booking.models.timeslot import Timeslot
from booking.services import notifications

logger = logging.getLogger(__name__)


class InquiryNotFound(AppointmentError):
    pass


class SlotAlreadyBooked(AppointmentError):
    pass


class NoInquiriesSelected(AppointmentError):
    pass


def list_inquiries(db: Session) -> list[Inquiry]:
    return db.query(Inquiry).order_by(Inquiry.submitted_at.desc(), Inquiry.id.desc()).all()


def get_inquiry(db: Session, inquiry_id: int) -> Inquiry:
    inquiry = db.query(Inquiry).filter(Inquiry.id == inquiry_id).first()
    if inquiry is None:
        raise InquiryNotFound('Inquiry not found.')
    return inquiry


def create_inquiry(
    db: Session,
    *,
    name: str,
    email: str,
    preferred_date: date,
    preferred_time: str,
    meeting_type: str = 'onsite',
    phone: str = '',
    message: str = '',
    design_id: str | None = None,
    design_name: str | None = None,
    design_price: float | None = None,
) -> Inquiry:
    inquiry = Inquiry(
        name=name,
        email=email,
        phone=phone,
        message=message,
        preferred_date=preferred_date.isoformat(),
        preferred_time=preferred_time,
        meeting_type=meeting_type,
        design_id=design_id,
        design_name=design_name,
        design_price=design_price,
        submitted_at=datetime.now(),
        status=PENDING,
    )
    db.add(inquiry)
    db.commit()
    db.refresh(inquiry)

    notifications.dispatch(db, inquiry, notifications.NEW_INQUIRY_EVENT)
    return inquiry


def _find_slot(db: Session, day: str, time_value: str) -> Timeslot | None:
    return db.query(Timeslot).filter(Timeslot.date == day, Timeslot.time == time_value).first()


def _ensure_slot_free(db: Session, inquiry: Inquiry, day: str, time_value: str) -> None:
    existing = _find_slot(db, day, time_value)
    if existing is not None and not existing.is_available and existing.inquiry_id != inquiry.id:
        raise SlotAlreadyBooked('This time slot is already booked.')


def _book_slot(db: Session, inquiry: Inquiry, day: str, time_value: str) -> None:
    _ensure_slot_free(db, inquiry, day, time_value)

    timeslot = _find_slot(db, day, time_value)
    if timeslot is None:
        timeslot = Timeslot(date=day, time=time_value)
        db.add(timeslot)

    timeslot.is_available = False
    timeslot.inquiry_id = inquiry.id
    timeslot.meeting_type = inquiry.meeting_type
    timeslot.updated_at = datetime.now()


def _commit_booking(db: Session) -> None:
    # Another session may insert the same (date, time) between the check and this commit.
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise SlotAlreadyBooked('This time slot is already booked.') from exc


def _release_slot(db: Session, inquiry: Inquiry) -> None:
    timeslot = _find_slot(db, inquiry.preferred_date, inquiry.preferred_time)
    if timeslot is None or timeslot.inquiry_id != inquiry.id:
        return

    timeslot.is_available = True
    timeslot.inquiry_id = None
    timeslot.meeting_type = None
    timeslot.updated_at = datetime.now()


def confirm(db: Session, inquiry_id: int) -> Inquiry:
    inquiry = get_inquiry(db, inquiry_id)
    check_transition(inquiry.status, CONFIRMED)

    _book_slot(db, inquiry, inquiry.preferred_date, inquiry.preferred_time)
    inquiry.status = CONFIRMED
    _commit_booking(db)
    db.refresh(inquiry)

    notifications.dispatch(db, inquiry, CONFIRMED)
    return inquiry


def cancel(db: Session, inquiry_id: int, reason: str) -> Inquiry:
    inquiry = get_inquiry(db, inquiry_id)
    check_transition(inquiry.status, CANCELLED)

    _release_slot(db, inquiry)
    inquiry.status = CANCELLED
    inquiry.cancellation_reason = reason
    db.commit()
    db.refresh(inquiry)

    notifications.dispatch(db, inquiry, CANCELLED, reason=reason)
    return inquiry


def reschedule(
    db: Session,
    inquiry_id: int,
    new_date: date,
    new_time: str,
    notes: str | None = None,
) -> Inquiry:
    inquiry = get_inquiry(db, inquiry_id)
    check_transition(inquiry.status, RESCHEDULED)

    day = new_date.isoformat()
    _ensure_slot_free(db, inquiry, day, new_time)

    _release_slot(db, inquiry)
    db.flush()
    _book_slot(db, inquiry, day, new_time)

    inquiry.status = RESCHEDULED
    inquiry.preferred_date = day
    inquiry.preferred_time = new_time
    if notes:
        inquiry.reschedule_notes = notes
    _commit_booking(db)
    db.refresh(inquiry)

    notifications.dispatch(db, inquiry, RESCHEDULED, new_date=day, new_time=new_time, notes=notes)
    return inquiry


def complete(db: Session, inquiry_id: int) -> Inquiry:
    inquiry = get_inquiry(db, inquiry_id)
    check_transition(inquiry.status, COMPLETED)

    _release_slot(db, inquiry)
    inquiry.status = COMPLETED
    db.commit()
    db.refresh(inquiry)

    notifications.dispatch(db, inquiry, COMPLETED)
    return inquiry


def delete(db: Session, inquiry_ids: list[int]) -> int:
    if not inquiry_ids:
        raise NoInquiriesSelected('No inquiry IDs provided.')

    inquiries = db.query(Inquiry).filter(Inquiry.id.in_(inquiry_ids)).all()
    if not inquiries:
        raise InquiryNotFound('No inquiries found to delete.')

    for inquiry in inquiries:
        _release_slot(db, inquiry)
    db.flush()

    for inquiry in inquiries:
        db.delete(inquiry)
    db.commit()

    logger.info('Deleted %s inquiries', len(inquiries))
    return len(inquiries)


def status_counts(db: Session, today: date) -> StatusCounts:
    return compute_status_counts(list_inquiries(db), today)


def booked_times(db: Session, day: date) -> set[str]:
    inquiries = db.query(Inquiry).filter(Inquiry.preferred_date == day.isoformat()).all()
    return booked_slots_for_date(inquiries, day)
