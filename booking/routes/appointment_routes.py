from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from booking.core.appointments import (
    ALL_FILTER,
    STATUSES,
    UPCOMING_FILTER,
    AppointmentError,
    filter_appointments,
)
from booking.core.availability import format_time_label, parse_time
from booking.routes.dependencies import database_unavailable, ensure_database_ready, get_db, to_http_exception
from booking.services import inquiries

router = APIRouter(tags=['appointments'])

MEETING_TYPES = ('phone', 'onsite', 'video')
MAX_MESSAGE_LENGTH = 1000
STATUS_FILTERS = (UPCOMING_FILTER, ALL_FILTER, *STATUSES)


def _normalize_time(value: str) -> str:
    normalized = value.strip()
    parse_time(normalized)
    hours, minutes = normalized.split(':')
    return f'{int(hours):02d}:{minutes}'


class CreateInquiryRequest(BaseModel):
    name: str
    email: str
    phone: str = ''
    message: str = ''
    preferred_date: date
    preferred_time: str
    meeting_type: str = 'onsite'
    design_id: str | None = None
    design_name: str | None = None
    design_price: float | None = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Name is required.')
        return normalized

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        normalized = value.strip().lower()
        if not normalized or '@' not in normalized:
            raise ValueError('A valid email is required.')
        return normalized

    @field_validator('preferred_time')
    @classmethod
    def validate_preferred_time(cls, value: str) -> str:
        return _normalize_time(value)

    @field_validator('meeting_type')
    @classmethod
    def validate_meeting_type(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in MEETING_TYPES:
            raise ValueError('Invalid meeting type.')
        return normalized

    @field_validator('message')
    @classmethod
    def validate_message(cls, value: str) -> str:
        normalized = value.strip()
        if len(normalized) > MAX_MESSAGE_LENGTH:
            raise ValueError(f'Message must be {MAX_MESSAGE_LENGTH} characters or fewer.')
        return normalized


class CancelInquiryRequest(BaseModel):
    reason: str

    @field_validator('reason')
    @classmethod
    def validate_reason(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('A cancellation reason is required.')
        return normalized


class RescheduleInquiryRequest(BaseModel):
    new_date: date
    new_time: str
    notes: str | None = None

    @field_validator('new_time')
    @classmethod
    def validate_time(cls, value: str) -> str:
        return _normalize_time(value)

    @field_validator('notes')
    @classmethod
    def validate_notes(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None


class DeleteInquiriesRequest(BaseModel):
    ids: list[int]


class DeleteInquiriesResponse(BaseModel):
    deleted: int


class InquiryResponse(BaseModel):
    id: int
    name: str
    email: str
    phone: str | None = None
    message: str | None = None
    preferred_date: str
    preferred_time: str
    preferred_time_label: str
    meeting_type: str | None = None
    design_id: str | None = None
    design_name: str | None = None
    design_price: float | None = None
    submitted_at: datetime | None = None
    status: str
    cancellation_reason: str | None = None
    reschedule_notes: str | None = None


class StatusCountsResponse(BaseModel):
    pending: int
    upcoming: int
    confirmed: int
    cancelled: int
    rescheduled: int
    completed: int
    all: int


def to_inquiry_response(inquiry) -> InquiryResponse:
    return InquiryResponse(
        id=inquiry.id,
        name=inquiry.name,
        email=inquiry.email,
        phone=inquiry.phone,
        message=inquiry.message,
        preferred_date=inquiry.preferred_date,
        preferred_time=inquiry.preferred_time,
        preferred_time_label=format_time_label(inquiry.preferred_time),
        meeting_type=inquiry.meeting_type,
        design_id=inquiry.design_id,
        design_name=inquiry.design_name,
        design_price=inquiry.design_price,
        submitted_at=inquiry.submitted_at,
        status=inquiry.status,
        cancellation_reason=inquiry.cancellation_reason,
        reschedule_notes=inquiry.reschedule_notes,
    )


@router.get('/', response_model=list[InquiryResponse])
def list_inquiries(
    status_filter: str = Query(default=ALL_FILTER, alias='status'),
    search: str | None = Query(default=None),
    db: Session = Depends(get_db),
):
    normalized_filter = status_filter.strip().lower()
    if normalized_filter not in STATUS_FILTERS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Invalid status filter.',
        )

    ensure_database_ready()

    try:
        filtered = filter_appointments(
            inquiries.list_inquiries(db),
            status_filter=normalized_filter,
            search=search,
            today=date.today(),
        )
        return [to_inquiry_response(inquiry) for inquiry in filtered]
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.get('/stats', response_model=StatusCountsResponse)
def read_status_counts(db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        counts = inquiries.status_counts(db, date.today())
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc

    return StatusCountsResponse(
        pending=counts.pending,
        upcoming=counts.upcoming,
        confirmed=counts.confirmed,
        cancelled=counts.cancelled,
        rescheduled=counts.rescheduled,
        completed=counts.completed,
        all=counts.all,
    )


@router.post('/', response_model=InquiryResponse, status_code=status.HTTP_201_CREATED)
def create_inquiry(data: CreateInquiryRequest, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        inquiry = inquiries.create_inquiry(db, **data.model_dump())
        return to_inquiry_response(inquiry)
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc


@router.post('/{inquiry_id}/confirm', response_model=InquiryResponse)
def confirm_inquiry(inquiry_id: int, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        return to_inquiry_response(inquiries.confirm(db, inquiry_id))
    except AppointmentError as exc:
        db.rollback()
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc


@router.post('/{inquiry_id}/cancel', response_model=InquiryResponse)
def cancel_inquiry(inquiry_id: int, data: CancelInquiryRequest, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        return to_inquiry_response(inquiries.cancel(db, inquiry_id, data.reason))
    except AppointmentError as exc:
        db.rollback()
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc


@router.post('/{inquiry_id}/reschedule', response_model=InquiryResponse)
def reschedule_inquiry(inquiry_id: int, data: RescheduleInquiryRequest, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        inquiry = inquiries.reschedule(db, inquiry_id, data.new_date, data.new_time, data.notes)
        return to_inquiry_response(inquiry)
    except AppointmentError as exc:
        db.rollback()
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc


@router.post('/{inquiry_id}/complete', response_model=InquiryResponse)
def complete_inquiry(inquiry_id: int, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        return to_inquiry_response(inquiries.complete(db, inquiry_id))
    except AppointmentError as exc:
        db.rollback()
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc


@router.delete('/', response_model=DeleteInquiriesResponse)
def delete_inquiries(data: DeleteInquiriesRequest, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        return DeleteInquiriesResponse(deleted=inquiries.delete(db, data.ids))
    except AppointmentError as exc:
        db.rollback()
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc
