from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError

from booking.core.appointments import AppointmentError
from booking.core.availability import AvailabilityError
from booking.database import SessionLocal, ensure_inquiry_schema, ensure_timeslot_schema
from booking.services.inquiries import InquiryNotFound, SlotAlreadyBooked

DATABASE_UNAVAILABLE_DETAIL = 'Database unavailable. Verify DATABASE_URL and database credentials.'


def ensure_database_ready() -> None:
    try:
        ensure_timeslot_schema()
        ensure_inquiry_schema()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def database_unavailable() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=DATABASE_UNAVAILABLE_DETAIL,
    )


def to_http_exception(exc: AvailabilityError | AppointmentError) -> HTTPException:
    if isinstance(exc, InquiryNotFound):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, SlotAlreadyBooked):
        status_code = status.HTTP_409_CONFLICT
    else:
        status_code = status.HTTP_400_BAD_REQUEST

    return HTTPException(status_code=status_code, detail=exc.message)
