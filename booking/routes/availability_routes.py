import logging
from datetime import date

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from booking.core import config
from booking.core.availability import (
    AvailabilityError,
    AvailabilitySettings,
    TimeSlot,
    generate_slots,
    is_slot_booked,
    to_js_weekday,
    validate_date_range,
    validate_settings,
)
from booking.core.cache import TTLCache
from booking.routes.dependencies import database_unavailable, ensure_database_ready, get_db, to_http_exception
from booking.services import inquiries, settings_store, timeslots

router = APIRouter(tags=['availability'])

logger = logging.getLogger(__name__)

SETTINGS_CACHE_KEY = 'availability-settings'
settings_cache = TTLCache()


class InitializeTimeslotsRequest(BaseModel):
    start_date: date = Field(alias='startDate')
    end_date: date = Field(alias='endDate')

    class Config:
        populate_by_name = True


class TimeslotActionResponse(BaseModel):
    count: int
    message: str


class SaveSettingsResponse(BaseModel):
    settings: AvailabilitySettings
    preview: list[TimeSlot]
    timeslots: TimeslotActionResponse


class DaySlotResponse(BaseModel):
    value: str
    label: str
    enabled: bool
    is_booked: bool


def get_current_settings(db: Session) -> AvailabilitySettings:
    return settings_cache.get_or_fetch(
        SETTINGS_CACHE_KEY,
        config.SETTINGS_CACHE_TTL_SECONDS,
        lambda: settings_store.get(db),
    )


@router.get('/settings', response_model=AvailabilitySettings)
def read_settings(db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        return get_current_settings(db)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.put('/settings', response_model=SaveSettingsResponse)
def save_settings(data: AvailabilitySettings, db: Session = Depends(get_db)):
    try:
        validate_settings(data)
    except AvailabilityError as exc:
        raise to_http_exception(exc) from exc

    ensure_database_ready()

    try:
        saved = settings_store.put(db, data)

        # Persisted slots are always rebuilt; diffing old and new settings is not attempted.
        # The staged settings row is committed together with the rebuilt slots.
        result = timeslots.update_for_new_duration(db, saved, date.today())
        settings_cache.invalidate(SETTINGS_CACHE_KEY)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Saving availability settings failed.')
        raise database_unavailable() from exc

    return SaveSettingsResponse(
        settings=saved,
        preview=generate_slots(saved),
        timeslots=TimeslotActionResponse(count=result.count, message=result.message),
    )


@router.post('/preview', response_model=list[TimeSlot])
def preview_slots(data: AvailabilitySettings):
    try:
        return generate_slots(data)
    except AvailabilityError as exc:
        raise to_http_exception(exc) from exc


@router.post('/timeslots/initialize', response_model=TimeslotActionResponse)
def initialize_timeslots(data: InitializeTimeslotsRequest, db: Session = Depends(get_db)):
    try:
        date_range = validate_date_range(data.start_date, data.end_date, date.today())
    except AvailabilityError as exc:
        raise to_http_exception(exc) from exc

    ensure_database_ready()

    try:
        result = timeslots.initialize(db, date_range, get_current_settings(db))
    except AvailabilityError as exc:
        db.rollback()
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Timeslot initialization failed.')
        raise database_unavailable() from exc

    return TimeslotActionResponse(count=result.count, message=result.message)


@router.get('/timeslots', response_model=list[TimeSlot])
def list_available_timeslots(
    day: date = Query(..., alias='date'),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        return timeslots.get_for_date(db, day)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.get('/timeslots/day', response_model=list[DaySlotResponse])
def list_day_slots(
    day: date = Query(..., alias='date'),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        settings = get_current_settings(db)
        if to_js_weekday(day) not in settings.working_days:
            return []

        booked = inquiries.booked_times(db, day) | timeslots.booked_slots(db, day)
        return [
            DaySlotResponse(
                value=slot.value,
                label=slot.label,
                enabled=slot.enabled,
                is_booked=is_slot_booked(slot.value, booked),
            )
            for slot in generate_slots(settings)
        ]
    except AvailabilityError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.post('/timeslots/cleanup', response_model=TimeslotActionResponse)
def cleanup_timeslots(db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        settings = get_current_settings(db)
        result = timeslots.cleanup(db, settings.working_days, date.today())
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Timeslot cleanup failed.')
        raise database_unavailable() from exc

    return TimeslotActionResponse(count=result.count, message=result.message)
