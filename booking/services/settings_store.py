"""Persistence for the working-hours configuration."""

from sqlalchemy.orm import Session

from booking.core import config
from booking.core.availability import AvailabilitySettings, BreakTime, validate_settings
from booking.models.availability import AvailabilitySettingsRecord


def default_settings() -> AvailabilitySettings:
    return AvailabilitySettings(
        start_time=config.DEFAULT_START_TIME,
        end_time=config.DEFAULT_END_TIME,
        slot_duration=config.DEFAULT_SLOT_DURATION_MINUTES,
        breaks=[BreakTime(**break_time) for break_time in config.DEFAULT_BREAKS],
        working_days=list(config.DEFAULT_WORKING_DAYS),
    )


def get(db: Session) -> AvailabilitySettings:
    record = db.query(AvailabilitySettingsRecord).order_by(AvailabilitySettingsRecord.id.asc()).first()
    if record is None:
        return default_settings()

    return AvailabilitySettings(
        start_time=record.start_time,
        end_time=record.end_time,
        slot_duration=record.slot_duration,
        breaks=[BreakTime(**break_time) for break_time in record.breaks or []],
        working_days=list(record.working_days or []),
    )


def put(db: Session, settings: AvailabilitySettings) -> AvailabilitySettings:
    """Stage the settings row; the caller commits once dependent rows are rebuilt."""
    validate_settings(settings)

    record = db.query(AvailabilitySettingsRecord).order_by(AvailabilitySettingsRecord.id.asc()).first()
    if record is None:
        record = AvailabilitySettingsRecord()
        db.add(record)

    record.start_time = settings.start_time
    record.end_time = settings.end_time
    record.slot_duration = settings.slot_duration
    record.breaks = [break_time.model_dump() for break_time in settings.breaks]
    record.working_days = sorted(set(settings.working_days))

    db.flush()

    return get(db)
