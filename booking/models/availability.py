"""Availability settings model definitions."""

from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, Integer, String
from booking.database import Base


class AvailabilitySettingsRecord(Base):
    """Single-row store for the working-hours configuration."""
    __tablename__ = "availability_settings"

    id = Column(Integer, primary_key=True)
    start_time = Column(String, nullable=False)
    end_time = Column(String, nullable=False)
    slot_duration = Column(Integer, nullable=False)
    breaks = Column(JSON, default=list)
    working_days = Column(JSON, default=list)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)
