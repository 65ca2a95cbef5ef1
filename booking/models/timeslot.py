"""Timeslot model definitions."""

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from booking.database import Base


class Timeslot(Base):
    """A materialized bookable time on a given date."""
    __tablename__ = "timeslots"
    __table_args__ = (UniqueConstraint("date", "time", name="uq_timeslots_date_time"),)

    id = Column(Integer, primary_key=True)
    date = Column(String, nullable=False)  # YYYY-MM-DD
    time = Column(String, nullable=False)  # HH:MM
    is_available = Column(Boolean, nullable=False, default=True)
    inquiry_id = Column(Integer, ForeignKey("inquiries.id"), nullable=True)
    meeting_type = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)
